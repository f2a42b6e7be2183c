"""Domain errors raised by the ledger services."""


class CardLedgerError(Exception):
    """Base class for all ledger errors."""


class NotFoundError(CardLedgerError):
    """A record referenced by id does not exist."""

    def __init__(self, kind: str, ref: object) -> None:
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind} {ref} not found")


class InsufficientInventoryError(CardLedgerError):
    """A sale would allocate more than the remaining stock."""

    def __init__(self, transaction_id: object, requested: int, available: int) -> None:
        self.transaction_id = transaction_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Sell transaction {transaction_id} needs {requested} but only {available} remaining"
        )


class AllocationMismatchError(CardLedgerError):
    """Lot costs of an acquisition do not add up to its total cost."""

    def __init__(self, acquisition_id: object, expected_cent: int, actual_cent: int) -> None:
        self.acquisition_id = acquisition_id
        self.expected_cent = expected_cent
        self.actual_cent = actual_cent
        super().__init__(
            f"Acquisition {acquisition_id}: lot costs sum to {actual_cent} cents, expected {expected_cent}"
        )
