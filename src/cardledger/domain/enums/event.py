from enum import Enum


class EventKind(str, Enum):
    SCAN = "scan"
    SELL = "sell"
    ACQUISITION = "acquisition"
    PRICE = "price"


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    INSUFFICIENT_INVENTORY = "insufficient_inventory"
    UNRECONCILED_INPUT = "unreconciled_input"
