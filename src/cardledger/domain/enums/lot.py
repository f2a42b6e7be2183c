from enum import Enum


class LotSource(str, Enum):
    """Where a lot came from. Provisional lots are auto-created by reconciliation."""

    PURCHASE = "purchase"
    PROVISIONAL = "provisional"
    ADJUSTMENT = "adjustment"


class AllocationMethod(str, Enum):
    EQUAL_PER_CARD = "equal_per_card"
    PROPORTIONAL_TO_MARKET_VALUE = "proportional_to_market_value"
    MANUAL = "manual"
