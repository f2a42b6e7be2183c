from cardledger.domain.enums.event import EventKind, FailureKind
from cardledger.domain.enums.finish import Finish
from cardledger.domain.enums.language import Language
from cardledger.domain.enums.lot import AllocationMethod, LotSource
from cardledger.domain.enums.provider import PriceProvider

__all__ = [
    "AllocationMethod",
    "EventKind",
    "FailureKind",
    "Finish",
    "Language",
    "LotSource",
    "PriceProvider",
]
