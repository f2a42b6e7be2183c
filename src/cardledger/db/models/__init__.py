from cardledger.db.models.acquisition import Acquisition
from cardledger.db.models.card_lot import CardLot
from cardledger.db.models.price_point import PricePoint
from cardledger.db.models.scan import Scan
from cardledger.db.models.sell_allocation import SellAllocation
from cardledger.db.models.sell_transaction import SellTransaction

__all__ = [
    "Acquisition",
    "CardLot",
    "PricePoint",
    "Scan",
    "SellAllocation",
    "SellTransaction",
]
