from cardledger.db.repos.acquisition_repo import AcquisitionRepo
from cardledger.db.repos.allocation_repo import AllocationRepo
from cardledger.db.repos.event_repo import ScanRepo, SellRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.db.repos.price_point_repo import PricePointRepo

__all__ = ["AcquisitionRepo", "AllocationRepo", "LotRepo", "PricePointRepo", "ScanRepo", "SellRepo"]
