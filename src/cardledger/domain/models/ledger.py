"""Result types for reconciliation runs and acquisition P&L."""

import uuid
from decimal import Decimal

from pydantic import BaseModel

from cardledger.domain.enums import FailureKind


class ReconcileFailure(BaseModel):
    """A genuine error found during a batch run. Reported, never dropped."""

    kind: FailureKind
    ref: str  # e.g. "sell:42"
    message: str


class ReconcileReport(BaseModel):
    identities: int = 0
    scans_linked: int = 0
    sales_allocated: int = 0
    provisional_lots_created: int = 0
    failures: list[ReconcileFailure] = []


class LotPnL(BaseModel):
    lot_id: int
    card_id: str
    quantity: int
    sold_quantity: int
    unit_cost: Decimal
    cost_cent: int
    revenue_cent: int
    market_price_cent: int | None = None
    unrealized_cent: int = 0


class AcquisitionPnL(BaseModel):
    acquisition_id: uuid.UUID
    revenue_cent: int = 0
    cost_cent: int = 0
    profit_cent: int = 0
    unrealized_cent: int = 0
    lots: list[LotPnL] = []
