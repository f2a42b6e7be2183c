"""CardLot: a quantity-bearing holding of one card variant."""

import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from cardledger.db.session import Base, IntPrimaryKey, TimestampMixin
from cardledger.domain.enums import Finish, LotSource


class CardLot(IntPrimaryKey, TimestampMixin, Base):
    """Never deleted; depletion is tracked through SellAllocation rows."""

    __tablename__ = "card_lots"
    __table_args__ = (
        Index("ix_card_lots_identity", "card_id", "finish", "language"),
    )

    card_id: Mapped[str] = mapped_column(String(255), index=True)
    fingerprint: Mapped[str] = mapped_column(String(255), index=True)
    finish: Mapped[str] = mapped_column(String(20), default=Finish.NONFOIL.value)
    language: Mapped[str] = mapped_column(String(10), default="EN")
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(20, 8), default=Decimal(0))  # cents
    condition: Mapped[str] = mapped_column(String(50), default="Near Mint")
    foil: Mapped[bool] = mapped_column(Boolean, default=False)
    source: Mapped[str] = mapped_column(String(20), default=LotSource.PURCHASE.value)
    purchased_at: Mapped[datetime] = mapped_column()
    acquisition_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("acquisitions.id"), default=None, index=True)


def lot_cost_cent(lot: CardLot) -> int:
    """Total cost carried by a lot, rounded half-up to a whole cent."""
    return int((Decimal(lot.unit_cost or 0) * lot.quantity).quantize(Decimal(1), rounding=ROUND_HALF_UP))
