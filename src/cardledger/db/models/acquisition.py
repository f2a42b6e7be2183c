from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from cardledger.db.session import Base, TimestampMixin, UUIDPrimaryKey
from cardledger.domain.enums import AllocationMethod


class Acquisition(UUIDPrimaryKey, TimestampMixin, Base):
    """A cost-bearing purchase batch (box, collection buy, singles order)."""

    __tablename__ = "acquisitions"

    name: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    total_price_cent: Mapped[int] = mapped_column(BigInteger, default=0)
    total_fees_cent: Mapped[int] = mapped_column(BigInteger, default=0)
    total_shipping_cent: Mapped[int] = mapped_column(BigInteger, default=0)
    total_cost_cent: Mapped[int] = mapped_column(BigInteger, default=0)  # price + fees + shipping
    currency: Mapped[str] = mapped_column(String(10), default="EUR")
    allocation_method: Mapped[str] = mapped_column(String(40), default=AllocationMethod.EQUAL_PER_CARD.value)
    allocated_at: Mapped[Optional[datetime]] = mapped_column(default=None)
    purchased_at: Mapped[datetime] = mapped_column()
