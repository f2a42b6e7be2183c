from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cardledger.db.session import Base, IntPrimaryKey, TimestampMixin


class SellTransaction(IntPrimaryKey, TimestampMixin, Base):
    """A sale of one card variant. Allocated quantity lives in SellAllocation."""

    __tablename__ = "sell_transactions"

    card_id: Mapped[Optional[str]] = mapped_column(String(255), default=None, index=True)
    set_code: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    number: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    name: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    fingerprint: Mapped[str] = mapped_column(String(255), index=True)
    finish: Mapped[str] = mapped_column(String(20))
    language: Mapped[str] = mapped_column(String(10))
    quantity: Mapped[int] = mapped_column(Integer)
    price_cent: Mapped[int] = mapped_column(BigInteger)  # per unit
    fees_cent: Mapped[int] = mapped_column(BigInteger, default=0)
    shipping_cent: Mapped[int] = mapped_column(BigInteger, default=0)
    currency: Mapped[str] = mapped_column(String(10), default="EUR")
    happened_at: Mapped[datetime] = mapped_column()
    external_ref: Mapped[Optional[str]] = mapped_column(String(255), default=None)
