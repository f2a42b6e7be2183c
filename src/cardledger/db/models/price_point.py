"""Provider price quotes, one row per (card, provider, finish, date)."""

import datetime as dt

from sqlalchemy import BigInteger, Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cardledger.db.session import Base, IntPrimaryKey, TimestampMixin


class PricePoint(IntPrimaryKey, TimestampMixin, Base):
    __tablename__ = "price_points"
    __table_args__ = (
        UniqueConstraint("card_id", "provider", "finish", "date", name="uq_price_points_identity"),
    )

    card_id: Mapped[str] = mapped_column(String(255), index=True)
    provider: Mapped[str] = mapped_column(String(50))  # cardmarket.priceguide / mtgjson.cardmarket / scryfall
    finish: Mapped[str] = mapped_column(String(20))
    date: Mapped[dt.date] = mapped_column(Date)
    currency: Mapped[str] = mapped_column(String(10), default="EUR")
    price_cent: Mapped[int] = mapped_column(BigInteger)
    as_of: Mapped[dt.datetime] = mapped_column()
