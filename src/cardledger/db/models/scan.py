import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cardledger.db.session import Base, IntPrimaryKey, TimestampMixin


class Scan(IntPrimaryKey, TimestampMixin, Base):
    """Physical verification of a card. Observed fields are immutable; only lot_id is set later."""

    __tablename__ = "scans"

    card_id: Mapped[Optional[str]] = mapped_column(String(255), default=None, index=True)
    set_code: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    number: Mapped[Optional[str]] = mapped_column(String(20), default=None)
    name: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    fingerprint: Mapped[str] = mapped_column(String(255), index=True)
    finish: Mapped[str] = mapped_column(String(20))
    language: Mapped[str] = mapped_column(String(10))
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    observed_at: Mapped[datetime] = mapped_column()
    acquisition_id: Mapped[Optional[uuid.UUID]] = mapped_column(ForeignKey("acquisitions.id"), default=None)
    lot_id: Mapped[Optional[int]] = mapped_column(ForeignKey("card_lots.id"), default=None, index=True)
