from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from cardledger.db.session import Base, IntPrimaryKey, TimestampMixin


class SellAllocation(IntPrimaryKey, TimestampMixin, Base):
    """Part of a sell transaction satisfied from a specific lot. Append-only."""

    __tablename__ = "sell_allocations"
    __table_args__ = (CheckConstraint("quantity > 0", name="quantity_positive"),)

    transaction_id: Mapped[int] = mapped_column(ForeignKey("sell_transactions.id"), index=True)
    lot_id: Mapped[int] = mapped_column(ForeignKey("card_lots.id"), index=True)
    quantity: Mapped[int] = mapped_column(Integer)
