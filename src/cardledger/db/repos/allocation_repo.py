from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.sell_allocation import SellAllocation


class AllocationRepo:
    """Append-only store of SellAllocation rows."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, transaction_id: int, lot_id: int, quantity: int) -> SellAllocation:
        if quantity <= 0:
            raise ValueError(f"Allocation quantity must be positive: {quantity}")
        allocation = SellAllocation(transaction_id=transaction_id, lot_id=lot_id, quantity=quantity)
        self._session.add(allocation)
        await self._session.flush()
        return allocation

    async def sum_for_lot(self, lot_id: int) -> int:
        result = await self._session.execute(
            select(func.coalesce(func.sum(SellAllocation.quantity), 0)).where(SellAllocation.lot_id == lot_id)
        )
        return int(result.scalar_one())

    async def sums_for_lots(self, lot_ids: list[int]) -> dict[int, int]:
        """Allocated quantity per lot id; lots without allocations map to 0."""
        sums = {lot_id: 0 for lot_id in lot_ids}
        if not lot_ids:
            return sums
        result = await self._session.execute(
            select(SellAllocation.lot_id, func.sum(SellAllocation.quantity))
            .where(SellAllocation.lot_id.in_(lot_ids))
            .group_by(SellAllocation.lot_id)
        )
        for lot_id, total in result.all():
            sums[lot_id] = int(total)
        return sums

    async def sum_for_transaction(self, transaction_id: int) -> int:
        result = await self._session.execute(
            select(func.coalesce(func.sum(SellAllocation.quantity), 0))
            .where(SellAllocation.transaction_id == transaction_id)
        )
        return int(result.scalar_one())

    async def list_for_lots(self, lot_ids: list[int]) -> list[SellAllocation]:
        if not lot_ids:
            return []
        result = await self._session.execute(
            select(SellAllocation)
            .where(SellAllocation.lot_id.in_(lot_ids))
            .order_by(SellAllocation.id.asc())
        )
        return list(result.scalars().all())

    async def list_for_transaction(self, transaction_id: int) -> list[SellAllocation]:
        result = await self._session.execute(
            select(SellAllocation)
            .where(SellAllocation.transaction_id == transaction_id)
            .order_by(SellAllocation.id.asc())
        )
        return list(result.scalars().all())
