"""Scans and sell transactions, the two event streams the reconciler consumes."""

from typing import Optional

from sqlalchemy import and_, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.scan import Scan
from cardledger.db.models.sell_allocation import SellAllocation
from cardledger.db.models.sell_transaction import SellTransaction
from cardledger.domain.models.identity import NormalizedKey


def _identity_filter(model, identity: NormalizedKey) -> list:
    if identity.card_id:
        return [
            or_(
                and_(
                    model.card_id == identity.card_id,
                    model.finish == identity.finish.value,
                    model.language == identity.lang,
                ),
                model.fingerprint == identity.fingerprint,
            )
        ]
    return [model.fingerprint == identity.fingerprint]


class ScanRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, scan: Scan) -> Scan:
        self._session.add(scan)
        await self._session.flush()
        return scan

    async def list_unlinked(self, identity: NormalizedKey | None = None) -> list[Scan]:
        stmt = select(Scan).where(Scan.lot_id.is_(None))
        if identity is not None:
            stmt = stmt.where(*_identity_filter(Scan, identity))
        result = await self._session.execute(stmt.order_by(Scan.observed_at.asc(), Scan.id.asc()))
        return list(result.scalars().all())


class SellRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, sell: SellTransaction) -> SellTransaction:
        self._session.add(sell)
        await self._session.flush()
        return sell

    async def get_by_id(self, transaction_id: int) -> Optional[SellTransaction]:
        result = await self._session.execute(
            select(SellTransaction).where(SellTransaction.id == transaction_id)
        )
        return result.scalar_one_or_none()

    async def get_by_ids(self, transaction_ids: list[int]) -> list[SellTransaction]:
        if not transaction_ids:
            return []
        result = await self._session.execute(
            select(SellTransaction).where(SellTransaction.id.in_(transaction_ids))
        )
        return list(result.scalars().all())

    async def get_by_external_ref(self, external_ref: str) -> Optional[SellTransaction]:
        result = await self._session.execute(
            select(SellTransaction).where(SellTransaction.external_ref == external_ref)
        )
        return result.scalar_one_or_none()

    async def list_outstanding(self, identity: NormalizedKey | None = None) -> list[SellTransaction]:
        """Sales whose allocated quantity is still below their quantity, oldest first."""
        allocated = (
            select(
                SellAllocation.transaction_id.label("transaction_id"),
                func.sum(SellAllocation.quantity).label("allocated"),
            )
            .group_by(SellAllocation.transaction_id)
            .subquery()
        )
        stmt = (
            select(SellTransaction)
            .outerjoin(allocated, allocated.c.transaction_id == SellTransaction.id)
            .where(func.coalesce(allocated.c.allocated, 0) < SellTransaction.quantity)
        )
        if identity is not None:
            stmt = stmt.where(*_identity_filter(SellTransaction, identity))
        result = await self._session.execute(
            stmt.order_by(SellTransaction.happened_at.asc(), SellTransaction.id.asc())
        )
        return list(result.scalars().all())
