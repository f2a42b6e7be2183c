import uuid
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.card_lot import CardLot
from cardledger.db.session import utc_now
from cardledger.domain.enums import Finish


class LotRepo:
    """Persistent store of CardLot records. Performs no identity matching."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, lot_id: int) -> Optional[CardLot]:
        result = await self._session.execute(
            select(CardLot).where(CardLot.id == lot_id)
        )
        return result.scalar_one_or_none()

    async def get_by_card_id(self, card_id: str) -> list[CardLot]:
        result = await self._session.execute(
            select(CardLot).where(CardLot.card_id == card_id).order_by(CardLot.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_fingerprint(self, fingerprint: str) -> list[CardLot]:
        result = await self._session.execute(
            select(CardLot).where(CardLot.fingerprint == fingerprint).order_by(CardLot.id.asc())
        )
        return list(result.scalars().all())

    async def get_by_acquisition_id(self, acquisition_id: uuid.UUID) -> list[CardLot]:
        result = await self._session.execute(
            select(CardLot).where(CardLot.acquisition_id == acquisition_id).order_by(CardLot.id.asc())
        )
        return list(result.scalars().all())

    async def add(self, lot: CardLot) -> int:
        """Insert a lot and return its id, usable immediately with get_by_id."""
        now = utc_now()
        lot.created_at = now
        lot.updated_at = now
        lot.foil = Finish(lot.finish).is_foil
        self._validate(quantity=lot.quantity, unit_cost=lot.unit_cost)
        self._session.add(lot)
        await self._session.flush()
        return lot.id

    async def update(self, lot_id: int, **patch: Any) -> int:
        """Apply a patch to a lot. Returns the number of lots updated (0 or 1)."""
        self._validate(quantity=patch.get("quantity"), unit_cost=patch.get("unit_cost"))
        lot = await self.get_by_id(lot_id)
        if lot is None:
            return 0
        for key, value in patch.items():
            if key in ("id", "created_at") or not hasattr(lot, key):
                continue
            setattr(lot, key, value)
        if "finish" in patch:
            lot.foil = Finish(lot.finish).is_foil
        lot.updated_at = utc_now()
        await self._session.flush()
        return 1

    @staticmethod
    def _validate(quantity: int | None, unit_cost: Decimal | int | None) -> None:
        if quantity is not None and quantity < 0:
            raise ValueError(f"Lot quantity cannot be negative: {quantity}")
        if unit_cost is not None and unit_cost < 0:
            raise ValueError(f"Lot unit cost cannot be negative: {unit_cost}")
