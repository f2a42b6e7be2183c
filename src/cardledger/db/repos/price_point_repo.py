import datetime as dt
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.price_point import PricePoint


class PricePointRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_card_id(self, card_id: str) -> list[PricePoint]:
        result = await self._session.execute(
            select(PricePoint).where(PricePoint.card_id == card_id)
        )
        return list(result.scalars().all())

    async def get_by_card_id_and_date(self, card_id: str, on: dt.date) -> list[PricePoint]:
        result = await self._session.execute(
            select(PricePoint).where(PricePoint.card_id == card_id, PricePoint.date == on)
        )
        return list(result.scalars().all())

    async def get_by_identity(
        self, card_id: str, provider: str, finish: str, on: dt.date
    ) -> Optional[PricePoint]:
        result = await self._session.execute(
            select(PricePoint).where(
                PricePoint.card_id == card_id,
                PricePoint.provider == provider,
                PricePoint.finish == finish,
                PricePoint.date == on,
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        card_id: str,
        provider: str,
        finish: str,
        on: dt.date,
        price_cent: int,
        currency: str,
        as_of: dt.datetime,
    ) -> PricePoint:
        """Insert or update the point for (card, provider, finish, date)."""
        point = await self.get_by_identity(card_id, provider, finish, on)
        if point is None:
            point = PricePoint(
                card_id=card_id,
                provider=provider,
                finish=finish,
                date=on,
                price_cent=price_cent,
                currency=currency,
                as_of=as_of,
            )
            self._session.add(point)
        else:
            point.price_cent = price_cent
            point.currency = currency
            point.as_of = as_of
        await self._session.flush()
        return point
