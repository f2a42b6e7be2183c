import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.acquisition import Acquisition


class AcquisitionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, acquisition_id: uuid.UUID) -> Optional[Acquisition]:
        result = await self._session.execute(
            select(Acquisition).where(Acquisition.id == acquisition_id)
        )
        return result.scalar_one_or_none()

    async def create(self, acquisition: Acquisition) -> Acquisition:
        self._session.add(acquisition)
        await self._session.flush()
        return acquisition

    async def list_all(self) -> list[Acquisition]:
        result = await self._session.execute(
            select(Acquisition).order_by(Acquisition.purchased_at.desc())
        )
        return list(result.scalars().all())
