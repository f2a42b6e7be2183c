from typing import AsyncGenerator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cardledger.accounting.normalizer import normalize_fingerprint
from cardledger.container import Container
from cardledger.domain.models.identity import NormalizedKey


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


def resolve_identity(
    card_id: str | None = Query(None),
    set_code: str | None = Query(None),
    number: str | None = Query(None),
    name: str | None = Query(None),
    lang: str | None = Query(None),
    finish: str | None = Query(None, description="foil / nonfoil / etched"),
) -> NormalizedKey:
    """Normalize identity query params into a NormalizedKey."""
    return normalize_fingerprint(
        card_id=card_id, set_code=set_code, number=number, name=name, lang=lang, finish=finish,
    )
