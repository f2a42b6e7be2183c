"""Prices API: canonical price resolution over stored price points."""

from datetime import datetime
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.deps import get_db
from cardledger.accounting.normalizer import map_finish
from cardledger.api.schemas.prices import PricePointResponse
from cardledger.infra.price.resolver import PriceResolver

router = APIRouter(prefix="/api/prices", tags=["prices"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("/{card_id}/latest", response_model=PricePointResponse)
async def get_latest_price(
    card_id: str,
    db: DbDep,
    finish: Optional[str] = Query(None),
) -> PricePointResponse:
    point = await PriceResolver(db).get_latest_price_for_card(
        card_id, finish=map_finish(finish).value if finish else None,
    )
    if point is None:
        raise HTTPException(status_code=404, detail=f"No price for card {card_id}")
    return PricePointResponse.model_validate(point)


@router.get("/{card_id}", response_model=list[PricePointResponse])
async def list_prices(
    card_id: str,
    db: DbDep,
    provider: Optional[str] = Query(None),
    finish: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
) -> list[PricePointResponse]:
    """Price points for a card, best first (precedence, then recency)."""
    points = await PriceResolver(db).get_price_points_for_card(
        card_id,
        provider=provider,
        finish=map_finish(finish).value if finish else None,
        start=start,
        end=end,
        limit=limit,
    )
    return [PricePointResponse.model_validate(p) for p in points]
