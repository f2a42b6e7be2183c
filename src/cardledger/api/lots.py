"""Lots API: ledger queries and adjustment lots."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.accounting.reconciler import Reconciler
from cardledger.api.deps import get_db, resolve_identity
from cardledger.api.schemas.lots import AdjustmentRequest, LotResponse, RemainingResponse
from cardledger.db.repos.allocation_repo import AllocationRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.domain.models.identity import NormalizedKey
from cardledger.exceptions import NotFoundError
from cardledger.ingest.service import identify

router = APIRouter(prefix="/api/lots", tags=["lots"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.get("", response_model=list[LotResponse])
async def find_lots(
    db: DbDep,
    identity: NormalizedKey = Depends(resolve_identity),
) -> list[LotResponse]:
    """Lots matching a card identity (card id / set+number / name, plus lang and finish)."""
    lots = await Reconciler(db).find_lots_by_identity(identity)
    return [LotResponse.model_validate(lot) for lot in lots]


@router.get("/{lot_id}", response_model=LotResponse)
async def get_lot(lot_id: int, db: DbDep) -> LotResponse:
    lot = await LotRepo(db).get_by_id(lot_id)
    if lot is None:
        raise NotFoundError("CardLot", lot_id)
    return LotResponse.model_validate(lot)


@router.get("/{lot_id}/remaining", response_model=RemainingResponse)
async def get_remaining(lot_id: int, db: DbDep) -> RemainingResponse:
    lot = await LotRepo(db).get_by_id(lot_id)
    if lot is None:
        raise NotFoundError("CardLot", lot_id)
    used = await AllocationRepo(db).sum_for_lot(lot_id)
    return RemainingResponse(lot_id=lot_id, quantity=lot.quantity, remaining=lot.quantity - used)


@router.post("/adjustments", response_model=LotResponse, status_code=201)
async def create_adjustment(body: AdjustmentRequest, db: DbDep) -> LotResponse:
    """Add stock outside any acquisition (e.g. to cover an oversold sale)."""
    lot = await Reconciler(db).create_adjustment_lot(
        identify(body.attributes),
        body.quantity,
        body.observed_at,
        condition=body.condition,
    )
    await db.commit()
    return LotResponse.model_validate(lot)
