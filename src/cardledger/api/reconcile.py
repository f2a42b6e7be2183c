"""Reconcile API: per-identity and full reconciliation runs."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.accounting.reconciler import Reconciler
from cardledger.api.deps import get_db
from cardledger.api.schemas.events import AllocationResponse
from cardledger.domain.models.events import CardAttributes
from cardledger.domain.models.ledger import ReconcileReport
from cardledger.ingest.service import identify

router = APIRouter(prefix="/api/reconcile", tags=["reconcile"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=ReconcileReport)
async def run_for_identity(body: CardAttributes, db: DbDep) -> ReconcileReport:
    report = await Reconciler(db).run_reconciler(identify(body))
    await db.commit()
    return report


@router.post("/full", response_model=ReconcileReport)
async def run_full(db: DbDep) -> ReconcileReport:
    report = await Reconciler(db).run_full_reconciler()
    await db.commit()
    return report


@router.post("/sales/{transaction_id}", response_model=list[AllocationResponse])
async def allocate_sale(transaction_id: int, db: DbDep) -> list[AllocationResponse]:
    """Allocate one sale now. A shortfall is a 409; nothing is written."""
    allocations = await Reconciler(db).allocate_sale(transaction_id)
    await db.commit()
    return [AllocationResponse.model_validate(a) for a in allocations]
