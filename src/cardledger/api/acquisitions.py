"""Acquisitions API: import, cost allocation and P&L."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.accounting.cost_allocator import CostAllocator
from cardledger.accounting.pnl import PnLCalculator
from cardledger.api.deps import get_db
from cardledger.api.schemas.acquisitions import AcquisitionResponse, AllocateRequest
from cardledger.db.repos.acquisition_repo import AcquisitionRepo
from cardledger.domain.models.events import AcquisitionImport
from cardledger.domain.models.ledger import AcquisitionPnL
from cardledger.exceptions import NotFoundError
from cardledger.ingest.service import EventIngestor

router = APIRouter(prefix="/api/acquisitions", tags=["acquisitions"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=AcquisitionResponse, status_code=201)
async def import_acquisition(body: AcquisitionImport, db: DbDep) -> AcquisitionResponse:
    acquisition = await EventIngestor(db).import_acquisition(body)
    await db.commit()
    return AcquisitionResponse.model_validate(acquisition)


@router.get("", response_model=list[AcquisitionResponse])
async def list_acquisitions(db: DbDep) -> list[AcquisitionResponse]:
    return [AcquisitionResponse.model_validate(a) for a in await AcquisitionRepo(db).list_all()]


@router.get("/{acquisition_id}", response_model=AcquisitionResponse)
async def get_acquisition(acquisition_id: uuid.UUID, db: DbDep) -> AcquisitionResponse:
    acquisition = await AcquisitionRepo(db).get_by_id(acquisition_id)
    if acquisition is None:
        raise NotFoundError("Acquisition", acquisition_id)
    return AcquisitionResponse.model_validate(acquisition)


@router.post("/{acquisition_id}/allocate", response_model=AcquisitionResponse)
async def allocate_costs(acquisition_id: uuid.UUID, body: AllocateRequest, db: DbDep) -> AcquisitionResponse:
    await CostAllocator(db).allocate_acquisition_costs(acquisition_id, body.method)
    await db.commit()
    acquisition = await AcquisitionRepo(db).get_by_id(acquisition_id)
    return AcquisitionResponse.model_validate(acquisition)


@router.get("/{acquisition_id}/pnl", response_model=AcquisitionPnL)
async def get_pnl(acquisition_id: uuid.UUID, db: DbDep) -> AcquisitionPnL:
    return await PnLCalculator(db).get_acquisition_pnl(acquisition_id)
