"""Events API: single entry point for scans, sales, acquisition imports and price rows."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.api.deps import get_db
from cardledger.api.schemas.events import EventAccepted
from cardledger.domain.models.events import InboundEvent
from cardledger.ingest.service import EventIngestor

router = APIRouter(prefix="/api/events", tags=["events"])

DbDep = Annotated[AsyncSession, Depends(get_db)]


@router.post("", response_model=EventAccepted, status_code=202)
async def post_event(event: InboundEvent, db: DbDep) -> EventAccepted:
    """Validate and record one event. Reconciliation runs separately."""
    record = await EventIngestor(db).record(event)
    await db.commit()
    return EventAccepted(
        kind=event.kind,
        id=str(record.id),
        fingerprint=getattr(record, "fingerprint", None),
    )
