"""Pydantic schemas for events API."""

from pydantic import BaseModel, ConfigDict

from cardledger.domain.enums import EventKind


class EventAccepted(BaseModel):
    kind: EventKind
    id: str
    fingerprint: str | None = None


class AllocationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    transaction_id: int
    lot_id: int
    quantity: int
