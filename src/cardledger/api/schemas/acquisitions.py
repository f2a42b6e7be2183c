"""Pydantic schemas for acquisitions API."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from cardledger.domain.enums import AllocationMethod


class AcquisitionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str | None = None
    total_price_cent: int
    total_fees_cent: int
    total_shipping_cent: int
    total_cost_cent: int
    currency: str
    allocation_method: str
    allocated_at: datetime | None = None
    purchased_at: datetime


class AllocateRequest(BaseModel):
    method: AllocationMethod | None = None  # None = acquisition's stored method
