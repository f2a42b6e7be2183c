"""Pydantic schemas for lots API."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cardledger.db.session import utc_now
from cardledger.domain.models.events import CardAttributes, _to_naive_utc


class LotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    card_id: str
    fingerprint: str
    finish: str
    language: str
    quantity: int
    unit_cost: Decimal
    condition: str
    foil: bool
    source: str
    purchased_at: datetime
    acquisition_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime


class RemainingResponse(BaseModel):
    lot_id: int
    quantity: int
    remaining: int


class AdjustmentRequest(BaseModel):
    attributes: CardAttributes
    quantity: int = Field(gt=0)
    observed_at: datetime = Field(default_factory=utc_now)
    condition: str | None = None

    @field_validator("observed_at")
    @classmethod
    def naive_observed_at(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)
