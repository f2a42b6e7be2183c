"""Inbound events, validated at the boundary before reaching the reconciler.

Each event kind is a closed pydantic model tagged by ``kind``; ``InboundEvent``
is the discriminated union accepted by the ingest service and the API.
"""

import datetime as dt
import uuid
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator

from cardledger.domain.enums import AllocationMethod


def _to_naive_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is not None:
        value = value.astimezone(dt.UTC).replace(tzinfo=None)
    return value


class CardAttributes(BaseModel):
    """Observed card attributes, any of which may be missing."""

    card_id: str | None = None
    set_code: str | None = None
    number: str | None = None
    name: str | None = None
    lang: str | None = None
    finish: str | bool | None = None


class ScanEvent(BaseModel):
    kind: Literal["scan"] = "scan"
    attributes: CardAttributes
    quantity: int = Field(1, gt=0)
    timestamp: dt.datetime
    acquisition_id: uuid.UUID | None = None

    @field_validator("timestamp")
    @classmethod
    def naive_timestamp(cls, value: dt.datetime) -> dt.datetime:
        return _to_naive_utc(value)


class SellEvent(BaseModel):
    kind: Literal["sell"] = "sell"
    attributes: CardAttributes
    quantity: int = Field(gt=0)
    price_cent: int = Field(ge=0)  # per unit
    fees_cent: int = Field(0, ge=0)
    shipping_cent: int = Field(0, ge=0)
    currency: str = "EUR"
    timestamp: dt.datetime
    external_ref: str | None = None

    @field_validator("timestamp")
    @classmethod
    def naive_timestamp(cls, value: dt.datetime) -> dt.datetime:
        return _to_naive_utc(value)


class AcquisitionLotRow(BaseModel):
    attributes: CardAttributes
    quantity: int = Field(gt=0)
    condition: str | None = None
    unit_cost: int | None = Field(None, ge=0)  # cents, only meaningful for manual allocation


class AcquisitionImport(BaseModel):
    kind: Literal["acquisition"] = "acquisition"
    name: str | None = None
    total_price_cent: int = Field(ge=0)
    total_fees_cent: int = Field(0, ge=0)
    total_shipping_cent: int = Field(0, ge=0)
    currency: str = "EUR"
    allocation_method: AllocationMethod = AllocationMethod.EQUAL_PER_CARD
    purchased_at: dt.datetime
    lots: list[AcquisitionLotRow] = []

    @field_validator("purchased_at")
    @classmethod
    def naive_purchased_at(cls, value: dt.datetime) -> dt.datetime:
        return _to_naive_utc(value)

    @property
    def total_cost_cent(self) -> int:
        return self.total_price_cent + self.total_fees_cent + self.total_shipping_cent


class PriceFeedRow(BaseModel):
    kind: Literal["price"] = "price"
    provider: str = Field(min_length=1)
    card_id: str = Field(min_length=1)
    finish: str | bool = "nonfoil"
    date: dt.date
    currency: str = "EUR"
    price_cent: int = Field(ge=0)
    as_of: dt.datetime | None = None  # defaults to midnight of ``date``

    @field_validator("as_of")
    @classmethod
    def naive_as_of(cls, value: dt.datetime | None) -> dt.datetime | None:
        return _to_naive_utc(value) if value is not None else None


InboundEvent = Annotated[
    Union[ScanEvent, SellEvent, AcquisitionImport, PriceFeedRow],
    Field(discriminator="kind"),
]
