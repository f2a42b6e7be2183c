"""Pydantic schemas for prices API."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class PricePointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    card_id: str
    provider: str
    finish: str
    date: date
    currency: str
    price_cent: int
    as_of: datetime
