"""Card identity derived from raw attributes. Computed on demand, never stored as a table."""

from pydantic import BaseModel, ConfigDict

from cardledger.domain.enums import Finish


class NormalizedKey(BaseModel):
    model_config = ConfigDict(frozen=True)

    card_id: str | None = None
    set_code: str | None = None
    number: str | None = None  # denominator stripped, letter suffix kept
    lang: str = "EN"
    finish: Finish = Finish.NONFOIL
    name: str | None = None
    fingerprint: str

    @property
    def lot_card_id(self) -> str:
        """Card id written to lots; falls back to the fingerprint when no card id is known."""
        return self.card_id or self.fingerprint
