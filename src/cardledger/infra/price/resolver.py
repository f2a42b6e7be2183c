"""PriceResolver: one canonical market price per card from disagreeing providers.

Provider precedence strictly dominates recency: an older cardmarket price guide
quote beats a fresher Scryfall quote. Recency only breaks ties inside a tier.
"""

import datetime as dt
import logging
import math

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.price_point import PricePoint
from cardledger.db.repos.price_point_repo import PricePointRepo
from cardledger.domain.enums import PriceProvider
from cardledger.domain.models.events import _to_naive_utc

logger = logging.getLogger(__name__)

SOURCE_PRECEDENCE: dict[str, int] = {
    PriceProvider.CARDMARKET_PRICEGUIDE.value: 0,
    PriceProvider.MTGJSON_CARDMARKET.value: 1,
    PriceProvider.SCRYFALL.value: 2,
}

_EPOCH = dt.datetime(1970, 1, 1)


def get_source_precedence(provider: str) -> float:
    """Rank of a provider; lower wins. Unknown providers rank last (infinity)."""
    return SOURCE_PRECEDENCE.get(provider, math.inf)


def sort_by_precedence(points: list[PricePoint]) -> list[PricePoint]:
    """Best point first: lowest rank, then newest date, newest as_of, highest id."""
    return sorted(
        points,
        key=lambda p: (
            get_source_precedence(p.provider),
            -p.date.toordinal(),
            -(p.as_of - _EPOCH),
            -(p.id or 0),
        ),
    )


class PriceResolver:
    def __init__(self, session: AsyncSession) -> None:
        self._repo = PricePointRepo(session)

    async def get_latest_price_for_card(self, card_id: str, finish: str | None = None) -> PricePoint | None:
        """Winning price point for a card, or None when no provider quotes it.

        With ``finish``, points of that finish are preferred; when none exist the
        resolver falls back to any finish.
        """
        points = await self._repo.get_by_card_id(card_id)
        if finish is not None:
            same_finish = [p for p in points if p.finish == finish]
            if same_finish:
                points = same_finish
            elif points:
                logger.debug("No %s price for %s, falling back to any finish", finish, card_id)
        if not points:
            return None
        return sort_by_precedence(points)[0]

    async def get_price_points_for_card(
        self,
        card_id: str,
        provider: str | None = None,
        finish: str | None = None,
        start: dt.datetime | None = None,
        end: dt.datetime | None = None,
        limit: int | None = None,
    ) -> list[PricePoint]:
        points = await self._repo.get_by_card_id(card_id)
        if provider is not None:
            points = [p for p in points if p.provider == provider]
        if finish is not None:
            points = [p for p in points if p.finish == finish]
        if start is not None:
            start = _to_naive_utc(start)
            points = [p for p in points if p.as_of >= start]
        if end is not None:
            end = _to_naive_utc(end)
            points = [p for p in points if p.as_of <= end]
        points = sort_by_precedence(points)
        if limit is not None:
            points = points[:limit]
        return points

    async def get_price_for_date(
        self, card_id: str, on: dt.date, finish: str | None = None
    ) -> PricePoint | None:
        """Highest-precedence point quoted on a given date."""
        points = await self._repo.get_by_card_id_and_date(card_id, on)
        if finish is not None:
            points = [p for p in points if p.finish == finish] or points
        if not points:
            return None
        return sort_by_precedence(points)[0]
