"""Tests for PriceResolver: provider precedence over recency."""

import math
from datetime import date, datetime, timedelta, timezone

from cardledger.domain.models.events import PriceFeedRow
from cardledger.infra.price.resolver import PriceResolver, get_source_precedence
from cardledger.ingest.service import EventIngestor

DAY = date(2025, 3, 1)


async def _point(session, provider, price_cent, on=DAY, finish="nonfoil", as_of=None, card_id="card-a"):
    return await EventIngestor(session).ingest_price_row(PriceFeedRow(
        provider=provider, card_id=card_id, finish=finish, date=on, price_cent=price_cent, as_of=as_of,
    ))


class TestSourcePrecedence:
    def test_known_providers(self):
        assert get_source_precedence("cardmarket.priceguide") == 0
        assert get_source_precedence("mtgjson.cardmarket") == 1
        assert get_source_precedence("scryfall") == 2

    def test_unknown_provider_ranks_last(self):
        assert get_source_precedence("tcgplayer") == math.inf


class TestLatestPrice:
    async def test_precedence_wins_on_same_date(self, session):
        await _point(session, "scryfall", 1000)
        await _point(session, "mtgjson.cardmarket", 1200)
        await _point(session, "cardmarket.priceguide", 1100)

        point = await PriceResolver(session).get_latest_price_for_card("card-a")

        assert point.provider == "cardmarket.priceguide"
        assert point.price_cent == 1100

    async def test_precedence_dominates_recency(self, session):
        await _point(session, "cardmarket.priceguide", 900, on=date(2025, 1, 1))
        await _point(session, "scryfall", 1500, on=date(2025, 3, 1))

        point = await PriceResolver(session).get_latest_price_for_card("card-a")
        assert point.price_cent == 900

    async def test_newest_date_within_tier(self, session):
        await _point(session, "scryfall", 1000, on=date(2025, 1, 1))
        await _point(session, "scryfall", 1300, on=date(2025, 2, 1))

        point = await PriceResolver(session).get_latest_price_for_card("card-a")
        assert point.price_cent == 1300

    async def test_unknown_provider_used_when_alone(self, session):
        await _point(session, "tcgplayer", 700)

        point = await PriceResolver(session).get_latest_price_for_card("card-a")
        assert point.price_cent == 700

    async def test_no_points(self, session):
        assert await PriceResolver(session).get_latest_price_for_card("missing") is None

    async def test_finish_preferred_then_any(self, session):
        await _point(session, "cardmarket.priceguide", 1000, finish="nonfoil")
        await _point(session, "scryfall", 2500, finish="foil")
        resolver = PriceResolver(session)

        assert (await resolver.get_latest_price_for_card("card-a", finish="foil")).price_cent == 2500
        assert (await resolver.get_latest_price_for_card("card-a", finish="etched")).price_cent == 1000


class TestPricePoints:
    async def test_filtered_and_sorted(self, session):
        await _point(session, "scryfall", 1000, on=date(2025, 1, 1))
        await _point(session, "scryfall", 1100, on=date(2025, 2, 1))
        await _point(session, "cardmarket.priceguide", 900, on=date(2025, 1, 15))

        points = await PriceResolver(session).get_price_points_for_card("card-a")
        assert [p.price_cent for p in points] == [900, 1100, 1000]

        scryfall = await PriceResolver(session).get_price_points_for_card("card-a", provider="scryfall", limit=1)
        assert [p.price_cent for p in scryfall] == [1100]

    async def test_time_window(self, session):
        await _point(session, "scryfall", 1000, on=date(2025, 1, 1))
        await _point(session, "scryfall", 1100, on=date(2025, 2, 1))

        points = await PriceResolver(session).get_price_points_for_card(
            "card-a", start=datetime(2025, 1, 15), end=datetime(2025, 3, 1),
        )
        assert [p.price_cent for p in points] == [1100]

    async def test_time_window_with_aware_bounds(self, session):
        await _point(session, "scryfall", 1000, as_of=datetime(2025, 1, 1, 10, 0))
        await _point(session, "scryfall", 1100, on=date(2025, 3, 2), as_of=datetime(2025, 1, 1, 12, 0))

        points = await PriceResolver(session).get_price_points_for_card(
            "card-a",
            start=datetime(2025, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=1))),
            end=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc),
        )
        assert [p.price_cent for p in points] == [1100]

    async def test_same_date_newest_as_of_first(self, session):
        await _point(session, "scryfall", 1000, on=DAY, as_of=datetime(2025, 3, 1, 8, 0), card_id="card-b")
        await _point(session, "scryfall", 1100, on=DAY, finish="foil", as_of=datetime(2025, 3, 1, 20, 0), card_id="card-b")

        points = await PriceResolver(session).get_price_points_for_card("card-b")
        assert [p.price_cent for p in points] == [1100, 1000]

    async def test_price_for_date(self, session):
        await _point(session, "scryfall", 1000, on=date(2025, 1, 1))
        await _point(session, "mtgjson.cardmarket", 1050, on=date(2025, 1, 1))
        await _point(session, "cardmarket.priceguide", 1100, on=date(2025, 2, 1))

        point = await PriceResolver(session).get_price_for_date("card-a", date(2025, 1, 1))
        assert point.price_cent == 1050

    async def test_feed_row_upserts(self, session):
        first = await _point(session, "scryfall", 1000)
        second = await _point(session, "scryfall", 1250, as_of=datetime(2025, 3, 1, 18, 0))

        assert first.id == second.id
        points = await PriceResolver(session).get_price_points_for_card("card-a")
        assert [p.price_cent for p in points] == [1250]
