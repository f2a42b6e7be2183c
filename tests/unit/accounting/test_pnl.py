"""Tests for PnLCalculator: realized and unrealized profit per acquisition."""

import uuid
from datetime import date, datetime, timedelta

import pytest

from cardledger.accounting.cost_allocator import CostAllocator
from cardledger.accounting.pnl import PnLCalculator
from cardledger.accounting.reconciler import Reconciler
from cardledger.domain.models.events import AcquisitionImport, PriceFeedRow, SellEvent
from cardledger.exceptions import NotFoundError
from cardledger.ingest.service import EventIngestor

T0 = datetime(2025, 3, 1, 12, 0)
CARD = {"card_id": "card-a", "set_code": "DOM", "number": "1", "finish": "nonfoil"}


async def _bought(session, total_price_cent=1000, quantity=10):
    ingestor = EventIngestor(session)
    acquisition = await ingestor.import_acquisition(AcquisitionImport(
        total_price_cent=total_price_cent,
        purchased_at=T0,
        lots=[{"attributes": CARD, "quantity": quantity}],
    ))
    await CostAllocator(session).allocate_acquisition_costs(acquisition.id)
    return acquisition


async def _sold(session, quantity, price_cent):
    sell = await EventIngestor(session).record_sell(SellEvent(
        attributes=CARD, quantity=quantity, price_cent=price_cent, timestamp=T0 + timedelta(days=7),
    ))
    await Reconciler(session).allocate_sale(sell.id)
    return sell


class TestAcquisitionPnL:
    async def test_no_sales(self, session):
        acquisition = await _bought(session)

        pnl = await PnLCalculator(session).get_acquisition_pnl(acquisition.id)

        assert pnl.revenue_cent == 0
        assert pnl.cost_cent == 1000
        assert pnl.profit_cent == -1000
        assert pnl.unrealized_cent == 0

    async def test_revenue_from_allocations(self, session):
        acquisition = await _bought(session)
        await _sold(session, 3, 250)
        await _sold(session, 2, 300)

        pnl = await PnLCalculator(session).get_acquisition_pnl(acquisition.id)

        assert pnl.revenue_cent == 3 * 250 + 2 * 300
        assert pnl.cost_cent == 1000
        assert pnl.profit_cent == 350
        assert pnl.lots[0].sold_quantity == 5

    async def test_unrealized_at_market_price(self, session):
        acquisition = await _bought(session)
        await _sold(session, 3, 250)
        await EventIngestor(session).ingest_price_row(PriceFeedRow(
            provider="cardmarket.priceguide", card_id="card-a", date=date(2025, 3, 8), price_cent=200,
        ))

        pnl = await PnLCalculator(session).get_acquisition_pnl(acquisition.id)

        assert pnl.lots[0].market_price_cent == 200
        assert pnl.unrealized_cent == 7 * (200 - 100)

    async def test_read_only(self, session):
        acquisition = await _bought(session)
        calculator = PnLCalculator(session)

        first = await calculator.get_acquisition_pnl(acquisition.id)
        second = await calculator.get_acquisition_pnl(acquisition.id)

        assert first == second

    async def test_unknown_acquisition(self, session):
        with pytest.raises(NotFoundError):
            await PnLCalculator(session).get_acquisition_pnl(uuid.uuid4())
