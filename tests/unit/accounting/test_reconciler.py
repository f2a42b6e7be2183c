"""Tests for the Reconciler: scan linking, sale allocation and batch runs."""

from datetime import datetime, timedelta

import pytest

from cardledger.accounting.normalizer import normalize_fingerprint
from cardledger.accounting.reconciler import Reconciler
from cardledger.db.models.card_lot import CardLot
from cardledger.db.repos.allocation_repo import AllocationRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.domain.enums import FailureKind, LotSource
from cardledger.domain.models.events import AcquisitionImport, CardAttributes, ScanEvent, SellEvent
from cardledger.exceptions import InsufficientInventoryError, NotFoundError
from cardledger.ingest.service import EventIngestor

T0 = datetime(2025, 3, 1, 12, 0)
DOM_123 = {"set_code": "DOM", "number": "123", "lang": "EN", "finish": "nonfoil"}


def _key(**overrides):
    return normalize_fingerprint(**{**DOM_123, **overrides})


async def _lot(session, quantity=10, purchased_at=T0, source=LotSource.PURCHASE, key=None, acquisition_id=None):
    key = key or _key()
    lot = CardLot(
        card_id=key.lot_card_id,
        fingerprint=key.fingerprint,
        finish=key.finish.value,
        language=key.lang,
        quantity=quantity,
        source=source.value,
        purchased_at=purchased_at,
        acquisition_id=acquisition_id,
    )
    await LotRepo(session).add(lot)
    return lot


async def _sell(session, quantity, at=T0 + timedelta(days=5), price_cent=500, **attrs):
    return await EventIngestor(session).record_sell(SellEvent(
        attributes=CardAttributes(**{**DOM_123, **attrs}),
        quantity=quantity,
        price_cent=price_cent,
        timestamp=at,
    ))


async def _scan(session, quantity=1, at=T0, acquisition_id=None, **attrs):
    return await EventIngestor(session).record_scan(ScanEvent(
        attributes=CardAttributes(**{**DOM_123, **attrs}),
        quantity=quantity,
        timestamp=at,
        acquisition_id=acquisition_id,
    ))


class TestRemainingQty:
    async def test_remaining_after_allocation(self, session):
        lot = await _lot(session, quantity=10)
        sell = await _sell(session, 3)

        await Reconciler(session).allocate_sale(sell.id)

        assert await Reconciler(session).remaining_qty(lot.id) == 7

    async def test_remaining_unknown_lot(self, session):
        with pytest.raises(NotFoundError):
            await Reconciler(session).remaining_qty(999)

    async def test_quantity_is_never_decremented(self, session):
        lot = await _lot(session, quantity=4)
        sell = await _sell(session, 4)

        await Reconciler(session).allocate_sale(sell.id)

        assert (await LotRepo(session).get_by_id(lot.id)).quantity == 4
        assert await Reconciler(session).remaining_qty(lot.id) == 0


class TestFindLots:
    async def test_matches_card_id_finish_and_language(self, session):
        key = _key(card_id="scry-1")
        foil = _key(card_id="scry-1", finish="foil")
        german = _key(card_id="scry-1", lang="DE")
        match = await _lot(session, key=key)
        await _lot(session, key=foil)
        await _lot(session, key=german)

        lots = await Reconciler(session).find_lots_by_identity(key)
        assert [lot.id for lot in lots] == [match.id]

    async def test_matches_fingerprint_without_card_id(self, session):
        with_id = await _lot(session, key=_key(card_id="scry-1"))

        lots = await Reconciler(session).find_lots_by_identity(_key())
        assert [lot.id for lot in lots] == [with_id.id]

    async def test_at_excludes_later_lots(self, session):
        early = await _lot(session, purchased_at=T0)
        await _lot(session, purchased_at=T0 + timedelta(days=10))

        lots = await Reconciler(session).find_lots_by_identity(_key(), at=T0 + timedelta(days=1))
        assert [lot.id for lot in lots] == [early.id]


class TestProvisionalLot:
    async def test_created_with_defaults(self, session):
        lot = await Reconciler(session).find_or_create_provisional_lot(_key(), T0)

        assert lot.source == "provisional"
        assert lot.quantity == 0
        assert lot.unit_cost == 0
        assert lot.condition == "Near Mint"
        assert lot.acquisition_id is None

    async def test_idempotent(self, session):
        reconciler = Reconciler(session)
        first = await reconciler.find_or_create_provisional_lot(_key(), T0)
        second = await reconciler.find_or_create_provisional_lot(_key(), T0 + timedelta(days=3))

        assert first.id == second.id
        assert len(await LotRepo(session).get_by_fingerprint(_key().fingerprint)) == 1


class TestAllocateSale:
    async def test_fifo_across_lots(self, session):
        old = await _lot(session, quantity=2, purchased_at=T0)
        new = await _lot(session, quantity=5, purchased_at=T0 + timedelta(days=1))
        sell = await _sell(session, 3, at=T0 + timedelta(days=2))

        allocations = await Reconciler(session).allocate_sale(sell.id)

        assert [(a.lot_id, a.quantity) for a in allocations] == [(old.id, 2), (new.id, 1)]

    async def test_stops_once_sale_is_covered(self, session):
        lots = [await _lot(session, quantity=2, purchased_at=T0 + timedelta(hours=i)) for i in range(4)]
        sell = await _sell(session, 5, at=T0 + timedelta(days=2))

        allocations = await Reconciler(session).allocate_sale(sell.id)

        assert [(a.lot_id, a.quantity) for a in allocations] == [
            (lots[0].id, 2), (lots[1].id, 2), (lots[2].id, 1),
        ]
        assert await AllocationRepo(session).sum_for_lot(lots[3].id) == 0

    async def test_lots_bought_before_sale_drain_first(self, session):
        await _lot(session, quantity=5, purchased_at=T0 + timedelta(days=10))
        before = await _lot(session, quantity=5, purchased_at=T0)
        sell = await _sell(session, 1, at=T0 + timedelta(days=5))

        allocations = await Reconciler(session).allocate_sale(sell.id)

        assert [a.lot_id for a in allocations] == [before.id]

    async def test_insufficient_inventory_writes_nothing(self, session):
        lot = await _lot(session, quantity=2)
        sell = await _sell(session, 3)

        with pytest.raises(InsufficientInventoryError) as exc_info:
            await Reconciler(session).allocate_sale(sell.id)

        assert exc_info.value.requested == 3
        assert exc_info.value.available == 2
        assert await AllocationRepo(session).sum_for_lot(lot.id) == 0

    async def test_repeat_is_noop(self, session):
        lot = await _lot(session, quantity=10)
        sell = await _sell(session, 3)
        reconciler = Reconciler(session)

        await reconciler.allocate_sale(sell.id)
        assert await reconciler.allocate_sale(sell.id) == []
        assert await AllocationRepo(session).sum_for_lot(lot.id) == 3

    async def test_unknown_transaction(self, session):
        with pytest.raises(NotFoundError):
            await Reconciler(session).allocate_sale(12345)

    async def test_sale_without_lots_gets_provisional_lot(self, session):
        sell = await _sell(session, 1)

        with pytest.raises(InsufficientInventoryError):
            await Reconciler(session).allocate_sale(sell.id)

        lots = await LotRepo(session).get_by_fingerprint(_key().fingerprint)
        assert [lot.source for lot in lots] == ["provisional"]

    async def test_adjustment_lot_resolves_shortfall(self, session):
        await _lot(session, quantity=1)
        sell = await _sell(session, 3)
        reconciler = Reconciler(session)

        with pytest.raises(InsufficientInventoryError):
            await reconciler.allocate_sale(sell.id)
        adjustment = await reconciler.create_adjustment_lot(_key(), 2, T0 + timedelta(days=4))
        allocations = await reconciler.allocate_sale(sell.id)

        assert sum(a.quantity for a in allocations) == 3
        assert adjustment.source == "adjustment"
        assert await reconciler.remaining_qty(adjustment.id) == 0

    async def test_adjustment_quantity_must_be_positive(self, session):
        with pytest.raises(ValueError):
            await Reconciler(session).create_adjustment_lot(_key(), 0, T0)


class TestReconcileScan:
    async def test_prefers_acquisition_lot(self, session):
        acquisition = await EventIngestor(session).import_acquisition(AcquisitionImport(
            total_price_cent=1000,
            purchased_at=T0 - timedelta(days=90),
            lots=[{"attributes": DOM_123, "quantity": 2}],
        ))
        await _lot(session, quantity=2, purchased_at=T0)
        scan = await _scan(session, at=T0, acquisition_id=acquisition.id)

        assert await Reconciler(session).reconcile_scan(scan) is True

        target = await LotRepo(session).get_by_id(scan.lot_id)
        assert target.acquisition_id == acquisition.id

    async def test_nearest_lot_within_window(self, session):
        await _lot(session, purchased_at=T0 - timedelta(days=20))
        near = await _lot(session, purchased_at=T0 - timedelta(days=2))
        scan = await _scan(session, at=T0)

        await Reconciler(session).reconcile_scan(scan)

        assert scan.lot_id == near.id
        assert (await LotRepo(session).get_by_id(near.id)).quantity == 10

    async def test_outside_window_goes_to_provisional(self, session):
        await _lot(session, purchased_at=T0 - timedelta(days=45))
        scan = await _scan(session, quantity=2, at=T0)

        await Reconciler(session).reconcile_scan(scan)

        target = await LotRepo(session).get_by_id(scan.lot_id)
        assert target.source == "provisional"
        assert target.quantity == 2

    async def test_linked_scan_skipped(self, session):
        scan = await _scan(session, quantity=1)
        reconciler = Reconciler(session)

        assert await reconciler.reconcile_scan(scan) is True
        assert await reconciler.reconcile_scan(scan) is False
        assert (await LotRepo(session).get_by_id(scan.lot_id)).quantity == 1


class TestBatchRuns:
    async def test_sale_before_scan_is_order_agnostic(self, session):
        await _sell(session, 1, at=T0)
        reconciler = Reconciler(session)

        first = await reconciler.run_full_reconciler()
        assert first.provisional_lots_created == 1
        assert [f.kind for f in first.failures] == [FailureKind.INSUFFICIENT_INVENTORY]

        await _scan(session, quantity=1, at=T0 + timedelta(days=1))
        second = await reconciler.run_full_reconciler()

        assert second.scans_linked == 1
        assert second.sales_allocated == 1
        assert second.provisional_lots_created == 0
        assert second.failures == []

    async def test_rerun_is_idempotent(self, session):
        lot = await _lot(session, quantity=5)
        await _sell(session, 2)
        await _sell(session, 2)
        await _scan(session, at=T0)
        reconciler = Reconciler(session)

        first = await reconciler.run_full_reconciler()
        second = await reconciler.run_full_reconciler()
        third = await reconciler.run_full_reconciler()

        assert (first.scans_linked, first.sales_allocated) == (1, 2)
        assert (second.scans_linked, second.sales_allocated) == (0, 0)
        assert (third.scans_linked, third.sales_allocated) == (0, 0)
        assert await AllocationRepo(session).sum_for_lot(lot.id) == 4

    async def test_allocation_never_exceeds_quantity(self, session):
        lot = await _lot(session, quantity=3)
        for _ in range(3):
            await _sell(session, 2)
        reconciler = Reconciler(session)

        for _ in range(3):
            report = await reconciler.run_full_reconciler()

        assert await AllocationRepo(session).sum_for_lot(lot.id) <= lot.quantity
        assert len(report.failures) == 2

    async def test_run_for_identity_leaves_others(self, session):
        await _lot(session, quantity=5)
        other = _key(number="7")
        other_lot = await _lot(session, quantity=5, key=other)
        await _sell(session, 1)
        await _sell(session, 1, number="7")

        report = await Reconciler(session).run_reconciler(_key())

        assert report.identities == 1
        assert report.sales_allocated == 1
        assert await AllocationRepo(session).sum_for_lot(other_lot.id) == 0
