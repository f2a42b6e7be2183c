"""Reconciler: matches scans and sales against the lot ledger.

Order-agnostic and idempotent. Scans are linked to a lot exactly once (a scan
landing on a provisional lot raises that lot's quantity), and sales are
satisfied by appending SellAllocation rows. Lot quantity is never decremented;
``remaining_qty = quantity - sum(allocations)``.
"""

import datetime as dt
import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.config import Settings, settings as default_settings
from cardledger.db.models.card_lot import CardLot
from cardledger.db.models.scan import Scan
from cardledger.db.models.sell_allocation import SellAllocation
from cardledger.db.models.sell_transaction import SellTransaction
from cardledger.db.repos.allocation_repo import AllocationRepo
from cardledger.db.repos.event_repo import ScanRepo, SellRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.domain.enums import FailureKind, Finish, LotSource
from cardledger.domain.models.identity import NormalizedKey
from cardledger.domain.models.ledger import ReconcileFailure, ReconcileReport
from cardledger.exceptions import InsufficientInventoryError, NotFoundError

logger = logging.getLogger(__name__)


def identity_of(record: Scan | SellTransaction) -> NormalizedKey:
    """Rebuild the identity persisted on an event at ingest time."""
    return NormalizedKey(
        card_id=record.card_id,
        set_code=record.set_code,
        number=record.number,
        name=record.name,
        lang=record.language,
        finish=Finish(record.finish),
        fingerprint=record.fingerprint,
    )


class Reconciler:
    """Scan/sell events -> lots. Owns every quantity-side mutation of the ledger."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self._session = session
        self._settings = settings or default_settings
        self._lots = LotRepo(session)
        self._allocations = AllocationRepo(session)
        self._scans = ScanRepo(session)
        self._sells = SellRepo(session)
        self._provisional_created = 0

    # --- queries ---

    async def remaining_qty(self, lot_id: int) -> int:
        lot = await self._lots.get_by_id(lot_id)
        if lot is None:
            raise NotFoundError("CardLot", lot_id)
        return lot.quantity - await self._allocations.sum_for_lot(lot_id)

    async def find_lots_by_identity(
        self, identity: NormalizedKey, at: dt.datetime | None = None
    ) -> list[CardLot]:
        """Candidate lots for an identity, ordered by id.

        A lot matches on card id + finish + language, or on the exact
        fingerprint. With ``at``, lots purchased after that moment are dropped.
        """
        candidates: dict[int, CardLot] = {}
        if identity.card_id:
            for lot in await self._lots.get_by_card_id(identity.card_id):
                if lot.finish == identity.finish.value and lot.language == identity.lang:
                    candidates[lot.id] = lot
        for lot in await self._lots.get_by_fingerprint(identity.fingerprint):
            candidates[lot.id] = lot

        lots = [candidates[lot_id] for lot_id in sorted(candidates)]
        if at is not None:
            lots = [lot for lot in lots if lot.purchased_at <= at]
        return lots

    # --- lot creation ---

    async def find_or_create_provisional_lot(
        self, identity: NormalizedKey, observed_at: dt.datetime, origin: str = "scan"
    ) -> CardLot:
        """Reuse the identity's provisional lot, or create an empty one."""
        for lot in await self.find_lots_by_identity(identity):
            if lot.source == LotSource.PROVISIONAL.value:
                return lot

        lot = CardLot(
            card_id=identity.lot_card_id,
            fingerprint=identity.fingerprint,
            finish=identity.finish.value,
            language=identity.lang,
            quantity=0,
            unit_cost=Decimal(0),
            condition=self._settings.default_condition,
            source=LotSource.PROVISIONAL.value,
            purchased_at=observed_at,
            acquisition_id=None,
        )
        await self._lots.add(lot)
        self._provisional_created += 1
        logger.info("Created provisional lot %s for %s (from %s)", lot.id, identity.fingerprint, origin)
        return lot

    async def create_adjustment_lot(
        self,
        identity: NormalizedKey,
        quantity: int,
        observed_at: dt.datetime,
        condition: str | None = None,
    ) -> CardLot:
        """Add stock found outside any acquisition, e.g. to cover an oversold sale."""
        if quantity <= 0:
            raise ValueError(f"Adjustment quantity must be positive: {quantity}")
        lot = CardLot(
            card_id=identity.lot_card_id,
            fingerprint=identity.fingerprint,
            finish=identity.finish.value,
            language=identity.lang,
            quantity=quantity,
            unit_cost=Decimal(0),
            condition=condition or self._settings.default_condition,
            source=LotSource.ADJUSTMENT.value,
            purchased_at=observed_at,
            acquisition_id=None,
        )
        await self._lots.add(lot)
        logger.info("Created adjustment lot %s (+%d) for %s", lot.id, quantity, identity.fingerprint)
        return lot

    # --- scans ---

    async def reconcile_scan(self, scan: Scan) -> bool:
        """Link an unlinked scan to a lot. Returns False when already linked."""
        if scan.lot_id is not None:
            return False

        identity = identity_of(scan)
        lots = await self.find_lots_by_identity(identity)
        target = self._match_scan(scan, lots)
        if target is None:
            target = await self.find_or_create_provisional_lot(identity, scan.observed_at, origin="scan")

        if target.source == LotSource.PROVISIONAL.value:
            await self._lots.update(target.id, quantity=target.quantity + scan.quantity)

        scan.lot_id = target.id
        await self._session.flush()
        logger.debug("Linked scan %s to lot %s", scan.id, target.id)
        return True

    def _match_scan(self, scan: Scan, lots: list[CardLot]) -> CardLot | None:
        """Same acquisition first, then the nearest real lot inside the time window."""
        if scan.acquisition_id is not None:
            for lot in lots:
                if lot.acquisition_id == scan.acquisition_id:
                    return lot

        window = dt.timedelta(days=self._settings.scan_match_window_days)
        in_window = [
            lot
            for lot in lots
            if lot.source != LotSource.PROVISIONAL.value
            and abs(lot.purchased_at - scan.observed_at) <= window
        ]
        if not in_window:
            return None
        return min(in_window, key=lambda lot: (abs(lot.purchased_at - scan.observed_at), lot.id))

    # --- sales ---

    async def allocate_sale(self, transaction_id: int) -> list[SellAllocation]:
        sell = await self._sells.get_by_id(transaction_id)
        if sell is None:
            raise NotFoundError("SellTransaction", transaction_id)
        return await self._allocate(sell)

    async def _allocate(self, sell: SellTransaction) -> list[SellAllocation]:
        """Satisfy a sale's outstanding quantity from lots with remaining stock.

        Lots bought at or before the sale are drained first (oldest first),
        then later lots. The whole plan is checked before anything is written,
        so a shortfall leaves no allocation behind.
        """
        outstanding = sell.quantity - await self._allocations.sum_for_transaction(sell.id)
        if outstanding <= 0:
            return []

        identity = identity_of(sell)
        lots = await self.find_lots_by_identity(identity)
        if not lots:
            lots = [await self.find_or_create_provisional_lot(identity, sell.happened_at, origin="sell")]

        used = await self._allocations.sums_for_lots([lot.id for lot in lots])
        ordered = sorted(lots, key=lambda lot: (lot.purchased_at > sell.happened_at, lot.purchased_at, lot.id))

        plan: list[tuple[CardLot, int]] = []
        available = 0
        still_needed = outstanding
        for lot in ordered:
            remaining = lot.quantity - used[lot.id]
            if remaining <= 0:
                continue
            available += remaining
            take = min(remaining, still_needed)
            if take > 0:
                plan.append((lot, take))
                still_needed -= take

        if available < outstanding:
            logger.warning(
                "Insufficient inventory for sell %s (%s): need %d, have %d",
                sell.id, sell.fingerprint, outstanding, available,
            )
            raise InsufficientInventoryError(sell.id, outstanding, available)

        allocations = [await self._allocations.add(sell.id, lot.id, qty) for lot, qty in plan]
        logger.debug("Allocated sell %s across lots %s", sell.id, [lot.id for lot, _ in plan])
        return allocations

    # --- batch entry points ---

    async def run_reconciler(self, identity: NormalizedKey) -> ReconcileReport:
        """Reconcile every outstanding scan and sale of one identity."""
        scans = await self._scans.list_unlinked(identity)
        report = await self._run(scans, sells=None, identity=identity)
        report.identities = 1
        return report

    async def run_full_reconciler(self) -> ReconcileReport:
        """Reconcile every outstanding scan and sale in the store."""
        scans = await self._scans.list_unlinked()
        sells = await self._sells.list_outstanding()
        report = await self._run(scans, sells=sells, identity=None)
        report.identities = len({s.fingerprint for s in scans} | {s.fingerprint for s in sells})
        return report

    async def _run(
        self,
        scans: list[Scan],
        sells: list[SellTransaction] | None,
        identity: NormalizedKey | None,
    ) -> ReconcileReport:
        report = ReconcileReport()
        created_before = self._provisional_created

        # Scans first: they may add stock to provisional lots that sales draw on
        for scan in scans:
            if await self.reconcile_scan(scan):
                report.scans_linked += 1

        if sells is None:
            sells = await self._sells.list_outstanding(identity)
        for sell in sells:
            try:
                if await self._allocate(sell):
                    report.sales_allocated += 1
            except InsufficientInventoryError as e:
                report.failures.append(ReconcileFailure(
                    kind=FailureKind.INSUFFICIENT_INVENTORY,
                    ref=f"sell:{sell.id}",
                    message=str(e),
                ))

        report.provisional_lots_created = self._provisional_created - created_before
        logger.info(
            "Reconciled %d scans, %d sales (%d provisional lots, %d failures)",
            report.scans_linked, report.sales_allocated,
            report.provisional_lots_created, len(report.failures),
        )
        return report
