"""EventIngestor: the boundary where inbound events enter the ledger.

Events arrive as validated pydantic variants. Card attributes are normalized
once here and the resulting identity is persisted on the record, so later
reconciliation runs see a stable fingerprint even for the clock-based
"unknown" branch.
"""

import datetime as dt
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.accounting.normalizer import map_finish, normalize_fingerprint
from cardledger.config import Settings, settings as default_settings
from cardledger.db.models.acquisition import Acquisition
from cardledger.db.models.card_lot import CardLot
from cardledger.db.models.price_point import PricePoint
from cardledger.db.models.scan import Scan
from cardledger.db.models.sell_transaction import SellTransaction
from cardledger.db.repos.acquisition_repo import AcquisitionRepo
from cardledger.db.repos.event_repo import ScanRepo, SellRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.db.repos.price_point_repo import PricePointRepo
from cardledger.domain.enums import AllocationMethod, LotSource
from cardledger.domain.models.events import (
    AcquisitionImport,
    CardAttributes,
    PriceFeedRow,
    ScanEvent,
    SellEvent,
)
from cardledger.domain.models.identity import NormalizedKey
from cardledger.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def identify(attributes: CardAttributes) -> NormalizedKey:
    return normalize_fingerprint(
        card_id=attributes.card_id,
        set_code=attributes.set_code,
        number=attributes.number,
        name=attributes.name,
        lang=attributes.lang,
        finish=attributes.finish,
    )


class EventIngestor:
    def __init__(self, session: AsyncSession, settings: Settings | None = None) -> None:
        self._settings = settings or default_settings
        self._scans = ScanRepo(session)
        self._sells = SellRepo(session)
        self._lots = LotRepo(session)
        self._acquisitions = AcquisitionRepo(session)
        self._prices = PricePointRepo(session)

    async def record(
        self, event: ScanEvent | SellEvent | AcquisitionImport | PriceFeedRow
    ) -> Scan | SellTransaction | Acquisition | PricePoint:
        """Dispatch one event by kind."""
        if isinstance(event, ScanEvent):
            return await self.record_scan(event)
        if isinstance(event, SellEvent):
            return await self.record_sell(event)
        if isinstance(event, AcquisitionImport):
            return await self.import_acquisition(event)
        if isinstance(event, PriceFeedRow):
            return await self.ingest_price_row(event)
        raise TypeError(f"Unsupported event type: {type(event).__name__}")

    async def record_scan(self, event: ScanEvent) -> Scan:
        if event.acquisition_id is not None:
            if await self._acquisitions.get_by_id(event.acquisition_id) is None:
                raise NotFoundError("Acquisition", event.acquisition_id)
        identity = identify(event.attributes)
        scan = Scan(
            card_id=identity.card_id,
            set_code=identity.set_code,
            number=identity.number,
            name=identity.name,
            fingerprint=identity.fingerprint,
            finish=identity.finish.value,
            language=identity.lang,
            quantity=event.quantity,
            observed_at=event.timestamp,
            acquisition_id=event.acquisition_id,
        )
        return await self._scans.add(scan)

    async def record_sell(self, event: SellEvent) -> SellTransaction:
        """Record a sale. A repeated external_ref returns the existing sale."""
        if event.external_ref:
            existing = await self._sells.get_by_external_ref(event.external_ref)
            if existing is not None:
                logger.debug("Sell %s already recorded as %s", event.external_ref, existing.id)
                return existing

        identity = identify(event.attributes)
        sell = SellTransaction(
            card_id=identity.card_id,
            set_code=identity.set_code,
            number=identity.number,
            name=identity.name,
            fingerprint=identity.fingerprint,
            finish=identity.finish.value,
            language=identity.lang,
            quantity=event.quantity,
            price_cent=event.price_cent,
            fees_cent=event.fees_cent,
            shipping_cent=event.shipping_cent,
            currency=event.currency,
            happened_at=event.timestamp,
            external_ref=event.external_ref,
        )
        return await self._sells.add(sell)

    async def import_acquisition(self, event: AcquisitionImport) -> Acquisition:
        """Create an acquisition and one purchase lot per row.

        Unit costs on the rows are only kept for manual allocation; the other
        methods overwrite them when the allocator runs.
        """
        acquisition = await self._acquisitions.create(Acquisition(
            name=event.name,
            total_price_cent=event.total_price_cent,
            total_fees_cent=event.total_fees_cent,
            total_shipping_cent=event.total_shipping_cent,
            total_cost_cent=event.total_cost_cent,
            currency=event.currency,
            allocation_method=event.allocation_method.value,
            purchased_at=event.purchased_at,
        ))

        manual = event.allocation_method == AllocationMethod.MANUAL
        for row in event.lots:
            identity = identify(row.attributes)
            await self._lots.add(CardLot(
                card_id=identity.lot_card_id,
                fingerprint=identity.fingerprint,
                finish=identity.finish.value,
                language=identity.lang,
                quantity=row.quantity,
                unit_cost=row.unit_cost if manual and row.unit_cost is not None else 0,
                condition=row.condition or self._settings.default_condition,
                source=LotSource.PURCHASE.value,
                purchased_at=event.purchased_at,
                acquisition_id=acquisition.id,
            ))

        logger.info(
            "Imported acquisition %s: %d lots, %d cents",
            acquisition.id, len(event.lots), acquisition.total_cost_cent,
        )
        return acquisition

    async def ingest_price_row(self, row: PriceFeedRow) -> PricePoint:
        as_of = row.as_of or dt.datetime.combine(row.date, dt.time.min)
        return await self._prices.upsert(
            card_id=row.card_id,
            provider=row.provider,
            finish=map_finish(row.finish).value,
            on=row.date,
            price_cent=row.price_cent,
            currency=row.currency,
            as_of=as_of,
        )

    async def ingest_price_feed(self, rows: list[PriceFeedRow]) -> int:
        for row in rows:
            await self.ingest_price_row(row)
        logger.info("Ingested %d price points", len(rows))
        return len(rows)
