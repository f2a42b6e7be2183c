"""Celery tasks for background processing."""

import asyncio
import logging

from cardledger.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="reconcile_all", max_retries=2, default_retry_delay=30)
def reconcile_all_task(self) -> dict:
    """Run a full reconciliation pass.

    Bridges to async code via asyncio.run(): each task invocation
    creates its own engine + session (no shared state with FastAPI).
    """
    return asyncio.run(_with_session(reconcile_all))


@celery_app.task(bind=True, name="ingest_price_feed", max_retries=2, default_retry_delay=30)
def ingest_price_feed_task(self, rows: list[dict]) -> dict:
    """Upsert a batch of pre-fetched price-feed rows."""
    return asyncio.run(_with_session(lambda session: ingest_price_feed(session, rows)))


@celery_app.task(bind=True, name="allocate_acquisition_costs")
def allocate_acquisition_costs_task(self, acquisition_id: str, method: str | None = None) -> dict:
    return asyncio.run(_with_session(lambda session: allocate_costs(session, acquisition_id, method)))


async def _with_session(work) -> dict:
    from cardledger.config import settings
    from cardledger.db.session import build_engine, build_session_factory

    engine = build_engine(settings.database_url, echo=False)
    session_factory = build_session_factory(engine)
    try:
        async with session_factory() as session:
            return await work(session)
    finally:
        await engine.dispose()


async def reconcile_all(session) -> dict:
    from cardledger.accounting.reconciler import Reconciler

    report = await Reconciler(session).run_full_reconciler()
    await session.commit()
    return {"status": "ok", **report.model_dump(mode="json")}


async def ingest_price_feed(session, rows: list[dict]) -> dict:
    from pydantic import ValidationError

    from cardledger.domain.models.events import PriceFeedRow
    from cardledger.ingest.service import EventIngestor

    try:
        parsed = [PriceFeedRow.model_validate(row) for row in rows]
    except ValidationError as e:
        logger.error("Rejected price feed batch: %s", e)
        return {"status": "error", "message": str(e)}

    count = await EventIngestor(session).ingest_price_feed(parsed)
    await session.commit()
    return {"status": "ok", "ingested": count}


async def allocate_costs(session, acquisition_id: str, method: str | None) -> dict:
    import uuid

    from cardledger.accounting.cost_allocator import CostAllocator
    from cardledger.exceptions import CardLedgerError

    try:
        await CostAllocator(session).allocate_acquisition_costs(uuid.UUID(acquisition_id), method)
    except CardLedgerError as e:
        logger.error("Cost allocation for %s failed: %s", acquisition_id, e)
        await session.rollback()
        return {"status": "error", "message": str(e)}
    await session.commit()
    return {"status": "ok", "acquisition_id": acquisition_id}
