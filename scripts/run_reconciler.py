"""Ingest an events file, allocate acquisition costs and run a full reconcile.

The file is a JSON list of events tagged by ``kind`` (scan / sell /
acquisition / price), in any order.

Usage:
    PYTHONPATH=src python scripts/run_reconciler.py events.json
"""

import asyncio
import json
import logging
import sys
import time
from pathlib import Path

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)-5s %(name)s - %(message)s")
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def main(path: Path) -> None:
    from pydantic import TypeAdapter

    from cardledger.container import Container
    from cardledger.db.models.acquisition import Acquisition
    from cardledger.domain.models.events import InboundEvent

    events = TypeAdapter(list[InboundEvent]).validate_python(json.loads(path.read_text()))
    print(f"Events: {len(events)}  from {path}")

    container = Container()
    sf = container.session_factory()

    async with sf() as session:
        # --- Step 1: Ingest ---
        print("\n--- Step 1: Ingest ---")
        t0 = time.time()
        ingestor = container.ingestor(session)
        acquisitions: list[Acquisition] = []
        for event in events:
            record = await ingestor.record(event)
            if isinstance(record, Acquisition):
                acquisitions.append(record)
        await session.commit()
        print(f"  {len(events)} events, {len(acquisitions)} acquisitions  ({time.time() - t0:.1f}s)")

        # --- Step 2: Allocate acquisition costs ---
        print("\n--- Step 2: Allocate costs ---")
        allocator = container.cost_allocator(session)
        for acquisition in acquisitions:
            await allocator.allocate_acquisition_costs(acquisition.id)
            print(f"  [{acquisition.name or acquisition.id}]  {acquisition.total_cost_cent} cents  ({acquisition.allocation_method})")
        await session.commit()

        # --- Step 3: Reconcile ---
        print("\n--- Step 3: Reconcile ---")
        report = await container.reconciler(session).run_full_reconciler()
        await session.commit()
        print(
            f"  identities: {report.identities}  scans: {report.scans_linked}  "
            f"sales: {report.sales_allocated}  provisional: {report.provisional_lots_created}"
        )
        for failure in report.failures:
            print(f"  FAIL {failure.ref}: {failure.message}")

        # --- Step 4: P&L ---
        print("\n--- Step 4: P&L ---")
        calculator = container.pnl_calculator(session)
        for acquisition in acquisitions:
            pnl = await calculator.get_acquisition_pnl(acquisition.id)
            print(
                f"  [{acquisition.name or acquisition.id}]  revenue: {pnl.revenue_cent}  "
                f"cost: {pnl.cost_cent}  profit: {pnl.profit_cent}  unrealized: {pnl.unrealized_cent}"
            )

    await container.engine().dispose()


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(main(Path(sys.argv[1])))
