from dependency_injector import containers, providers

from cardledger.accounting.cost_allocator import CostAllocator
from cardledger.accounting.pnl import PnLCalculator
from cardledger.accounting.reconciler import Reconciler
from cardledger.config import Settings
from cardledger.db.session import build_engine, build_session_factory
from cardledger.infra.price.resolver import PriceResolver
from cardledger.ingest.service import EventIngestor


class Container(containers.DeclarativeContainer):
    """Process-wide engine and session factory, plus per-session service factories.

    Services are built with the session as first argument, e.g.
    ``container.reconciler(session)``.
    """

    wiring_config = containers.WiringConfiguration(modules=["cardledger.api.deps"])

    settings = providers.Singleton(Settings)

    engine = providers.Singleton(
        build_engine,
        database_url=settings.provided.database_url,
        echo=settings.provided.debug,
    )

    session_factory = providers.Singleton(
        build_session_factory,
        engine=engine,
    )

    price_resolver = providers.Factory(PriceResolver)
    ingestor = providers.Factory(EventIngestor, settings=settings)
    reconciler = providers.Factory(Reconciler, settings=settings)
    cost_allocator = providers.Factory(CostAllocator)
    pnl_calculator = providers.Factory(PnLCalculator)
