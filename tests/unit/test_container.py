from cardledger.accounting.cost_allocator import CostAllocator
from cardledger.accounting.pnl import PnLCalculator
from cardledger.accounting.reconciler import Reconciler
from cardledger.config import Settings
from cardledger.container import Container
from cardledger.infra.price.resolver import PriceResolver
from cardledger.ingest.service import EventIngestor


class TestContainer:
    async def test_service_factories_take_session(self, session):
        container = Container()
        try:
            assert isinstance(container.settings(), Settings)
            assert isinstance(container.ingestor(session), EventIngestor)
            assert isinstance(container.reconciler(session), Reconciler)
            assert isinstance(container.cost_allocator(session), CostAllocator)
            assert isinstance(container.pnl_calculator(session), PnLCalculator)
            assert isinstance(container.price_resolver(session), PriceResolver)
        finally:
            container.unwire()

    def test_settings_is_singleton(self):
        container = Container()
        try:
            assert container.settings() is container.settings()
        finally:
            container.unwire()
