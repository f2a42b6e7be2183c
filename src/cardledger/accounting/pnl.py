"""PnLCalculator: realized and unrealized profit per acquisition. Read-only."""

import uuid
from collections import defaultdict

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.card_lot import lot_cost_cent
from cardledger.db.repos.acquisition_repo import AcquisitionRepo
from cardledger.db.repos.allocation_repo import AllocationRepo
from cardledger.db.repos.event_repo import SellRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.domain.models.ledger import AcquisitionPnL, LotPnL
from cardledger.exceptions import NotFoundError
from cardledger.infra.price.resolver import PriceResolver


class PnLCalculator:
    def __init__(self, session: AsyncSession, price_resolver: PriceResolver | None = None) -> None:
        self._acquisitions = AcquisitionRepo(session)
        self._lots = LotRepo(session)
        self._allocations = AllocationRepo(session)
        self._sells = SellRepo(session)
        self._prices = price_resolver or PriceResolver(session)

    async def get_acquisition_pnl(self, acquisition_id: uuid.UUID) -> AcquisitionPnL:
        """revenue = sum(sale price x allocated qty), cost = sum(lot cost), profit = revenue - cost."""
        acquisition = await self._acquisitions.get_by_id(acquisition_id)
        if acquisition is None:
            raise NotFoundError("Acquisition", acquisition_id)

        lots = await self._lots.get_by_acquisition_id(acquisition_id)
        allocations = await self._allocations.list_for_lots([lot.id for lot in lots])
        sells = {s.id: s for s in await self._sells.get_by_ids(sorted({a.transaction_id for a in allocations}))}

        sold: dict[int, int] = defaultdict(int)
        revenue: dict[int, int] = defaultdict(int)
        for allocation in allocations:
            sold[allocation.lot_id] += allocation.quantity
            revenue[allocation.lot_id] += sells[allocation.transaction_id].price_cent * allocation.quantity

        result = AcquisitionPnL(acquisition_id=acquisition_id)
        for lot in lots:
            cost = lot_cost_cent(lot)
            remaining = lot.quantity - sold[lot.id]
            market_price = None
            unrealized = 0
            if remaining > 0:
                point = await self._prices.get_latest_price_for_card(lot.card_id, finish=lot.finish)
                if point is not None:
                    market_price = point.price_cent
                    unrealized = round(remaining * (market_price - lot.unit_cost))

            result.lots.append(LotPnL(
                lot_id=lot.id,
                card_id=lot.card_id,
                quantity=lot.quantity,
                sold_quantity=sold[lot.id],
                unit_cost=lot.unit_cost,
                cost_cent=cost,
                revenue_cent=revenue[lot.id],
                market_price_cent=market_price,
                unrealized_cent=unrealized,
            ))
            result.cost_cent += cost
            result.revenue_cent += revenue[lot.id]
            result.unrealized_cent += unrealized

        result.profit_cent = result.revenue_cent - result.cost_cent
        return result
