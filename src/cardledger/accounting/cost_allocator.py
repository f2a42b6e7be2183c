"""CostAllocator: spreads an acquisition's total cost over its lots.

Totals are integer cents and always reconcile exactly:
``sum(lot_cost_cent(lot)) == acquisition.total_cost_cent``. Unit costs are
decimal cents so a lot can absorb a residual cent that does not divide by its
quantity.
"""

import logging
import uuid
from decimal import ROUND_HALF_EVEN, Decimal
from fractions import Fraction

from sqlalchemy.ext.asyncio import AsyncSession

from cardledger.db.models.card_lot import CardLot, lot_cost_cent
from cardledger.db.repos.acquisition_repo import AcquisitionRepo
from cardledger.db.repos.lot_repo import LotRepo
from cardledger.db.session import utc_now
from cardledger.domain.enums import AllocationMethod
from cardledger.exceptions import AllocationMismatchError, NotFoundError
from cardledger.infra.price.resolver import PriceResolver

logger = logging.getLogger(__name__)

UNIT_COST_QUANT = Decimal("0.00000001")


def unit_cost_for(allocated_cent: int, quantity: int) -> Decimal:
    if quantity <= 0:
        return Decimal(0)
    return (Decimal(allocated_cent) / Decimal(quantity)).quantize(UNIT_COST_QUANT, rounding=ROUND_HALF_EVEN)


def split_equal_per_card(total_cent: int, lots: list[CardLot]) -> dict[int, int]:
    """Same cost per physical card; the residual goes to the first lot (by id) holding stock."""
    total_qty = sum(lot.quantity for lot in lots)
    base = total_cent // total_qty
    residual = total_cent - base * total_qty
    allocated = {lot.id: base * lot.quantity for lot in lots}
    designated = min(lot.id for lot in lots if lot.quantity > 0)
    allocated[designated] += residual
    return allocated


def split_by_weight(total_cent: int, lots: list[CardLot], weights: dict[int, Fraction]) -> dict[int, int]:
    """Largest-remainder split of ``total_cent`` proportional to ``weights`` (ties by lot id)."""
    weight_sum = sum(weights.values(), Fraction(0))
    ideal = {lot.id: Fraction(total_cent) * weights[lot.id] / weight_sum for lot in lots}
    allocated = {lot_id: int(share) for lot_id, share in ideal.items()}  # floor, shares are >= 0
    leftover = total_cent - sum(allocated.values())
    by_remainder = sorted(ideal, key=lambda lot_id: (-(ideal[lot_id] - allocated[lot_id]), lot_id))
    for lot_id in by_remainder[:leftover]:
        allocated[lot_id] += 1
    return allocated


class CostAllocator:
    def __init__(self, session: AsyncSession, price_resolver: PriceResolver | None = None) -> None:
        self._session = session
        self._acquisitions = AcquisitionRepo(session)
        self._lots = LotRepo(session)
        self._prices = price_resolver or PriceResolver(session)

    async def allocate_acquisition_costs(
        self,
        acquisition_id: uuid.UUID,
        method: AllocationMethod | str | None = None,
    ) -> None:
        """Write unit costs for every lot of an acquisition. Re-running is idempotent.

        ``method=None`` uses the acquisition's stored allocation method.
        """
        acquisition = await self._acquisitions.get_by_id(acquisition_id)
        if acquisition is None:
            raise NotFoundError("Acquisition", acquisition_id)

        method = AllocationMethod(method or acquisition.allocation_method)
        lots = await self._lots.get_by_acquisition_id(acquisition_id)
        total = acquisition.total_cost_cent

        if not lots or sum(lot.quantity for lot in lots) == 0:
            logger.info("Acquisition %s has no stock yet, nothing to allocate", acquisition_id)
            return

        if method == AllocationMethod.MANUAL:
            actual = sum(lot_cost_cent(lot) for lot in lots)
            if actual != total:
                raise AllocationMismatchError(acquisition_id, total, actual)
            allocated = None
        elif method == AllocationMethod.PROPORTIONAL_TO_MARKET_VALUE:
            allocated = await self._split_by_market_value(total, lots)
        else:
            allocated = split_equal_per_card(total, lots)

        if allocated is not None:
            for lot in lots:
                await self._lots.update(lot.id, unit_cost=unit_cost_for(allocated[lot.id], lot.quantity))

        acquisition.allocation_method = method.value
        acquisition.allocated_at = utc_now()
        await self._session.flush()
        logger.info("Allocated %d cents over %d lots of acquisition %s (%s)", total, len(lots), acquisition_id, method.value)

    async def _split_by_market_value(self, total_cent: int, lots: list[CardLot]) -> dict[int, int]:
        prices: dict[int, int] = {}
        for lot in lots:
            point = await self._prices.get_latest_price_for_card(lot.card_id, finish=lot.finish)
            if point is not None and point.price_cent > 0:
                prices[lot.id] = point.price_cent

        if not prices:
            logger.warning("No market prices for any lot, falling back to equal_per_card")
            return split_equal_per_card(total_cent, lots)

        # Unpriced lots are valued at the average card price of the priced ones
        fallback = Fraction(sum(prices.values()), len(prices))
        weights = {
            lot.id: Fraction(prices.get(lot.id, fallback)) * lot.quantity
            for lot in lots
        }
        if len(prices) < len(lots):
            logger.warning("%d of %d lots have no market price", len(lots) - len(prices), len(lots))
        return split_by_weight(total_cent, lots, weights)
