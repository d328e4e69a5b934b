"""Reconcile earlier picks against the price observed now."""

import logging
from typing import Awaitable, Callable, List

from ..core.models import ReconciliationResult, ScoredCandidate, Selection

logger = logging.getLogger(__name__)

TARGET_PCT = 10.0

PriceLookup = Callable[[str], Awaitable[float]]


class OutcomeReconciler:
    """Measures each pick's change since its baseline price."""

    def __init__(self, price_lookup: PriceLookup, target_pct: float = TARGET_PCT):
        self.price_lookup = price_lookup
        self.target_pct = target_pct

    async def reconcile(self, selection: Selection) -> List[ReconciliationResult]:
        """One row per pick, in selection order. Lookup failures become failed rows."""
        results = []
        for pick in selection.picks:
            result = await self._reconcile_pick(pick)
            results.append(result)

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Reconciled {len(results)} picks ({failed} failed)")
        return results

    async def _reconcile_pick(self, pick: ScoredCandidate) -> ReconciliationResult:
        baseline = pick.baseline_price
        if baseline <= 0:
            return ReconciliationResult(
                symbol=pick.symbol, baseline_price=baseline, error=f"invalid baseline price {baseline}"
            )

        try:
            current = float(await self.price_lookup(pick.symbol))
        except Exception as e:
            logger.warning(f"Error tracking {pick.symbol}: {e}")
            return ReconciliationResult(symbol=pick.symbol, baseline_price=baseline, error=str(e) or type(e).__name__)

        # multiply first so 100 -> 112 is exactly 12.0
        change = (current - baseline) * 100 / baseline
        return ReconciliationResult(
            symbol=pick.symbol,
            baseline_price=baseline,
            current_price=current,
            percent_change=change,
            target_met=change >= self.target_pct,
        )
