"""Scoring engine: folds every evaluator over one asset."""

from typing import List, Optional
import logging

from ..core.errors import InsufficientDataError
from ..core.models import AssetContext, ExternalSignals, ScoredCandidate
from .evaluators import DAILY_WINDOW, SignalEvaluator, default_evaluators

logger = logging.getLogger(__name__)

HOURLY_WINDOW = 100


class ScoringEngine:
    """Runs a fixed, ordered set of evaluators and sums their weights."""

    def __init__(
        self,
        evaluators: Optional[List[SignalEvaluator]] = None,
        hourly_bars: int = HOURLY_WINDOW,
        daily_bars: int = DAILY_WINDOW,
    ):
        self.evaluators: List[SignalEvaluator] = list(evaluators) if evaluators is not None else []
        self.hourly_bars = hourly_bars
        self.daily_bars = daily_bars

    def add_evaluator(self, evaluator: SignalEvaluator):
        self.evaluators.append(evaluator)
        logger.debug(f"Added evaluator {evaluator.label!r} (weight {evaluator.weight})")

    def score_asset(self, context: AssetContext, signals: ExternalSignals) -> ScoredCandidate:
        """
        Score one asset.

        Raises:
            InsufficientDataError: the asset lacks the full hourly or daily
                window and must be left out of the scan.
        """
        if len(context.hourly) < self.hourly_bars:
            raise InsufficientDataError(f"{context.symbol} hourly bars", self.hourly_bars, len(context.hourly))
        if len(context.daily) < self.daily_bars:
            raise InsufficientDataError(f"{context.symbol} daily bars", self.daily_bars, len(context.daily))

        window = context.model_copy(update={
            "hourly": context.hourly.tail(self.hourly_bars),
            "daily": context.daily.tail(self.daily_bars),
        })

        triggers = [
            trigger
            for trigger in (e.evaluate(window, signals) for e in self.evaluators)
            if trigger is not None
        ]
        return ScoredCandidate(
            symbol=context.symbol,
            score=sum(t.weight for t in triggers),
            triggers=triggers,
            baseline_price=context.current_price,
        )


def create_default_scoring_engine() -> ScoringEngine:
    """Create a scoring engine with the canonical evaluators."""
    engine = ScoringEngine(default_evaluators())
    logger.debug(f"Created default scoring engine with {len(engine.evaluators)} evaluators")
    return engine


_default_engine: Optional[ScoringEngine] = None


def score_asset(context: AssetContext, signals: ExternalSignals) -> ScoredCandidate:
    """Score with the default engine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = create_default_scoring_engine()
    return _default_engine.score_asset(context, signals)
