"""Unit tests for the scoring engine."""

import pytest

from conftest import make_context, make_daily_candles, make_hourly_candles
from pick_scanner.core.errors import InsufficientDataError
from pick_scanner.core.models import ExternalSignals, ScoredCandidate, Trigger, WhaleTransfer
from pick_scanner.signal.engine import ScoringEngine, create_default_scoring_engine, score_asset
from pick_scanner.signal.evaluators import SignalEvaluator


class Always(SignalEvaluator):
    def __init__(self, label, weight):
        self.label = label
        self.weight = weight

    def fires(self, context, signals):
        return True


class TestScoringEngine:
    def setup_method(self):
        self.engine = create_default_scoring_engine()

    def test_quiet_asset_scores_zero(self, quiet_context, empty_signals):
        candidate = self.engine.score_asset(quiet_context, empty_signals)
        assert candidate.score == 0
        assert candidate.triggers == []
        assert candidate.primary_trigger is None
        assert candidate.baseline_price == 802.0

    def test_score_is_sum_of_fired_weights(self):
        hourly = make_hourly_candles(lows={-3: 799.0, -2: 800.0, -1: 801.0})
        context = make_context(hourly=hourly, funding_rate=-0.02)
        signals = ExternalSignals(social_scores={"BTC": 80}, fear_greed_index=18)

        candidate = self.engine.score_asset(context, signals)

        assert candidate.score == 27
        assert [t.label for t in candidate.triggers] == [
            "Higher Lows (Triangle)",
            "Social: Galaxy Score 80",
            "Short Squeeze potential",
            "Market Extreme Fear",
        ]
        assert candidate.primary_trigger == "Higher Lows (Triangle)"
        assert candidate.secondary_trigger == "Social: Galaxy Score 80"

    def test_extreme_fear_alone(self, quiet_context):
        candidate = self.engine.score_asset(quiet_context, ExternalSignals(fear_greed_index=18))
        assert candidate.score == 5
        assert candidate.primary_trigger == "Market Extreme Fear"
        assert candidate.secondary_trigger is None

    def test_whale_and_funding(self):
        context = make_context(symbol="ETH/USDT", funding_rate=-0.02)
        signals = ExternalSignals(
            whale_transfers=(WhaleTransfer(symbol="ETH", destination_type="exchange"),),
            fear_greed_index=18,
        )
        candidate = self.engine.score_asset(context, signals)
        assert candidate.score == 19

    def test_short_hourly_history_is_excluded(self, empty_signals):
        context = make_context(hourly=make_hourly_candles(count=99))
        with pytest.raises(InsufficientDataError):
            self.engine.score_asset(context, empty_signals)

    def test_short_daily_history_is_excluded(self, empty_signals):
        context = make_context(daily=make_daily_candles(count=20))
        with pytest.raises(InsufficientDataError):
            self.engine.score_asset(context, empty_signals)

    def test_scores_only_the_latest_windows(self, empty_signals):
        # 150 bars: the extra, older bars must not change the result
        long_hourly = make_hourly_candles(count=150, start=1100.0)
        candidate = self.engine.score_asset(make_context(hourly=long_hourly), empty_signals)
        trimmed = self.engine.score_asset(make_context(hourly=long_hourly[-100:]), empty_signals)
        assert candidate.score == trimmed.score
        assert candidate.triggers == trimmed.triggers

    def test_deterministic(self, quiet_context):
        signals = ExternalSignals(social_scores={"BTC": 90}, fear_greed_index=10)
        first = self.engine.score_asset(quiet_context, signals)
        second = self.engine.score_asset(quiet_context, signals)
        assert first == second

    def test_module_level_score_asset(self, quiet_context, empty_signals):
        assert score_asset(quiet_context, empty_signals).score == 0


class TestCustomEvaluators:
    def test_add_evaluator_keeps_order(self, quiet_context, empty_signals):
        engine = ScoringEngine()
        engine.add_evaluator(Always("first", 2))
        engine.add_evaluator(Always("second", 3))
        candidate = engine.score_asset(quiet_context, empty_signals)
        assert candidate.triggers == [Trigger(label="first", weight=2), Trigger(label="second", weight=3)]
        assert candidate.score == 5


class TestScoredCandidate:
    def test_score_must_match_triggers(self):
        with pytest.raises(ValueError):
            ScoredCandidate(
                symbol="BTC/USDT",
                score=10,
                triggers=[Trigger(label="EMA Cross", weight=3)],
                baseline_price=1.0,
            )
