"""Signal evaluators.

Each evaluator is an independent rule with a fixed label and point weight.
Evaluators read the asset context and the shared external signals and never
mutate either, so their contributions can be summed in any order.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from ..core.enums import DestinationType
from ..core.errors import InsufficientDataError
from ..core.models import AssetContext, ExternalSignals, Trigger
from . import indicators

logger = logging.getLogger(__name__)

DAILY_WINDOW = 30


class SignalEvaluator(ABC):
    """Abstract base class for signal evaluators."""

    label: str = ""
    weight: int = 0

    def evaluate(self, context: AssetContext, signals: ExternalSignals) -> Optional[Trigger]:
        """Return a trigger when the rule fires, otherwise None."""
        try:
            if not self.fires(context, signals):
                return None
            return Trigger(label=self.describe(context, signals), weight=self.weight)
        except InsufficientDataError as e:
            logger.debug(f"{self.__class__.__name__} not applicable to {context.symbol}: {e}")
            return None
        except Exception as e:
            logger.error(f"Error in {self.__class__.__name__} for {context.symbol}: {e}")
            return None

    @abstractmethod
    def fires(self, context: AssetContext, signals: ExternalSignals) -> bool:
        """Whether the rule's condition holds."""
        pass

    def describe(self, context: AssetContext, signals: ExternalSignals) -> str:
        return self.label


# ----------------------------------------------------------------------
# Technical & pattern
# ----------------------------------------------------------------------

class RoundingBottom(SignalEvaluator):
    """Daily closes dipped mid-window and recovered above the trough."""

    label = "Rounding Bottom"
    weight = 5

    def fires(self, context, signals):
        closes = context.daily["close"].to_numpy()[-DAILY_WINDOW:]
        if len(closes) < DAILY_WINDOW:
            raise InsufficientDataError("daily closes", DAILY_WINDOW, len(closes))
        trough = indicators.minimum(closes[10:20])
        return trough < closes[0] and closes[29] > trough


class HigherLows(SignalEvaluator):
    """Three consecutive rising hourly lows."""

    label = "Higher Lows (Triangle)"
    weight = 4

    def fires(self, context, signals):
        lows = context.hourly["low"].to_numpy()
        if len(lows) < 3:
            raise InsufficientDataError("hourly lows", 3, len(lows))
        return lows[-1] > lows[-2] > lows[-3]


class PsarFlip(SignalEvaluator):
    label = "PSAR Flip"
    weight = 6
    step = 0.02
    max_step = 0.2

    def fires(self, context, signals):
        hourly = context.hourly
        sar = indicators.parabolic_sar(hourly["high"], hourly["low"], self.step, self.max_step)
        return indicators.sar_flipped_up(sar, hourly["close"])


# ----------------------------------------------------------------------
# Momentum
# ----------------------------------------------------------------------

class EmaCross(SignalEvaluator):
    label = "EMA Cross"
    weight = 3
    fast_period = 10
    slow_period = 20

    def fires(self, context, signals):
        closes = context.hourly["close"]
        fast = indicators.ema(closes, self.fast_period)
        slow = indicators.ema(closes, self.slow_period)
        return fast[-1] > slow[-1]


class VolatilitySqueeze(SignalEvaluator):
    """Bollinger bands compressed to under 3% of the middle line."""

    label = "Volatility Squeeze"
    weight = 7
    period = 20
    std_dev = 2.0
    max_width = 0.03

    def fires(self, context, signals):
        bands = indicators.bollinger(context.hourly["close"], self.period, self.std_dev)
        width = indicators.band_width(bands).iloc[-1]
        return width < self.max_width


class GapperContinuation(SignalEvaluator):
    """Price has run at least 3% above today's daily open."""

    label = "Gapper Continuation"
    weight = 4
    min_gap = 0.03

    def fires(self, context, signals):
        if context.daily.empty or context.hourly.empty:
            raise InsufficientDataError("daily/hourly bars", 1, 0)
        day_open = float(context.daily["open"].iloc[-1])
        if day_open <= 0:
            return False
        last_close = float(context.hourly["close"].iloc[-1])
        return (last_close - day_open) / day_open >= self.min_gap


# ----------------------------------------------------------------------
# Quant
# ----------------------------------------------------------------------

class MeanReversion(SignalEvaluator):
    label = "Mean Reversion (Oversold)"
    weight = 8
    discount = 0.88

    def fires(self, context, signals):
        closes = context.hourly["close"].to_numpy()
        average = indicators.mean(closes)
        return closes[-1] < average * self.discount


class VwapBounce(SignalEvaluator):
    """Last bar wicked into VWAP and closed above it."""

    label = "VWAP Bounce"
    weight = 4

    def fires(self, context, signals):
        hourly = context.hourly
        line = indicators.vwap(hourly["high"], hourly["low"], hourly["close"], hourly["volume"])
        last_vwap = line[-1]
        return bool(hourly["close"].iloc[-1] > last_vwap and hourly["low"].iloc[-1] <= last_vwap)


# ----------------------------------------------------------------------
# Behavioural & on-chain
# ----------------------------------------------------------------------

class UnitBias(SignalEvaluator):
    label = "Unit Bias"
    weight = 2
    max_price = 0.01

    def fires(self, context, signals):
        return context.current_price < self.max_price


class SocialGalaxyScore(SignalEvaluator):
    label = "Social: Galaxy Score"
    weight = 10
    min_score = 70

    def fires(self, context, signals):
        score = signals.social_score(context.base_symbol)
        return score is not None and score > self.min_score

    def describe(self, context, signals):
        score = signals.social_score(context.base_symbol)
        shown = f"{score:g}" if score.is_integer() else repr(score)
        return f"{self.label} {shown}"


class WhaleActivity(SignalEvaluator):
    """A large transfer of the asset landed on an exchange."""

    label = "Whale Activity Detected"
    weight = 6

    def fires(self, context, signals):
        return any(
            t.destination_type.lower() == DestinationType.EXCHANGE.value
            for t in signals.transfers_for(context.base_symbol)
        )


# ----------------------------------------------------------------------
# Psychology
# ----------------------------------------------------------------------

class ShortSqueeze(SignalEvaluator):
    """Deeply negative funding; never fires when the rate is unavailable."""

    label = "Short Squeeze potential"
    weight = 8
    max_funding = -0.01

    def fires(self, context, signals):
        return context.funding_rate is not None and context.funding_rate < self.max_funding


class MarketExtremeFear(SignalEvaluator):
    label = "Market Extreme Fear"
    weight = 5
    max_index = 25

    def fires(self, context, signals):
        return signals.fear_greed_index is not None and signals.fear_greed_index < self.max_index


def default_evaluators() -> List[SignalEvaluator]:
    """The canonical evaluators in evaluation order."""
    return [
        RoundingBottom(),
        HigherLows(),
        PsarFlip(),
        EmaCross(),
        VolatilitySqueeze(),
        GapperContinuation(),
        MeanReversion(),
        VwapBounce(),
        UnitBias(),
        SocialGalaxyScore(),
        WhaleActivity(),
        ShortSqueeze(),
        MarketExtremeFear(),
    ]
