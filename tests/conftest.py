"""Pytest configuration and fixtures."""

from typing import Dict, List, Optional, Sequence

import ccxt.async_support as ccxt
import pytest

from pick_scanner.core.enums import Timeframe
from pick_scanner.core.models import AssetContext, Candle, ExternalSignals
from pick_scanner.data.connector import MarketDataProvider, candles_to_frame

HOUR_MS = 3_600_000
DAY_MS = 24 * HOUR_MS
START_MS = 1_700_000_000_000


def make_hourly_candles(
    count: int = 100,
    start: float = 1000.0,
    step: float = -2.0,
    lows: Optional[Dict[int, float]] = None,
) -> List[Candle]:
    """
    Steadily trending hourly bars (high/low one unit around the close).

    With the defaults no technical rule fires: the trend is down, the bands
    are wide and price stays above 88% of its average.
    """
    candles = []
    for i in range(count):
        close = start + step * i
        candles.append(Candle(
            timestamp=START_MS + i * HOUR_MS,
            open=close - step,
            high=close + 1,
            low=close - 1,
            close=close,
            volume=1000.0,
        ))
    for offset, value in (lows or {}).items():
        index = count + offset if offset < 0 else offset
        candles[index] = candles[index].model_copy(update={"low": value})
    return candles


def make_daily_candles(count: int = 30, closes: Optional[Sequence[float]] = None) -> List[Candle]:
    """Flat daily bars at 900 unless explicit closes are given."""
    closes = list(closes) if closes is not None else [900.0] * count
    return [
        Candle(
            timestamp=START_MS + i * DAY_MS,
            open=c,
            high=c + 5,
            low=c - 5,
            close=c,
            volume=10_000.0,
        )
        for i, c in enumerate(closes)
    ]


def make_context(
    symbol: str = "BTC/USDT",
    hourly: Optional[List[Candle]] = None,
    daily: Optional[List[Candle]] = None,
    current_price: Optional[float] = None,
    funding_rate: Optional[float] = None,
) -> AssetContext:
    hourly = hourly if hourly is not None else make_hourly_candles()
    daily = daily if daily is not None else make_daily_candles()
    return AssetContext(
        symbol=symbol,
        hourly=candles_to_frame(hourly),
        daily=candles_to_frame(daily),
        current_price=current_price if current_price is not None else hourly[-1].close,
        funding_rate=funding_rate,
    )


class FakeMarketData(MarketDataProvider):
    """In-memory venue for scanner and bot tests."""

    def __init__(
        self,
        prices: Optional[Dict[str, float]] = None,
        hourly: Optional[Dict[str, List[Candle]]] = None,
        daily: Optional[Dict[str, List[Candle]]] = None,
        funding: Optional[Dict[str, float]] = None,
    ):
        self.prices = dict(prices or {})
        self.hourly = dict(hourly or {})
        self.daily = dict(daily or {})
        self.funding = dict(funding or {})
        self.fail_tickers = False
        self.failing_prices = set()
        self.candle_requests = []
        self.closed = False

    async def list_tickers(self) -> Dict[str, float]:
        if self.fail_tickers:
            raise ConnectionError("venue down")
        return dict(self.prices)

    async def fetch_candles(self, symbol, timeframe, limit=100):
        self.candle_requests.append((symbol, Timeframe(timeframe), limit))
        source = self.hourly if Timeframe(timeframe) == Timeframe.HOURLY else self.daily
        if symbol not in source:
            raise ConnectionError(f"no candles for {symbol}")
        return source[symbol][-limit:]

    async def fetch_funding_rate(self, symbol):
        if symbol not in self.funding:
            raise ccxt.NotSupported("no funding")
        return self.funding[symbol]

    async def get_last_price(self, symbol):
        if symbol in self.failing_prices:
            raise ConnectionError(f"ticker for {symbol} unavailable")
        return self.prices[symbol]

    async def close(self):
        self.closed = True


@pytest.fixture
def quiet_context():
    """100 hourly and 30 daily bars on which no technical rule fires."""
    return make_context()


@pytest.fixture
def empty_signals():
    return ExternalSignals()


@pytest.fixture
def fake_market():
    return FakeMarketData()

