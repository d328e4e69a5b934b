"""Market data provider interface and the CCXT implementation."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence
import logging

import pandas as pd
import ccxt.async_support as ccxt

from ..core.enums import Timeframe
from ..core.models import Candle

logger = logging.getLogger(__name__)

OHLCV_COLUMNS = ['timestamp', 'open', 'high', 'low', 'close', 'volume']


def candles_to_frame(candles: Sequence[Candle]) -> pd.DataFrame:
    """Convert candles to an OHLCV DataFrame indexed by bar time."""
    df = pd.DataFrame(
        [[c.timestamp, c.open, c.high, c.low, c.close, c.volume] for c in candles],
        columns=OHLCV_COLUMNS,
    )
    df['timestamp'] = pd.to_datetime(df['timestamp'], unit='ms')
    df.set_index('timestamp', inplace=True)
    return df


class MarketDataProvider(ABC):
    """Abstract base class for market data providers."""

    @abstractmethod
    async def list_tickers(self) -> Dict[str, float]:
        """Map every listed pair to its last traded price."""
        pass

    @abstractmethod
    async def fetch_candles(
        self,
        symbol: str,
        timeframe: Timeframe,
        limit: int = 100
    ) -> List[Candle]:
        """Fetch the most recent *limit* bars, oldest first."""
        pass

    @abstractmethod
    async def fetch_funding_rate(self, symbol: str) -> float:
        """Current perpetual funding rate. May raise."""
        pass

    @abstractmethod
    async def get_last_price(self, symbol: str) -> float:
        """Current last traded price. May raise."""
        pass

    @abstractmethod
    async def close(self):
        """Close connection."""
        pass


class CCXTMarketData(MarketDataProvider):
    """CCXT-based market data provider."""

    def __init__(self, exchange_name: str = 'kraken', config: Optional[Dict] = None):
        """Initialize CCXT exchange client."""
        self.exchange_name = exchange_name
        self.config = config or {}

        exchange_class = getattr(ccxt, exchange_name)
        self.exchange = exchange_class({
            'enableRateLimit': True,
            'timeout': 30000,
            **self.config
        })

        logger.info(f"Initialized CCXT market data for {exchange_name}")

    async def list_tickers(self) -> Dict[str, float]:
        """Fetch all tickers at once via CCXT fetch_tickers."""
        try:
            tickers = await self.exchange.fetch_tickers()
        except Exception as e:
            logger.error(f"Error fetching tickers: {e}")
            raise

        prices = {
            symbol: float(ticker['last'])
            for symbol, ticker in tickers.items()
            if ticker.get('last') is not None
        }
        logger.debug(f"Fetched {len(prices)} priced tickers of {len(tickers)}")
        return prices

    async def fetch_candles(
        self,
        symbol: str,
        timeframe: Timeframe = Timeframe.HOURLY,
        limit: int = 100
    ) -> List[Candle]:
        """Get OHLCV bars."""
        tf = Timeframe(timeframe).value
        try:
            ohlcv = await self.exchange.fetch_ohlcv(symbol, tf, limit=limit)
        except Exception as e:
            logger.error(f"Error fetching {tf} OHLCV for {symbol}: {e}")
            raise

        candles = [
            Candle(timestamp=int(row[0]), open=row[1], high=row[2], low=row[3], close=row[4],
                   volume=row[5] or 0.0)
            for row in ohlcv
        ]
        logger.debug(f"Retrieved {len(candles)} {tf} bars for {symbol}")
        return candles

    async def fetch_funding_rate(self, symbol: str) -> float:
        """Get current funding rate for a perpetual."""
        if not self.exchange.has.get('fetchFundingRate'):
            raise ccxt.NotSupported(f"{self.exchange_name} does not provide funding rates")
        funding = await self.exchange.fetch_funding_rate(symbol)
        rate = funding.get('fundingRate')
        if rate is None:
            raise ValueError(f"No funding rate reported for {symbol}")
        return float(rate)

    async def get_last_price(self, symbol: str) -> float:
        """Get current last traded price."""
        try:
            ticker = await self.exchange.fetch_ticker(symbol)
        except Exception as e:
            logger.error(f"Error fetching ticker for {symbol}: {e}")
            raise
        last = ticker.get('last')
        if last is None:
            raise ValueError(f"No last price for {symbol}")
        return float(last)

    async def close(self):
        """Close exchange connection."""
        await self.exchange.close()
        logger.info(f"Closed connection to {self.exchange_name}")
