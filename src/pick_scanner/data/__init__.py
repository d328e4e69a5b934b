"""Market data and external signal collaborators."""

from .connector import MarketDataProvider, CCXTMarketData, candles_to_frame
from .external import ExternalSignalCollector, FALLBACK_STABLECOINS

__all__ = [
    "MarketDataProvider",
    "CCXTMarketData",
    "candles_to_frame",
    "ExternalSignalCollector",
    "FALLBACK_STABLECOINS",
]
