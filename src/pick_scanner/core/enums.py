"""Core enumerations for the pick scanner."""

from enum import Enum


class Timeframe(str, Enum):
    """Candle intervals requested from the market data provider."""
    HOURLY = "1h"
    DAILY = "1d"


class DestinationType(str, Enum):
    """Owner type of a large-transfer destination address."""
    EXCHANGE = "exchange"
    WALLET = "wallet"
    UNKNOWN = "unknown"
