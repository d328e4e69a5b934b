"""Core module for the pick scanner."""

from .models import (
    Candle, AssetContext, WhaleTransfer, ExternalSignals, UniverseAsset,
    Trigger, ScoredCandidate, Selection, ReconciliationResult
)
from .enums import Timeframe, DestinationType
from .errors import PickScannerError, InsufficientDataError, PersistenceError

__all__ = [
    "Candle",
    "AssetContext",
    "WhaleTransfer",
    "ExternalSignals",
    "UniverseAsset",
    "Trigger",
    "ScoredCandidate",
    "Selection",
    "ReconciliationResult",
    "Timeframe",
    "DestinationType",
    "PickScannerError",
    "InsufficientDataError",
    "PersistenceError",
]
