"""Signal scoring module."""

from .evaluators import (
    SignalEvaluator,
    RoundingBottom,
    HigherLows,
    PsarFlip,
    EmaCross,
    VolatilitySqueeze,
    GapperContinuation,
    MeanReversion,
    VwapBounce,
    UnitBias,
    SocialGalaxyScore,
    WhaleActivity,
    ShortSqueeze,
    MarketExtremeFear,
    default_evaluators,
)
from .engine import ScoringEngine, create_default_scoring_engine, score_asset

__all__ = [
    "SignalEvaluator",
    "RoundingBottom",
    "HigherLows",
    "PsarFlip",
    "EmaCross",
    "VolatilitySqueeze",
    "GapperContinuation",
    "MeanReversion",
    "VwapBounce",
    "UnitBias",
    "SocialGalaxyScore",
    "WhaleActivity",
    "ShortSqueeze",
    "MarketExtremeFear",
    "default_evaluators",
    "ScoringEngine",
    "create_default_scoring_engine",
    "score_asset",
]
