"""
Daily Crypto Pick Scanner

Scores a universe of crypto assets against weighted technical and
sentiment rules, keeps the top picks and checks how they performed by
the end of the day.
"""

__version__ = "0.1.0"
__author__ = "Pick Scanner Team"

from .core.models import AssetContext, ExternalSignals, ScoredCandidate, Selection, ReconciliationResult
from .signal.engine import ScoringEngine, score_asset
from .scanner.ranker import rank
from .tracking.store import SelectionStore
from .tracking.reconciler import OutcomeReconciler

__all__ = [
    "AssetContext",
    "ExternalSignals",
    "ScoredCandidate",
    "Selection",
    "ReconciliationResult",
    "ScoringEngine",
    "score_asset",
    "rank",
    "SelectionStore",
    "OutcomeReconciler",
]
