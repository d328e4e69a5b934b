"""Selection persistence and outcome tracking."""

from .store import SelectionStore
from .reconciler import OutcomeReconciler, TARGET_PCT

__all__ = ["SelectionStore", "OutcomeReconciler", "TARGET_PCT"]
