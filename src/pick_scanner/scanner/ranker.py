"""Ranking and top-K selection."""

from typing import Iterable

from ..core.models import ScoredCandidate, Selection

TOP_K = 5


def rank(candidates: Iterable[ScoredCandidate], k: int = TOP_K) -> Selection:
    """
    Order candidates by descending score and keep the first *k*.

    ``sorted`` is stable with ``reverse=True`` too, so equal scores keep
    their scan order and identical inputs give identical selections.
    """
    if k < 0:
        raise ValueError("k must be non-negative")
    ordered = sorted(candidates, key=lambda c: c.score, reverse=True)
    return Selection(picks=ordered[:k])
