"""Models for the pick scanner."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.models import ScoredCandidate, Selection


@dataclass
class ScanReport:
    """What one scan looked at, what it scored and what it had to skip."""

    scanned: int = 0
    candidates: List[ScoredCandidate] = field(default_factory=list)
    skipped: Dict[str, str] = field(default_factory=dict)
    selection: Optional[Selection] = None

    @property
    def scored(self) -> int:
        return len(self.candidates)

    def summary(self) -> str:
        return f"scanned={self.scanned} scored={self.scored} skipped={len(self.skipped)}"
