"""Flat-file snapshot of the latest selection."""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from ..core.errors import PersistenceError
from ..core.models import Selection

logger = logging.getLogger(__name__)


class SelectionStore:
    """
    Holds exactly one selection. Every write replaces the previous snapshot
    as a whole; there is no history and no merging.
    """

    def __init__(self, path: Union[str, Path] = "master_picks.json"):
        self.path = Path(path)

    def write(self, selection: Selection) -> None:
        """Atomically replace the stored selection."""
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(selection.model_dump_json(indent=2), encoding="utf-8")
            tmp_path.replace(self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write selection to {self.path}: {e}") from e
        logger.info(f"Stored {len(selection.picks)} picks at {self.path}")

    def read(self) -> Optional[Selection]:
        """The stored selection, or None when there is none to read."""
        if not self.path.exists():
            logger.info(f"No stored selection at {self.path}")
            return None
        try:
            return Selection.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.error(f"Unreadable selection snapshot at {self.path}: {e}")
            return None
