"""Flat-file JSON store for the whole task list."""

import json
import logging
from pathlib import Path
from typing import Any

from ..models.task import StoreAck

logger = logging.getLogger(__name__)


class FileTaskStore:
    """Reads and overwrites a single JSON array of task objects.

    The store does not interpret the objects it holds. Single-writer only:
    concurrent writers race and the last one wins.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def read_all(self) -> list[dict[str, Any]]:
        """Return every stored task, or an empty list if nothing usable is on disk."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Task store unreadable, treating as empty: {self.path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Task store does not hold a JSON array, treating as empty: {self.path}")
            return []

        return data

    def write_all(self, tasks: list[dict[str, Any]]) -> StoreAck:
        """Replace the stored list with ``tasks``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(tasks, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.debug(f"Wrote {len(tasks)} tasks to {self.path}")
        return StoreAck()
