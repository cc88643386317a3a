"""Cumulative cleanup statistics persisted between runs."""

import json
import logging
import threading
from pathlib import Path

from reclaimer.models import StatsSnapshot
from reclaimer.scanner import expand_path

log = logging.getLogger(__name__)

DEFAULT_STATS_FILE = "~/.reclaimer/stats.json"


class StatsStore:
    """Bytes freed and items deleted, stored as JSON."""

    def __init__(self, path: str | Path = DEFAULT_STATS_FILE):
        self.path = expand_path(path)
        self._lock = threading.Lock()

    def snapshot(self) -> StatsSnapshot:
        """Load the current totals (zeros if the file is missing or unreadable)."""
        if not self.path.exists():
            return StatsSnapshot()

        try:
            with open(self.path) as f:
                return StatsSnapshot.model_validate(json.load(f))
        except (json.JSONDecodeError, OSError, ValueError) as e:
            log.warning("Ignoring unreadable stats file %s: %s", self.path, e)
            return StatsSnapshot()

    def _save(self, stats: StatsSnapshot) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(stats.model_dump(), f, indent=2)
            return True
        except OSError as e:
            log.warning("Could not save stats to %s: %s", self.path, e)
            return False

    def add_cleaned_space(self, bytes_freed: int) -> None:
        """Record one successful deletion that freed bytes_freed."""
        with self._lock:
            current = self.snapshot()
            self._save(
                StatsSnapshot(
                    total_cleaned=current.total_cleaned + bytes_freed,
                    items_deleted=current.items_deleted + 1,
                )
            )

    def reset_stats(self) -> None:
        with self._lock:
            self._save(StatsSnapshot())
