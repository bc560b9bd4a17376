"""Thread-safe holder for the live agent configuration."""

from __future__ import annotations

from dataclasses import replace
from threading import Lock
from typing import Optional

from models.records import Configuration, PendingConfigUpdate


class ConfigStore:
    """Swaps immutable ``Configuration`` snapshots under a lock."""

    def __init__(self, initial: Optional[Configuration] = None) -> None:
        self._current = initial or Configuration()
        self._lock = Lock()

    def get(self) -> Configuration:
        with self._lock:
            return self._current

    def apply(self, update: PendingConfigUpdate) -> Configuration:
        """Overwrite the fields present in ``update`` and return the new snapshot."""
        changes = {}
        if update.interval_ms is not None:
            changes["sample_interval_ms"] = update.interval_ms
        if update.endpoint is not None:
            changes["sensor_endpoint"] = update.endpoint

        with self._lock:
            if changes:
                self._current = replace(self._current, **changes)
            return self._current
