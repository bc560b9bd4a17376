"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from settings import DEFAULT_SAMPLE_INTERVAL_MS, DEFAULT_SENSOR_ENDPOINT


@dataclass(frozen=True, slots=True)
class Reading:
    """A single temperature/humidity sample taken from the sensor."""

    temperature: float
    humidity: float
    captured_at: datetime


@dataclass(frozen=True, slots=True)
class Configuration:
    """Live tunable agent state. Instances are snapshots and never mutate."""

    sample_interval_ms: int = DEFAULT_SAMPLE_INTERVAL_MS
    sensor_endpoint: str = DEFAULT_SENSOR_ENDPOINT

    @property
    def sample_interval_seconds(self) -> float:
        return self.sample_interval_ms / 1000


@dataclass(frozen=True, slots=True)
class PendingConfigUpdate:
    """Validated, sparse configuration change. ``None`` marks an absent field."""

    interval_ms: Optional[int] = None
    endpoint: Optional[str] = None

    def is_empty(self) -> bool:
        return self.interval_ms is None and self.endpoint is None
