"""Pydantic schemas for telemetry messages and the control API."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class LoopState(str, Enum):
    """Telemetry loop lifecycle states exposed via the API."""

    idle = "idle"
    sampling = "sampling"
    formatting = "formatting"
    publishing = "publishing"
    sleeping = "sleeping"
    cancelled = "cancelled"


class TelemetryEvent(BaseModel):
    """Outbound telemetry message, serialized with its wire field names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    time_created: str = Field(..., alias="timeCreated")
    temperature: float
    humidity: float

    def to_payload(self) -> bytes:
        return self.model_dump_json(by_alias=True).encode("utf-8")


class EffectiveConfigReport(BaseModel):
    """Fields accepted from a desired-configuration update."""

    model_config = ConfigDict(populate_by_name=True)

    interval_ms: Optional[int] = Field(default=None, alias="intervalMillis")
    endpoint: Optional[str] = None

    def is_empty(self) -> bool:
        return self.interval_ms is None and self.endpoint is None

    def to_reported(self) -> Dict[str, Any]:
        """Reported-properties document containing only the accepted fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ConfigurationOut(BaseModel):
    """Effective configuration currently used by the telemetry loop."""

    sample_interval_ms: int = Field(..., gt=0)
    sensor_endpoint: str


class AgentStatus(BaseModel):
    """Telemetry loop counters and state."""

    state: LoopState
    running: bool
    cycles: int = Field(..., ge=0)
    published: int = Field(..., ge=0)
    read_failures: int = Field(..., ge=0)
    publish_failures: int = Field(..., ge=0)
    last_event: Optional[TelemetryEvent] = None
    configuration: ConfigurationOut
