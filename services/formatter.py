"""Conversion of sensor readings into outbound telemetry messages."""

from __future__ import annotations

from datetime import datetime

from app.schemas import TelemetryEvent
from models.records import Reading

CONTENT_TYPE = "application/json"
TIME_FORMAT = "%I:%M:%S"


class TelemetryFormatter:
    """Pure formatting component that can be unit tested in isolation."""

    def format(self, reading: Reading, now: datetime) -> TelemetryEvent:
        return TelemetryEvent(
            time_created=now.strftime(TIME_FORMAT),
            temperature=reading.temperature,
            humidity=reading.humidity,
        )

    def to_payload(self, event: TelemetryEvent) -> bytes:
        return event.to_payload()
