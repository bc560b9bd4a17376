"""Validation and application of desired-configuration updates."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Mapping, Optional

from app.schemas import EffectiveConfigReport
from models.records import PendingConfigUpdate
from services.config_store import ConfigStore

logger = logging.getLogger(__name__)

INTERVAL_KEY = "intervalMillis"
ENDPOINT_KEY = "endpoint"

# Longest sleep threading.Event.wait accepts.
MAX_INTERVAL_MS = int(threading.TIMEOUT_MAX * 1000)

Reporter = Callable[[EffectiveConfigReport], None]


class InvalidConfigField(ValueError):
    """A single desired-configuration field failed validation."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.value = value
        self.reason = reason


def parse_interval(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidConfigField(INTERVAL_KEY, value, "must be an integer")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise InvalidConfigField(INTERVAL_KEY, value, "must be an integer")
        parsed = int(value)
    elif isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError as exc:
            raise InvalidConfigField(INTERVAL_KEY, value, "must be an integer") from exc
    else:
        raise InvalidConfigField(INTERVAL_KEY, value, "must be an integer")

    if parsed <= 0:
        raise InvalidConfigField(INTERVAL_KEY, value, "must be positive")
    if parsed > MAX_INTERVAL_MS:
        raise InvalidConfigField(INTERVAL_KEY, value, "too large")
    return parsed


def parse_endpoint(value: Any) -> str:
    if not isinstance(value, str):
        raise InvalidConfigField(ENDPOINT_KEY, value, "must be a string")
    candidate = value.strip()
    if not candidate:
        raise InvalidConfigField(ENDPOINT_KEY, value, "must not be empty")
    return candidate


_PARSERS = {
    INTERVAL_KEY: ("interval_ms", parse_interval),
    ENDPOINT_KEY: ("endpoint", parse_endpoint),
}


class ConfigSyncHandler:
    """Applies the valid subset of a desired update and reports what was accepted."""

    def __init__(self, store: ConfigStore, reporter: Optional[Reporter] = None) -> None:
        self.store = store
        self.reporter = reporter

    def on_update_received(self, desired: Any) -> EffectiveConfigReport:
        """Apply valid fields; the report echoes every accepted field, even if its value is unchanged."""
        if not isinstance(desired, Mapping):
            logger.warning(
                "Ignoring desired configuration that is not an object",
                extra={"invalid_value": type(desired).__name__},
            )
            return EffectiveConfigReport()

        accepted: dict[str, Any] = {}
        for key, (attribute, parse) in _PARSERS.items():
            if key not in desired:
                continue
            try:
                accepted[attribute] = parse(desired[key])
            except InvalidConfigField as exc:
                logger.warning(
                    "Rejected desired configuration field",
                    extra={
                        "field": exc.field,
                        "invalid_value": exc.value,
                        "reason": exc.reason,
                    },
                )

        ignored = sorted(str(key) for key in desired if key not in _PARSERS)
        if ignored:
            logger.debug("Ignoring unrecognized desired keys: %s", ", ".join(ignored))

        update = PendingConfigUpdate(**accepted)
        if update.is_empty():
            return EffectiveConfigReport()

        effective = self.store.apply(update)
        logger.info(
            "Applied desired configuration",
            extra={
                "interval_ms": effective.sample_interval_ms,
                "endpoint": effective.sensor_endpoint,
            },
        )

        report = EffectiveConfigReport(interval_ms=update.interval_ms, endpoint=update.endpoint)
        self._report(report)
        return report

    def _report(self, report: EffectiveConfigReport) -> None:
        if self.reporter is None:
            return
        try:
            self.reporter(report)
        except Exception:  # noqa: BLE001 - reporting is best effort
            logger.exception("Failed to report accepted configuration")
