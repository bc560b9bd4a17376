"""Sampling loop that turns sensor readings into published telemetry."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from threading import TIMEOUT_MAX, Lock
from typing import Callable, Optional, Protocol

from app.schemas import LoopState, TelemetryEvent
from models.records import Reading
from services.config_store import ConfigStore
from services.formatter import CONTENT_TYPE, TelemetryFormatter
from services.gateway import PublishFailed
from services.sensor import SensorReader, SensorUnavailable

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    def publish(self, output_name: str, payload: bytes, content_type: str) -> None:
        ...


class CancelSignal(Protocol):
    """The subset of ``threading.Event`` the loop relies on."""

    def is_set(self) -> bool:
        ...

    def wait(self, timeout: Optional[float] = None) -> bool:
        ...


ReaderFactory = Callable[[str], SensorReader]


def _sleep_seconds(interval_seconds: float) -> float:
    return min(interval_seconds, TIMEOUT_MAX)


@dataclass
class LoopStats:
    state: LoopState = LoopState.idle
    cycles: int = 0
    published: int = 0
    read_failures: int = 0
    publish_failures: int = 0
    last_event: Optional[TelemetryEvent] = None


class TelemetryLoop:
    """Runs sample, format, publish and sleep cycles until cancelled.

    Each cycle works from a single configuration snapshot. The sensor reader is
    rebuilt whenever the snapshot's endpoint differs from the current reader's,
    so a cycle never reads through a reader bound to another endpoint. The only
    suspension point is the sleep, implemented as ``cancel.wait`` so that a
    cancellation wakes the loop immediately.
    """

    def __init__(
        self,
        store: ConfigStore,
        publisher: Publisher,
        reader_factory: ReaderFactory = SensorReader,
        formatter: Optional[TelemetryFormatter] = None,
        output_name: str = "output1",
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.publisher = publisher
        self.reader_factory = reader_factory
        self.formatter = formatter or TelemetryFormatter()
        self.output_name = output_name
        self.clock = clock
        self._reader: Optional[SensorReader] = None
        self._stats = LoopStats()
        self._stats_lock = Lock()

    @property
    def stats(self) -> LoopStats:
        with self._stats_lock:
            return replace(self._stats)

    def run(self, cancel: CancelSignal) -> None:
        logger.info("Telemetry loop started", extra={"output": self.output_name})
        while True:
            try:
                if not self.run_cycle(cancel):
                    break
            except Exception:  # noqa: BLE001 - a failed cycle must not end sampling
                logger.exception("Telemetry cycle failed", extra={"cycle": self.stats.cycles})
                self._set_state(LoopState.sleeping)
                if cancel.wait(_sleep_seconds(self.store.get().sample_interval_seconds)):
                    break
        self._set_state(LoopState.cancelled)
        logger.info("Telemetry loop cancelled", extra={"cycle": self.stats.cycles})

    def run_cycle(self, cancel: CancelSignal) -> bool:
        """Execute one cycle; return ``False`` once cancellation is observed."""
        if cancel.is_set():
            return False

        config = self.store.get()
        reader = self._reader_for(config.sensor_endpoint)
        with self._stats_lock:
            self._stats.cycles += 1
            cycle = self._stats.cycles

        self._set_state(LoopState.sampling)
        try:
            reading = reader.read()
        except SensorUnavailable as exc:
            with self._stats_lock:
                self._stats.read_failures += 1
            logger.warning(
                "Cannot read sensor data",
                extra={"cycle": cycle, "endpoint": reader.endpoint, "reason": str(exc)},
            )
        else:
            self._emit(reading, cycle)

        self._set_state(LoopState.sleeping)
        return not cancel.wait(_sleep_seconds(config.sample_interval_seconds))

    def _reader_for(self, endpoint: str) -> SensorReader:
        if self._reader is None or self._reader.endpoint != endpoint:
            logger.info("Connecting to sensor", extra={"endpoint": endpoint})
            self._reader = self.reader_factory(endpoint)
        return self._reader

    def _emit(self, reading: Reading, cycle: int) -> None:
        self._set_state(LoopState.formatting)
        event = self.formatter.format(reading, self.clock())
        payload = self.formatter.to_payload(event)

        self._set_state(LoopState.publishing)
        try:
            self.publisher.publish(self.output_name, payload, CONTENT_TYPE)
        except PublishFailed as exc:
            self._count_publish_failure()
            logger.warning(
                "Failed to publish telemetry",
                extra={"cycle": cycle, "output": self.output_name, "reason": str(exc)},
            )
            return
        except Exception:  # noqa: BLE001 - delivery is best effort
            self._count_publish_failure()
            logger.exception(
                "Unexpected error while publishing telemetry",
                extra={"cycle": cycle, "output": self.output_name},
            )
            return

        with self._stats_lock:
            self._stats.published += 1
            self._stats.last_event = event
        logger.info(
            "Telemetry sent %s: %s | %s",
            event.time_created,
            event.temperature,
            event.humidity,
            extra={"cycle": cycle},
        )

    def _count_publish_failure(self) -> None:
        with self._stats_lock:
            self._stats.publish_failures += 1

    def _set_state(self, state: LoopState) -> None:
        with self._stats_lock:
            self._stats.state = state
