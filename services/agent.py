"""Wiring and lifecycle of the edge agent."""

from __future__ import annotations

import logging
from functools import lru_cache, partial
from threading import Event, Thread
from typing import Any, Callable, Mapping, Optional

from app.schemas import AgentStatus, ConfigurationOut
from models.records import Configuration
from services.config_store import ConfigStore
from services.config_sync import ConfigSyncHandler
from services.gateway import GatewayClient, PublishFailed
from services.sensor import SensorReader
from services.telemetry_loop import TelemetryLoop
from settings import get_settings

logger = logging.getLogger(__name__)

DesiredSource = Callable[[], Mapping[str, Any]]


class StartupError(RuntimeError):
    """A required startup parameter is missing or unusable."""


class EdgeAgent:
    """Owns the telemetry loop thread and its cancellation signal."""

    def __init__(
        self,
        store: ConfigStore,
        handler: ConfigSyncHandler,
        loop: TelemetryLoop,
        desired_source: Optional[DesiredSource] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self.store = store
        self.handler = handler
        self.loop = loop
        self.desired_source = desired_source
        self.on_close = on_close
        self.cancel_event = Event()
        self._thread: Optional[Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Converge on the last known desired state, then start sampling."""
        if self._thread is not None:
            raise RuntimeError("Agent has already been started.")

        self._sync_desired()
        config = self.store.get()
        logger.info(
            "Starting telemetry loop",
            extra={"endpoint": config.sensor_endpoint, "interval_ms": config.sample_interval_ms},
        )
        self._thread = Thread(
            target=self.loop.run,
            args=(self.cancel_event,),
            name="telemetry-loop",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Signal cancellation and wait for the current cycle to finish."""
        self.cancel_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Telemetry loop did not stop within %ss", timeout)
        if self.on_close is not None:
            self.on_close()
            self.on_close = None

    def status(self) -> AgentStatus:
        stats = self.loop.stats
        return AgentStatus(
            state=stats.state,
            running=self.running,
            cycles=stats.cycles,
            published=stats.published,
            read_failures=stats.read_failures,
            publish_failures=stats.publish_failures,
            last_event=stats.last_event,
            configuration=configuration_out(self.store.get()),
        )

    def _sync_desired(self) -> None:
        if self.desired_source is None:
            return
        try:
            desired = self.desired_source()
        except PublishFailed as exc:
            logger.warning(
                "Could not fetch desired configuration; using current values",
                extra={"reason": str(exc)},
            )
            return
        self.handler.on_update_received(desired)


def configuration_out(config: Configuration) -> ConfigurationOut:
    return ConfigurationOut(
        sample_interval_ms=config.sample_interval_ms,
        sensor_endpoint=config.sensor_endpoint,
    )


@lru_cache
def build_default_agent() -> EdgeAgent:
    """Factory that wires the agent against the configured gateway."""
    settings = get_settings()
    if not settings.gateway_url:
        raise StartupError("GATEWAY_URL must be set to reach the edge gateway.")

    gateway = GatewayClient(settings.gateway_url)
    store = ConfigStore(
        Configuration(
            sample_interval_ms=settings.sample_interval_ms,
            sensor_endpoint=settings.sensor_endpoint,
        )
    )
    handler = ConfigSyncHandler(store, reporter=gateway.report_configuration)
    loop = TelemetryLoop(
        store,
        publisher=gateway,
        reader_factory=partial(SensorReader, timeout=settings.sensor_timeout),
        output_name=settings.output_name,
    )
    return EdgeAgent(
        store,
        handler,
        loop,
        desired_source=gateway.fetch_desired,
        on_close=gateway.close,
    )
