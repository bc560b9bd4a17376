from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_SENSOR_ENDPOINT_ENV = "SENSOR_ENDPOINT"
_SAMPLE_INTERVAL_ENV = "SAMPLE_INTERVAL_MS"
_SENSOR_TIMEOUT_ENV = "SENSOR_TIMEOUT_SECONDS"
_GATEWAY_URL_ENV = "GATEWAY_URL"
_OUTPUT_NAME_ENV = "TELEMETRY_OUTPUT"
_HOST_ENV = "AGENT_HOST"
_PORT_ENV = "AGENT_PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SENSOR_ENDPOINT = "http://172.17.0.1:3000/"
DEFAULT_SAMPLE_INTERVAL_MS = 5000


@dataclass(frozen=True)
class Settings:
    sensor_endpoint: str
    sample_interval_ms: int
    sensor_timeout: float
    gateway_url: Optional[str]
    output_name: str
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        sensor_endpoint=_read_str_env(_SENSOR_ENDPOINT_ENV, DEFAULT_SENSOR_ENDPOINT),
        sample_interval_ms=_read_positive_int(_SAMPLE_INTERVAL_ENV, DEFAULT_SAMPLE_INTERVAL_MS),
        sensor_timeout=_read_positive_float(_SENSOR_TIMEOUT_ENV, 5.0),
        gateway_url=_read_optional_env(_GATEWAY_URL_ENV, None),
        output_name=_read_str_env(_OUTPUT_NAME_ENV, "output1"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_positive_int(_PORT_ENV, 8080),
        log_level=_read_log_level("INFO"),
    )
