"""HTTP client for the local temperature/humidity sensor."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import httpx

from models.records import Reading


class SensorUnavailable(Exception):
    """Raised when a sensor read yields no usable reading."""


def _lookup(payload: Mapping[str, Any], field: str) -> Any:
    # The sensor firmware is inconsistent about key casing.
    for key, value in payload.items():
        if isinstance(key, str) and key.lower() == field:
            return value
    raise SensorUnavailable(f"Sensor response is missing {field!r}.")


def _as_number(payload: Mapping[str, Any], field: str) -> float:
    value = _lookup(payload, field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SensorUnavailable(f"Sensor field {field!r} is not numeric: {value!r}.")
    try:
        number = float(value)
    except OverflowError as exc:
        raise SensorUnavailable(f"Sensor field {field!r} is out of range.") from exc
    if not math.isfinite(number):
        raise SensorUnavailable(f"Sensor field {field!r} is not finite: {value!r}.")
    return number


class SensorReader:
    """Performs single, unretried reads against one fixed sensor endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def read(self) -> Reading:
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(self._endpoint)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise SensorUnavailable(
                f"Sensor returned status {exc.response.status_code}."
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise SensorUnavailable(f"Sensor request failed: {exc}") from exc
        except ValueError as exc:
            raise SensorUnavailable("Sensor response is not valid JSON.") from exc

        if not isinstance(payload, Mapping):
            raise SensorUnavailable("Sensor response is not a JSON object.")

        return Reading(
            temperature=_as_number(payload, "temperature"),
            humidity=_as_number(payload, "humidity"),
            captured_at=datetime.now(timezone.utc),
        )

    def __repr__(self) -> str:
        return f"SensorReader(endpoint={self._endpoint!r})"
