"""HTTP client for the edge gateway that relays telemetry and twin state."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from app.schemas import EffectiveConfigReport


class PublishFailed(Exception):
    """Raised when the gateway does not accept a message or twin operation."""


class GatewayClient:
    """Minimal HTTP client for the gateway's output and twin endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def publish(self, output_name: str, payload: bytes, content_type: str) -> None:
        self._send(
            "POST",
            f"/outputs/{output_name}",
            content=payload,
            headers={"content-type": content_type},
        )

    def report_configuration(self, report: EffectiveConfigReport) -> None:
        self._send("PATCH", "/twin/reported", json=report.to_reported())

    def fetch_desired(self) -> Dict[str, Any]:
        response = self._send("GET", "/twin/desired")
        try:
            payload = response.json()
        except ValueError as exc:
            raise PublishFailed("Gateway returned a malformed desired document.") from exc
        if not isinstance(payload, dict):
            raise PublishFailed("Gateway desired document is not a JSON object.")
        return payload

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise PublishFailed(
                f"{method} {url} failed with status {exc.response.status_code}."
            ) from exc
        except httpx.HTTPError as exc:
            raise PublishFailed(f"{method} {url} failed: {exc}") from exc
        return response
