"""Unit tests for the HTTP sensor reader."""

from __future__ import annotations

from typing import Callable

import httpx
import pytest

from services.sensor import SensorReader, SensorUnavailable

ENDPOINT = "http://sensor.local:3000/"


def _reader(handler: Callable[[httpx.Request], httpx.Response]) -> SensorReader:
    return SensorReader(ENDPOINT, timeout=1.0, transport=httpx.MockTransport(handler))


def test_read_returns_reading() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"temperature": 21.5, "humidity": 40})

    reading = _reader(handler).read()

    assert reading.temperature == 21.5
    assert reading.humidity == 40.0
    assert reading.captured_at.tzinfo is not None
    assert len(requests) == 1
    assert str(requests[0].url) == ENDPOINT
    assert requests[0].method == "GET"


def test_read_accepts_capitalized_keys() -> None:
    reading = _reader(
        lambda request: httpx.Response(200, json={"Temperature": 19.0, "Humidity": 55.5})
    ).read()

    assert (reading.temperature, reading.humidity) == (19.0, 55.5)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="sensor fault"),
        httpx.Response(404),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=[21.5, 40.0]),
        httpx.Response(200, json={"temperature": 21.5}),
        httpx.Response(200, json={"temperature": "warm", "humidity": 40}),
        httpx.Response(200, json={"temperature": True, "humidity": 40}),
        httpx.Response(200, json={"temperature": None, "humidity": 40}),
        httpx.Response(
            200,
            content=b'{"temperature": 1' + b"0" * 400 + b', "humidity": 1}',
            headers={"content-type": "application/json"},
        ),
    ],
)
def test_bad_responses_raise_sensor_unavailable(response: httpx.Response) -> None:
    with pytest.raises(SensorUnavailable):
        _reader(lambda request: response).read()


@pytest.mark.parametrize("error", [httpx.ConnectError, httpx.ReadTimeout])
def test_transport_errors_raise_sensor_unavailable(error) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise error("boom", request=request)

    with pytest.raises(SensorUnavailable):
        _reader(handler).read()


def test_unusable_endpoint_raises_sensor_unavailable() -> None:
    with pytest.raises(SensorUnavailable):
        SensorReader("not-a-url").read()


def test_reader_does_not_retry() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    with pytest.raises(SensorUnavailable):
        _reader(handler).read()

    assert calls == 1


def test_endpoint_is_read_only() -> None:
    reader = SensorReader(ENDPOINT)

    with pytest.raises(AttributeError):
        reader.endpoint = "http://other/"  # type: ignore[misc]
