"""Unit tests for desired-configuration validation and reporting."""

from __future__ import annotations

import logging
from typing import List

import pytest

from app.schemas import EffectiveConfigReport
from models.records import Configuration
from services.config_store import ConfigStore
from services.config_sync import MAX_INTERVAL_MS, ConfigSyncHandler
from settings import DEFAULT_SENSOR_ENDPOINT


class RecordingReporter:
    def __init__(self) -> None:
        self.reports: List[EffectiveConfigReport] = []

    def __call__(self, report: EffectiveConfigReport) -> None:
        self.reports.append(report)


@pytest.fixture()
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture()
def handler(reporter: RecordingReporter) -> ConfigSyncHandler:
    return ConfigSyncHandler(ConfigStore(), reporter=reporter)


def test_valid_update_is_applied_and_reported(handler, reporter) -> None:
    report = handler.on_update_received({"intervalMillis": 10000, "endpoint": "http://sensor-b:3000/"})

    assert handler.store.get() == Configuration(10000, "http://sensor-b:3000/")
    assert report.to_reported() == {"intervalMillis": 10000, "endpoint": "http://sensor-b:3000/"}
    assert reporter.reports == [report]


@pytest.mark.parametrize("value", [0, -1, -5000, "abc", "", None, True, 2.5, [1000], {"ms": 1}])
def test_invalid_interval_is_rejected(handler, reporter, value) -> None:
    report = handler.on_update_received({"intervalMillis": value})

    assert handler.store.get().sample_interval_ms == 5000
    assert report.is_empty()
    assert report.to_reported() == {}
    assert reporter.reports == []


@pytest.mark.parametrize("value, expected", [("15000", 15000), (" 200 ", 200), (3000.0, 3000)])
def test_interval_accepts_integral_values(handler, value, expected) -> None:
    report = handler.on_update_received({"intervalMillis": value})

    assert report.interval_ms == expected
    assert handler.store.get().sample_interval_ms == expected


@pytest.mark.parametrize("value", ["", "   ", None, 42])
def test_invalid_endpoint_is_rejected(handler, reporter, value) -> None:
    report = handler.on_update_received({"endpoint": value})

    assert handler.store.get().sensor_endpoint == DEFAULT_SENSOR_ENDPOINT
    assert report.to_reported() == {}
    assert reporter.reports == []


def test_partially_malformed_update_applies_valid_subset(handler, reporter) -> None:
    report = handler.on_update_received({"intervalMillis": -1, "endpoint": "http://sensor-c/"})

    assert handler.store.get() == Configuration(5000, "http://sensor-c/")
    assert report.to_reported() == {"endpoint": "http://sensor-c/"}
    assert reporter.reports == [report]


def test_update_without_recognized_fields_is_a_no_op(handler, reporter) -> None:
    before = handler.store.get()

    report = handler.on_update_received({"$version": 7, "localhosturl": "http://legacy/"})

    assert handler.store.get() is before
    assert report.is_empty()
    assert reporter.reports == []


def test_empty_update_is_a_no_op(handler, reporter) -> None:
    before = handler.store.get()

    report = handler.on_update_received({})

    assert handler.store.get() is before
    assert report.is_empty()
    assert reporter.reports == []


@pytest.mark.parametrize("desired", [None, "intervalMillis=10", [("intervalMillis", 10)]])
def test_non_mapping_input_is_ignored(handler, reporter, desired) -> None:
    report = handler.on_update_received(desired)

    assert report.is_empty()
    assert handler.store.get() == Configuration()
    assert reporter.reports == []


def test_endpoint_is_stripped(handler) -> None:
    report = handler.on_update_received({"endpoint": "  http://sensor-d/  "})

    assert report.endpoint == "http://sensor-d/"
    assert handler.store.get().sensor_endpoint == "http://sensor-d/"


@pytest.mark.parametrize("value", [10**13, str(10**13), MAX_INTERVAL_MS + 1])
def test_interval_beyond_wait_limit_is_rejected(handler, reporter, caplog, value) -> None:
    with caplog.at_level(logging.WARNING, logger="services.config_sync"):
        report = handler.on_update_received({"intervalMillis": value, "endpoint": "http://sensor-e/"})

    assert handler.store.get() == Configuration(5000, "http://sensor-e/")
    assert report.to_reported() == {"endpoint": "http://sensor-e/"}
    assert any(getattr(record, "reason", None) == "too large" for record in caplog.records)


def test_interval_at_wait_limit_is_accepted(handler) -> None:
    report = handler.on_update_received({"intervalMillis": MAX_INTERVAL_MS})

    assert report.interval_ms == MAX_INTERVAL_MS


def test_rejected_field_is_logged(handler, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="services.config_sync"):
        handler.on_update_received({"intervalMillis": 0})

    records = [record for record in caplog.records if record.name == "services.config_sync"]
    assert records
    assert getattr(records[0], "field", None) == "intervalMillis"
    assert getattr(records[0], "reason", None) == "must be positive"


def test_reporter_failure_does_not_propagate(caplog) -> None:
    def failing_reporter(_report: EffectiveConfigReport) -> None:
        raise RuntimeError("gateway offline")

    handler = ConfigSyncHandler(ConfigStore(), reporter=failing_reporter)

    with caplog.at_level(logging.ERROR, logger="services.config_sync"):
        report = handler.on_update_received({"intervalMillis": 1000})

    assert report.interval_ms == 1000
    assert handler.store.get().sample_interval_ms == 1000
    assert any("Failed to report" in record.getMessage() for record in caplog.records)


def test_handler_without_reporter_still_returns_report() -> None:
    handler = ConfigSyncHandler(ConfigStore())

    report = handler.on_update_received({"intervalMillis": 250})

    assert report.to_reported() == {"intervalMillis": 250}
