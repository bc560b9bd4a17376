from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_configuration(payload: Dict[str, Any]) -> None:
    echo_heading("Configuration")
    echo_key_values(
        [
            ("sample_interval_ms", payload.get("sample_interval_ms")),
            ("sensor_endpoint", payload.get("sensor_endpoint")),
        ]
    )


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Telemetry Loop")
    echo_key_values(
        [
            ("state", payload.get("state")),
            ("running", payload.get("running")),
            ("cycles", payload.get("cycles")),
            ("published", payload.get("published")),
            ("read_failures", payload.get("read_failures")),
            ("publish_failures", payload.get("publish_failures")),
        ]
    )

    typer.echo()
    echo_heading("Last Event")
    event = payload.get("last_event")
    if event:
        echo_key_values(
            [
                ("timeCreated", event.get("timeCreated")),
                ("temperature", event.get("temperature")),
                ("humidity", event.get("humidity")),
            ]
        )
    else:
        typer.echo("No telemetry published yet.")

    typer.echo()
    render_configuration(payload.get("configuration") or {})


def render_report(payload: Dict[str, Any]) -> None:
    echo_heading("Accepted Fields")
    if payload:
        echo_key_values(sorted(payload.items()))
    else:
        typer.echo("No fields accepted.")
