from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_configuration, render_report, render_status


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for inspecting and reconfiguring a running edge sensor agent.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
config_app = typer.Typer(help="Inspect or change the agent configuration.")
app.add_typer(config_app, name="config")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Agent API base URL (defaults to AGENT_API_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show telemetry loop state, counters and the last published event."""
    state = _get_state(ctx)
    render_status(state.client.get_status())


@config_app.command("show")
def config_show_command(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    state = _get_state(ctx.find_root())
    render_configuration(state.client.get_configuration())


@config_app.command("set")
def config_set_command(
    ctx: typer.Context,
    interval: Optional[int] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Sampling interval in milliseconds.",
    ),
    endpoint: Optional[str] = typer.Option(
        None,
        "--endpoint",
        "-e",
        help="Sensor endpoint URL.",
    ),
) -> None:
    """Send a desired-configuration update and show which fields were accepted."""
    if interval is None and endpoint is None:
        raise typer.BadParameter("Provide --interval and/or --endpoint.")

    state = _get_state(ctx.find_root())
    desired: Dict[str, Any] = {}
    if interval is not None:
        desired["intervalMillis"] = interval
    if endpoint is not None:
        desired["endpoint"] = endpoint

    typer.echo(f"Sending desired configuration to {state.config.base_url} ...")
    report = state.client.send_desired(desired)
    render_report(report)

    rejected = sorted(set(desired) - set(report))
    if rejected:
        typer.secho(f"Rejected: {', '.join(rejected)}", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)
