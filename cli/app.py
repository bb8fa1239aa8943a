from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_bootstrap,
    render_current,
    render_disconnect,
    render_health,
    render_history,
    render_reading,
)
from cli.stream import LiveFeed, watch


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the smart temperature logger service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


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
        help="Logger API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("current")
def current_command(ctx: typer.Context) -> None:
    """Show the most recent temperature."""
    state = _get_state(ctx)
    render_current(state.client.get_current())


@app.command("history")
def history_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        min=1,
        help="Number of recent readings to show (server default when omitted).",
    ),
) -> None:
    """List recent readings, oldest first."""
    state = _get_state(ctx)
    render_history(state.client.get_history(limit))


@app.command("export")
def export_command(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        dir_okay=False,
        writable=True,
        help="Write the CSV to this file instead of stdout.",
    ),
) -> None:
    """Download the full reading log as CSV."""
    state = _get_state(ctx)
    csv_text = state.client.export_csv()
    if output is None:
        typer.echo(csv_text, nl=False)
        return
    output.write_text(csv_text, encoding="utf-8")
    typer.secho(f"Saved {output}", fg=typer.colors.GREEN)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Show buffer size, viewer count and uptime."""
    state = _get_state(ctx)
    render_health(state.client.get_health())


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    max_readings: Optional[int] = typer.Option(
        None,
        "--max-readings",
        min=1,
        help="Exit after this many live readings (runs until interrupted by default).",
    ),
    reconnect_delay: Optional[float] = typer.Option(
        None,
        "--reconnect-delay",
        min=0.0,
        help="Seconds to wait before re-attaching after a disconnect.",
    ),
    alert_threshold: Optional[float] = typer.Option(
        None,
        "--alert-threshold",
        help="Highlight readings above this temperature.",
    ),
) -> None:
    """Stream live readings, reconnecting whenever the connection drops."""
    state = _get_state(ctx)
    config = state.config
    delay = reconnect_delay if reconnect_delay is not None else config.reconnect_delay
    threshold = alert_threshold if alert_threshold is not None else config.alert_threshold
    feed = LiveFeed(window_size=config.window_size, alert_threshold=threshold)

    def on_event(kind: str, data: Dict[str, Any]) -> None:
        if kind == "connected":
            typer.echo(f"Connected to {data.get('url')}")
        elif kind == "initial":
            render_bootstrap(data)
        elif kind == "reading":
            render_reading(data, alert=feed.is_alert(data))
        elif kind == "disconnected":
            render_disconnect(data)

    try:
        asyncio.run(
            watch(
                config.websocket_url,
                feed,
                on_event,
                reconnect_delay=delay,
                max_readings=max_readings,
            )
        )
    except KeyboardInterrupt:
        typer.echo()
        raise typer.Exit(code=0)
