from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_current(payload: Dict[str, Any]) -> None:
    echo_heading("Current Temperature")
    echo_key_values(
        [
            ("temperature", f"{payload.get('current')} °C"),
            ("timestamp", payload.get("timestamp")),
        ]
    )


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Service Health")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("uptime", payload.get("uptime")),
            ("readings", payload.get("readings")),
            ("websocket_clients", payload.get("websocket_clients")),
            ("environment", payload.get("environment")),
        ]
    )


def render_history(readings: List[Dict[str, Any]]) -> None:
    echo_heading(f"History ({len(readings)} readings)")
    if not readings:
        typer.echo("No readings recorded.")
        return
    for reading in readings:
        temperature = str(reading.get("temperature"))
        typer.echo(f"  {reading.get('timestamp')}  {temperature:>5} °C  id={reading.get('id')}")


def render_reading(reading: Dict[str, Any], alert: bool) -> None:
    line = f"{reading.get('timestamp')}  {reading.get('temperature')} °C"
    if alert:
        typer.secho(f"{line}  HIGH TEMPERATURE", fg=typer.colors.RED, bold=True)
    else:
        typer.echo(line)


def render_bootstrap(data: Dict[str, Any]) -> None:
    history = data.get("history") or []
    typer.secho(
        f"Synchronized: current={data.get('current')} °C, {len(history)} recent readings",
        fg=typer.colors.GREEN,
    )


def render_disconnect(data: Dict[str, Any]) -> None:
    reason = data.get("reason") or "connection closed"
    typer.secho(
        f"Disconnected ({reason}); reconnecting in {data.get('retry_in')}s ...",
        fg=typer.colors.YELLOW,
        err=True,
    )
