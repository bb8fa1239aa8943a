from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the temperature logger REST endpoints."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=30.0)

    def close(self) -> None:
        self._client.close()

    def get_current(self) -> Dict[str, Any]:
        return self._get_json("/api/temperature")

    def get_history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"limit": limit} if limit is not None else None
        payload = self._get_json("/api/temperature/history", params=params)
        if not isinstance(payload, list):
            raise typer.BadParameter("Unexpected response payload when fetching history.")
        return payload

    def get_health(self) -> Dict[str, Any]:
        return self._get_json("/api/health")

    def export_csv(self) -> str:
        response = self._request("/api/temperature/export")
        return response.text

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request(path, params=params).json()

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1)
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
