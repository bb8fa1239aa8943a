"""HTTP route definitions for the service."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response

from app.schemas import CurrentTemperature, ReadingSchema, ServiceHealth
from services.export import CSV_FILENAME
from services.temperature import TemperatureService, build_default_service
from settings import get_settings

router = APIRouter()


def get_service() -> TemperatureService:
    return build_default_service()


@router.get(
    "/api/health",
    response_model=ServiceHealth,
    summary="Buffer size, connected viewers and uptime.",
)
async def service_health(
    service: TemperatureService = Depends(get_service),
) -> ServiceHealth:
    return service.health()


@router.get(
    "/api/temperature",
    response_model=CurrentTemperature,
    summary="Most recent temperature value.",
)
async def current_temperature(
    service: TemperatureService = Depends(get_service),
) -> CurrentTemperature:
    return service.current()


@router.get(
    "/api/temperature/history",
    response_model=List[ReadingSchema],
    summary="Most recent readings, oldest first.",
)
async def temperature_history(
    limit: Optional[int] = Query(
        None, ge=1, description="Number of readings to return (defaults to HISTORY_DEFAULT_LIMIT)."
    ),
    service: TemperatureService = Depends(get_service),
) -> List[ReadingSchema]:
    requested = limit if limit is not None else get_settings().history_default_limit
    # Larger requests are served whatever the buffer holds.
    requested = min(requested, service.history.capacity)
    return [ReadingSchema.from_reading(reading) for reading in service.recent(requested)]


@router.get(
    "/api/temperature/export",
    summary="Download the full reading log as CSV.",
    response_class=Response,
)
async def export_temperature_log(
    service: TemperatureService = Depends(get_service),
) -> Response:
    return Response(
        content=service.export_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={CSV_FILENAME}"},
    )


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /api/health for service status."}
