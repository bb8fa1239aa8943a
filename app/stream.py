from __future__ import annotations

from typing import Any, Dict
from uuid import uuid4

from fastapi import APIRouter, Depends, WebSocket, status
from starlette.websockets import WebSocketState

from services.temperature import TemperatureService, build_default_service


class WebSocketViewer:
    """Adapts a Starlette ``WebSocket`` to the broadcast ``Viewer`` protocol."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket
        client = websocket.client
        peer = f"{client.host}:{client.port}" if client else "unknown"
        self.viewer_id = f"{peer}/{uuid4().hex[:8]}"

    async def send(self, message: Dict[str, Any]) -> None:
        await self.websocket.send_json(message)

    async def close(self) -> None:
        if self.websocket.application_state is WebSocketState.CONNECTED:
            await self.websocket.close(code=status.WS_1001_GOING_AWAY)


def get_service() -> TemperatureService:
    return build_default_service()


router = APIRouter()


@router.websocket("/ws")
async def temperature_stream(
    websocket: WebSocket,
    service: TemperatureService = Depends(get_service),
) -> None:
    await websocket.accept()
    viewer = WebSocketViewer(websocket)
    if not await service.attach(viewer):
        # Refused during shutdown or the bootstrap send failed.
        return

    try:
        # Inbound frames, text or binary, only keep the connection alive.
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        service.detach(viewer)
