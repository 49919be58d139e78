from __future__ import annotations

import logging
from typing import Optional, Tuple

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from ..constants import EVENT_JOIN
from ..schemas import JoinRoomRequest
from ..service import RoomSyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="", tags=["ws"])


async def _read_join(ws: WebSocket) -> Tuple[Optional[str], Optional[str]]:
    """Read the ``join`` frame that must open every connection.

    Credentials travel in the frame, never in the URL. A malformed frame
    yields no room name and the handshake is refused.
    """
    message = await ws.receive_json()
    if not isinstance(message, dict) or message.get("type") != EVENT_JOIN:
        return None, None
    try:
        join = JoinRoomRequest.model_validate(message.get("data") or {})
    except ValidationError:
        return None, None
    return join.room_name, join.password


@router.websocket("/ws")
async def room_websocket(ws: WebSocket):
    """Realtime channel: a ``join`` frame with roomName/password, then JSON events."""
    await ws.accept()
    service: RoomSyncService = ws.app.state.service
    session = service.new_session(ws)
    room_name: Optional[str] = None
    try:
        room_name, password = await _read_join(ws)
        if not await session.open(room_name, password):
            return
        while True:
            data = await ws.receive_json()
            await session.handle(data)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WebSocket error in room %s", room_name)
    finally:
        await session.close()
