"""One live connection's membership in a room."""
from __future__ import annotations

import enum
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol

from pydantic import ValidationError

from .auth_utils import RoomAuthenticator
from .constants import (
    EVENT_ADD_COMPONENT,
    EVENT_ADD_SCREEN,
    EVENT_CHANGE_DEVICE,
    EVENT_CONNECT_ERROR,
    EVENT_DELETE_COMPONENT,
    EVENT_DELETE_SCREEN,
    EVENT_ERROR,
    EVENT_MOVE_COMPONENT,
    EVENT_RENAME_SCREEN,
)
from .errors import RoomSyncError
from .hub import BroadcastHub
from .mutator import StateMutator
from .schemas import (
    AddComponentEvent,
    ChangeDeviceEvent,
    DeleteComponentEvent,
    DeleteScreenEvent,
    MoveComponentEvent,
    RenameScreenEvent,
    ScreenDraft,
)

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def send_json(self, data: Any) -> None: ...

    async def close(self, code: int = 1000, reason: Optional[str] = None) -> None: ...


class SessionState(str, enum.Enum):
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    JOINED = "joined"
    REJECTED = "rejected"
    CLOSED = "closed"


class RoomSession:
    """Routes a client's events to the mutator and receives room broadcasts.

    The room name is fixed when the handshake succeeds; events never carry
    or change it.
    """

    def __init__(
        self,
        transport: Transport,
        authenticator: RoomAuthenticator,
        hub: BroadcastHub,
        mutator: StateMutator,
    ):
        self.transport = transport
        self.authenticator = authenticator
        self.hub = hub
        self.mutator = mutator
        self.session_id = uuid.uuid4().hex[:8]
        self.state = SessionState.CONNECTING
        self._room_name: Optional[str] = None
        self._handlers: Dict[str, Callable[[Any], Awaitable[bool]]] = {
            EVENT_ADD_COMPONENT: self._add_component,
            EVENT_MOVE_COMPONENT: self._move_component,
            EVENT_DELETE_COMPONENT: self._delete_component,
            EVENT_ADD_SCREEN: self._add_screen,
            EVENT_DELETE_SCREEN: self._delete_screen,
            EVENT_RENAME_SCREEN: self._rename_screen,
            EVENT_CHANGE_DEVICE: self._change_device,
        }

    @property
    def room_name(self) -> str:
        if self._room_name is None:
            raise RuntimeError("Session has not joined a room")
        return self._room_name

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    async def open(self, room_name: Optional[str], password: Optional[str]) -> bool:
        """Authenticate and join *room_name*; return whether the session joined."""
        if self.state is not SessionState.CONNECTING:
            raise RuntimeError(f"Cannot open a session in state {self.state.value}")
        self.state = SessionState.AUTHENTICATING
        try:
            self._room_name = await self.authenticator.authenticate(room_name, password)
        except RoomSyncError as exc:
            self.state = SessionState.REJECTED
            logger.info("Session %s rejected for room %s: %s", self.session_id, room_name, exc.message)
            await self._reject(exc)
            return False

        self.state = SessionState.JOINED
        self.hub.join(self)
        logger.info("Session %s joined room %s", self.session_id, self._room_name)
        try:
            await self.hub.send_initial_state(self)
        except RoomSyncError:
            logger.exception("Error fetching initial screens for room %s", self._room_name)
        return True

    async def _reject(self, exc: RoomSyncError) -> None:
        try:
            await self.transport.send_json(
                {"type": EVENT_CONNECT_ERROR, "data": {"code": exc.code, "message": exc.message}}
            )
            await self.transport.close(code=exc.close_code, reason=exc.message)
        except Exception as send_exc:
            logger.debug("Session %s: could not deliver rejection: %s", self.session_id, send_exc)

    async def close(self) -> None:
        if self.state is SessionState.JOINED:
            self.hub.leave(self)
            self.mutator.forget_room(self._room_name)
            logger.info("Session %s left room %s", self.session_id, self._room_name)
        if self.state is not SessionState.REJECTED:
            self.state = SessionState.CLOSED

    async def send(self, payload: Dict[str, Any]) -> None:
        await self.transport.send_json(payload)

    # ---------------------------------------------------------------------
    # Inbound events
    # ---------------------------------------------------------------------

    async def handle(self, message: Any) -> bool:
        """Dispatch one client message; return whether it changed room state."""
        if self.state is not SessionState.JOINED:
            logger.debug("Session %s: dropping message in state %s", self.session_id, self.state.value)
            return False
        if not isinstance(message, dict):
            await self._send_error(None, "Message must be an object")
            return False
        event = message.get("type")
        handler = self._handlers.get(event) if isinstance(event, str) else None
        if handler is None:
            await self._send_error(event, f"Unknown event: {event}")
            return False
        try:
            return await handler(message.get("data"))
        except ValidationError as exc:
            await self._send_error(event, "Invalid payload", exc.errors(include_url=False))
            return False

    async def _send_error(self, event: Any, detail: str, errors: Any = None) -> None:
        data: Dict[str, Any] = {"event": event, "detail": detail}
        if errors is not None:
            data["errors"] = errors
        await self.send({"type": EVENT_ERROR, "data": data})

    async def _add_component(self, data: Any) -> bool:
        event = AddComponentEvent.model_validate(data)
        return await self.mutator.add_component(self.room_name, event.screen_id, event.component)

    async def _move_component(self, data: Any) -> bool:
        event = MoveComponentEvent.model_validate(data)
        return await self.mutator.move_component(
            self.room_name, event.screen_id, event.component_id, event.x_ratio, event.y_ratio
        )

    async def _delete_component(self, data: Any) -> bool:
        event = DeleteComponentEvent.model_validate(data)
        return await self.mutator.delete_component(self.room_name, event.screen_id, event.component_id)

    async def _add_screen(self, data: Any) -> bool:
        draft = ScreenDraft.model_validate(data)
        return await self.mutator.add_screen(self.room_name, draft)

    async def _delete_screen(self, data: Any) -> bool:
        # Sent as a bare screen id; an object with ``screenId`` is accepted too.
        if not isinstance(data, dict):
            data = {"screenId": data}
        event = DeleteScreenEvent.model_validate(data)
        return await self.mutator.delete_screen(self.room_name, event.screen_id)

    async def _rename_screen(self, data: Any) -> bool:
        event = RenameScreenEvent.model_validate(data)
        return await self.mutator.rename_screen(self.room_name, event.screen_id, event.new_name)

    async def _change_device(self, data: Any) -> bool:
        event = ChangeDeviceEvent.model_validate(data)
        return await self.mutator.change_device(self.room_name, event.screen_id, event.device)


__all__ = ["RoomSession", "SessionState", "Transport"]
