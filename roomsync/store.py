"""Durable storage of rooms and screens on top of Tortoise ORM.

``PersistentStore`` is the only component that talks to the database. Each
method is atomic on its own (one row, or one transaction for room creation);
sequencing several calls into a consistent read-modify-write is the job of
:class:`roomsync.mutator.StateMutator`.
"""
from __future__ import annotations

import functools
import logging
from typing import Any, Dict, List, Optional

from tortoise import Tortoise, connections
from tortoise.exceptions import BaseORMException, IntegrityError
from tortoise.transactions import in_transaction

from .constants import DEFAULT_SCREEN
from .errors import AlreadyExists, NotFound, StorageError
from .models import Room, Screen
from .schemas import Component, Device, RoomSummary, ScreenDraft, ScreenState

logger = logging.getLogger(__name__)

MODELS_MODULE = "roomsync.models"


def _storage_call(func):
    """Re-raise ORM/driver errors from *func* as :class:`StorageError`."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except BaseORMException as exc:
            raise StorageError(f"{func.__name__} failed: {exc}") from exc

    return wrapper


def _to_state(screen: Screen) -> ScreenState:
    return ScreenState(
        id=screen.id,
        name=screen.name,
        device=screen.device,
        components=list(screen.components or []),
    )


class PersistentStore:
    def __init__(self, db_url: str):
        self.db_url = db_url
        self._opened = False

    # ---------------------------------------------------------------------
    # Lifecycle
    # ---------------------------------------------------------------------

    async def open(self) -> None:
        if self._opened:
            return
        await Tortoise.init(db_url=self.db_url, modules={"models": [MODELS_MODULE]})
        await Tortoise.generate_schemas(safe=True)
        self._opened = True
        logger.info("Store opened (%s)", self.db_url)

    async def close(self) -> None:
        if not self._opened:
            return
        await connections.close_all()
        self._opened = False
        logger.info("Store closed")

    # ---------------------------------------------------------------------
    # Rooms
    # ---------------------------------------------------------------------

    @_storage_call
    async def get_room_password_hash(self, room_name: str) -> Optional[str]:
        room = await Room.get_or_none(name=room_name)
        if room is None:
            raise NotFound(f"Room {room_name!r} not found")
        return room.password_hash

    @_storage_call
    async def list_rooms(self) -> List[RoomSummary]:
        rooms = await Room.all().order_by("-created_at", "-id")
        return [RoomSummary(id=room.id, name=room.name) for room in rooms]

    @_storage_call
    async def create_room(self, name: str, password_hash: Optional[str]) -> RoomSummary:
        """Create *name* together with its default screen."""
        try:
            async with in_transaction():
                room = await Room.create(name=name, password_hash=password_hash)
                await Screen.create(
                    room=room,
                    name=DEFAULT_SCREEN["name"],
                    device=dict(DEFAULT_SCREEN["device"]),
                    components=[],
                )
        except IntegrityError as exc:
            raise AlreadyExists(f"Room {name!r} already exists") from exc
        return RoomSummary(id=room.id, name=room.name)

    async def _room_id(self, room_name: str) -> Optional[int]:
        room = await Room.get_or_none(name=room_name)
        return room.id if room else None

    async def _get_screen(self, screen_id: int, room_name: str) -> Optional[Screen]:
        room_id = await self._room_id(room_name)
        if room_id is None:
            return None
        return await Screen.get_or_none(id=screen_id, room_id=room_id)

    # ---------------------------------------------------------------------
    # Screens
    # ---------------------------------------------------------------------

    @_storage_call
    async def create_screen(self, room_name: str, draft: ScreenDraft) -> Optional[ScreenState]:
        room_id = await self._room_id(room_name)
        if room_id is None:
            return None
        screen = await Screen.create(
            room_id=room_id,
            name=draft.name,
            device=draft.device.model_dump(by_alias=True),
            components=[c.model_dump(by_alias=True) for c in draft.components],
        )
        return _to_state(screen)

    @_storage_call
    async def list_screens(self, room_name: str) -> List[ScreenState]:
        room_id = await self._room_id(room_name)
        if room_id is None:
            return []
        screens = await Screen.filter(room_id=room_id).order_by("id")
        return [_to_state(screen) for screen in screens]

    @_storage_call
    async def count_screens(self, room_name: str) -> int:
        room_id = await self._room_id(room_name)
        if room_id is None:
            return 0
        return await Screen.filter(room_id=room_id).count()

    @_storage_call
    async def get_screen_components(self, screen_id: int, room_name: str) -> List[Dict[str, Any]]:
        screen = await self._get_screen(screen_id, room_name)
        if screen is None:
            raise NotFound(f"Screen {screen_id} not found in room {room_name!r}")
        return list(screen.components or [])

    @_storage_call
    async def replace_screen_components(
        self, screen_id: int, room_name: str, components: List[Dict[str, Any]]
    ) -> bool:
        screen = await self._get_screen(screen_id, room_name)
        if screen is None:
            return False
        screen.components = list(components)
        await screen.save(update_fields=["components"])
        return True

    @_storage_call
    async def append_component(self, screen_id: int, room_name: str, component: Component) -> bool:
        screen = await self._get_screen(screen_id, room_name)
        if screen is None:
            return False
        screen.components = list(screen.components or []) + [component.model_dump(by_alias=True)]
        await screen.save(update_fields=["components"])
        return True

    @_storage_call
    async def rename_screen(self, screen_id: int, room_name: str, new_name: str) -> bool:
        screen = await self._get_screen(screen_id, room_name)
        if screen is None:
            return False
        screen.name = new_name
        await screen.save(update_fields=["name"])
        return True

    @_storage_call
    async def replace_device(self, screen_id: int, room_name: str, device: Device) -> bool:
        screen = await self._get_screen(screen_id, room_name)
        if screen is None:
            return False
        screen.device = device.model_dump(by_alias=True)
        await screen.save(update_fields=["device"])
        return True

    @_storage_call
    async def delete_screen(self, screen_id: int, room_name: str) -> bool:
        """Delete a screen unless it is the last one left in its room."""
        room_id = await self._room_id(room_name)
        if room_id is None:
            return False
        if await Screen.filter(room_id=room_id).count() <= 1:
            return False
        deleted = await Screen.filter(id=screen_id, room_id=room_id).delete()
        return deleted > 0


__all__ = ["PersistentStore", "MODELS_MODULE"]
