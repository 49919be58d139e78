"""Serialized application of screen/component edits.

Every mutation of a room runs under that room's lock: the read, the write and
the broadcast that follows. Two edits in the same room therefore never
interleave (no lost updates between a read and its write), and each edit's
broadcast goes out before the next edit in that room starts. Rooms have
independent locks and do not wait on each other.

Failures never reach the client that sent the edit: storage errors are
logged and the edit is dropped, and edits that reference a screen outside the
sender's room are ignored.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from .errors import NotFound, StorageError
from .hub import BroadcastHub
from .schemas import Component, ComponentId, Device, ScreenDraft
from .store import PersistentStore

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[bool]]


class StateMutator:
    def __init__(self, store: PersistentStore, hub: BroadcastHub):
        self.store = store
        self.hub = hub
        self._locks: Dict[str, asyncio.Lock] = {}
        # Mutations holding or waiting for each room lock
        self._pending: Dict[str, int] = {}

    def _get_lock(self, room_name: str) -> asyncio.Lock:
        """Get or create the lock for a room."""
        if room_name not in self._locks:
            self._locks[room_name] = asyncio.Lock()
        return self._locks[room_name]

    def forget_room(self, room_name: str) -> None:
        """Drop the lock of a room with no members and no mutation in flight."""
        if self._pending.get(room_name) or self.hub.members(room_name):
            return
        self._locks.pop(room_name, None)

    async def _apply(self, room_name: str, action: str, operation: Operation) -> bool:
        self._pending[room_name] = self._pending.get(room_name, 0) + 1
        try:
            return await self._apply_locked(room_name, action, operation)
        finally:
            self._pending[room_name] -= 1
            if not self._pending[room_name]:
                del self._pending[room_name]
                self.forget_room(room_name)

    async def _apply_locked(self, room_name: str, action: str, operation: Operation) -> bool:
        async with self._get_lock(room_name):
            try:
                changed = await operation()
            except StorageError:
                logger.exception("Error %s in room %s", action, room_name)
                return False
            if not changed:
                logger.info("Room %s: ignored %s (no matching screen)", room_name, action)
                return False
            try:
                await self.hub.broadcast_room_state(room_name)
            except StorageError:
                logger.exception("Error broadcasting room %s after %s", room_name, action)
            return True

    # -------------------- Components -------------------- #

    async def add_component(self, room_name: str, screen_id: int, component: Component) -> bool:
        async def operation() -> bool:
            try:
                components = await self.store.get_screen_components(screen_id, room_name)
            except NotFound:
                return False
            if any(comp.get("id") == component.id for comp in components):
                logger.warning(
                    "Room %s: component %r already exists on screen %s", room_name, component.id, screen_id
                )
                return False
            return await self.store.append_component(screen_id, room_name, component)

        return await self._apply(room_name, "adding component", operation)

    async def move_component(
        self,
        room_name: str,
        screen_id: int,
        component_id: ComponentId,
        x_ratio: float,
        y_ratio: float,
    ) -> bool:
        async def operation() -> bool:
            try:
                components = await self.store.get_screen_components(screen_id, room_name)
            except NotFound:
                return False
            # An unknown id leaves every component untouched; the list is
            # still written back.
            moved: List[dict] = [
                {**comp, "xRatio": x_ratio, "yRatio": y_ratio} if comp.get("id") == component_id else comp
                for comp in components
            ]
            return await self.store.replace_screen_components(screen_id, room_name, moved)

        return await self._apply(room_name, "moving component", operation)

    async def delete_component(self, room_name: str, screen_id: int, component_id: ComponentId) -> bool:
        async def operation() -> bool:
            try:
                components = await self.store.get_screen_components(screen_id, room_name)
            except NotFound:
                return False
            remaining = [comp for comp in components if comp.get("id") != component_id]
            return await self.store.replace_screen_components(screen_id, room_name, remaining)

        return await self._apply(room_name, "deleting component", operation)

    # -------------------- Screens -------------------- #

    async def add_screen(self, room_name: str, draft: ScreenDraft) -> bool:
        async def operation() -> bool:
            return await self.store.create_screen(room_name, draft) is not None

        return await self._apply(room_name, "adding screen", operation)

    async def delete_screen(self, room_name: str, screen_id: int) -> bool:
        async def operation() -> bool:
            if await self.store.count_screens(room_name) <= 1:
                logger.info("Room %s: refusing to delete its last screen", room_name)
                return False
            return await self.store.delete_screen(screen_id, room_name)

        return await self._apply(room_name, "deleting screen", operation)

    async def rename_screen(self, room_name: str, screen_id: int, new_name: str) -> bool:
        async def operation() -> bool:
            return await self.store.rename_screen(screen_id, room_name, new_name)

        return await self._apply(room_name, "renaming screen", operation)

    async def change_device(self, room_name: str, screen_id: int, device: Device) -> bool:
        async def operation() -> bool:
            return await self.store.replace_device(screen_id, room_name, device)

        return await self._apply(room_name, "changing device", operation)


__all__ = ["StateMutator"]
