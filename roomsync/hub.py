"""Room broadcast groups.

The hub keeps an explicit mapping of room name -> live sessions and pushes
full room snapshots, always read back from storage, to them.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Set

from .constants import EVENT_INIT, EVENT_UPDATE_SCREENS
from .store import PersistentStore

if TYPE_CHECKING:
    from .session import RoomSession

logger = logging.getLogger(__name__)


class BroadcastHub:
    def __init__(self, store: PersistentStore):
        self.store = store
        self._groups: Dict[str, Set["RoomSession"]] = {}

    # -------------------- Membership -------------------- #

    def join(self, session: "RoomSession") -> None:
        room_name = session.room_name
        self._groups.setdefault(room_name, set()).add(session)
        logger.info("Room %s: %d active sessions", room_name, len(self._groups[room_name]))

    def leave(self, session: "RoomSession") -> None:
        room_name = session.room_name
        group = self._groups.get(room_name)
        if group is None:
            return
        group.discard(session)
        if not group:
            del self._groups[room_name]
            logger.info("Room %s: no active sessions", room_name)
        else:
            logger.info("Room %s: %d active sessions", room_name, len(group))

    def members(self, room_name: str) -> Set["RoomSession"]:
        return set(self._groups.get(room_name, set()))

    def active_rooms(self) -> Dict[str, int]:
        return {room: len(sessions) for room, sessions in self._groups.items()}

    # -------------------- Broadcasting -------------------- #

    async def _snapshot(self, room_name: str) -> List[Dict[str, Any]]:
        screens = await self.store.list_screens(room_name)
        return [screen.model_dump() for screen in screens]

    async def send_initial_state(self, session: "RoomSession") -> None:
        """Send the current screens of the session's room to that session only."""
        screens = await self._snapshot(session.room_name)
        await session.send({"type": EVENT_INIT, "data": screens})

    async def broadcast_room_state(self, room_name: str) -> None:
        """Send the *entire* screen list of *room_name* to every member.

        A session whose transport fails is skipped; it catches up with the next
        broadcast.
        """
        sessions = self.members(room_name)
        if not sessions:
            return
        payload = {"type": EVENT_UPDATE_SCREENS, "data": await self._snapshot(room_name)}
        for session in sessions:
            try:
                await session.send(payload)
            except Exception as exc:
                logger.warning("Room %s: failed to deliver update to %s: %s", room_name, session.session_id, exc)


__all__ = ["BroadcastHub"]
