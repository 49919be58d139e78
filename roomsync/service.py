"""Explicit wiring of the synchronization engine.

One :class:`RoomSyncService` owns the store and the components built on it.
The FastAPI app creates it once, opens it on startup and closes it on
shutdown; routers reach it through ``app.state.service``.
"""
from __future__ import annotations

import logging

from .auth_utils import RoomAuthenticator
from .hub import BroadcastHub
from .mutator import StateMutator
from .session import RoomSession, Transport
from .store import PersistentStore

logger = logging.getLogger(__name__)


class RoomSyncService:
    def __init__(self, store: PersistentStore):
        self.store = store
        self.authenticator = RoomAuthenticator(store)
        self.hub = BroadcastHub(store)
        self.mutator = StateMutator(store, self.hub)

    @classmethod
    def from_url(cls, db_url: str) -> "RoomSyncService":
        return cls(PersistentStore(db_url))

    async def start(self) -> None:
        await self.store.open()
        logger.info("Room sync service started")

    async def stop(self) -> None:
        await self.store.close()
        logger.info("Room sync service stopped")

    def new_session(self, transport: Transport) -> RoomSession:
        return RoomSession(transport, self.authenticator, self.hub, self.mutator)


__all__ = ["RoomSyncService"]
