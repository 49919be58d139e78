"""Shared fixtures: an in-memory store, the wired service and fake transports."""
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from roomsync.schemas import Component
from roomsync.service import RoomSyncService
from roomsync.store import PersistentStore

MEMORY_DB = "sqlite://:memory:"


@pytest_asyncio.fixture
async def store():
    """Open a fresh in-memory SQLite store for each test."""
    store = PersistentStore(MEMORY_DB)
    await store.open()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def service(store):
    return RoomSyncService(store)


@pytest_asyncio.fixture
async def demo_room(store):
    """Open room "demo" with its default screen; returns the screen id."""
    await store.create_room("demo", None)
    screens = await store.list_screens("demo")
    return screens[0].id


@pytest.fixture
def make_transport():
    """Factory for mock websocket transports."""

    def _make():
        transport = AsyncMock()
        transport.send_json = AsyncMock()
        transport.close = AsyncMock()
        return transport

    return _make


def sent_messages(transport, event_type=None):
    """Return the payloads passed to ``transport.send_json``, optionally by type."""
    messages = [call.args[0] for call in transport.send_json.call_args_list]
    if event_type is None:
        return messages
    return [m for m in messages if m["type"] == event_type]


def component(cid, x=0.1, y=0.1, **extra):
    return Component.model_validate({"id": cid, "xRatio": x, "yRatio": y, **extra})
