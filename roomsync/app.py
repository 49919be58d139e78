from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, configure_logging, load_settings
from .routers import rooms as rooms_router
from .routers import websockets as ws_router
from .service import RoomSyncService

# -----------------------------
# FastAPI app factory
# -----------------------------


def create_app(settings: Optional[Settings] = None, service: Optional[RoomSyncService] = None) -> FastAPI:
    """Build the app; the service's store is opened on startup and closed on shutdown."""
    settings = settings or load_settings()
    service = service or RoomSyncService.from_url(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await service.start()
        try:
            yield
        finally:
            await service.stop()

    app = FastAPI(title="Room Sync Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router.router)
    app.include_router(ws_router.router)
    return app


def main() -> None:
    import uvicorn

    settings = load_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


__all__ = ["create_app", "main"]
