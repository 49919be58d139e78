"""Runtime configuration for the room synchronization server.

Settings are loaded from a ``.env`` file (if present) and environment
variables. See ``.env.example`` for the available options.
"""
from __future__ import annotations

import logging
import os
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Settings(BaseModel):
    database_url: str = "sqlite://roomsync.db"
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"


def _split_origins(raw: str) -> List[str]:
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def load_settings(env_file: str | None = ".env") -> Settings:
    """Build :class:`Settings` from *env_file* and the process environment."""
    if env_file:
        load_dotenv(env_file)

    defaults = Settings()
    return Settings(
        database_url=os.getenv("ROOMSYNC_DATABASE_URL", defaults.database_url),
        host=os.getenv("ROOMSYNC_HOST", defaults.host),
        port=int(os.getenv("ROOMSYNC_PORT", str(defaults.port))),
        cors_origins=_split_origins(os.getenv("ROOMSYNC_CORS_ORIGINS", "*")),
        log_level=os.getenv("ROOMSYNC_LOG_LEVEL", defaults.log_level).upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = ["Settings", "load_settings", "configure_logging"]
