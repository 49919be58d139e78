"""Exception hierarchy shared by the store, the authenticator and the routers."""
from __future__ import annotations

from .constants import (
    CLOSE_INTERNAL_ERROR,
    CLOSE_INVALID_PASSWORD,
    CLOSE_PASSWORD_REQUIRED,
    CLOSE_ROOM_NAME_REQUIRED,
    CLOSE_ROOM_NOT_FOUND,
)


class RoomSyncError(Exception):
    """Base class for every error raised by this package."""

    code = "ERROR"
    message = "Unexpected error"
    status_code = 500
    close_code = CLOSE_INTERNAL_ERROR

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


# -----------------------------
# Storage
# -----------------------------

class StorageError(RoomSyncError):
    code = "STORAGE_ERROR"
    message = "Storage operation failed"


class NotFound(RoomSyncError):
    code = "NOT_FOUND"
    message = "Not found"
    status_code = 404


class AlreadyExists(RoomSyncError):
    code = "ALREADY_EXISTS"
    message = "Already exists"
    status_code = 400


# -----------------------------
# Request validation
# -----------------------------

class ValidationFailure(RoomSyncError):
    code = "VALIDATION_ERROR"
    message = "Invalid request"
    status_code = 400
    close_code = CLOSE_ROOM_NAME_REQUIRED


# -----------------------------
# Room authentication
# -----------------------------

class AuthFailure(RoomSyncError):
    """A join attempt was refused; ``code`` tells the caller why."""

    status_code = 401


class RoomNotFound(AuthFailure):
    code = "ROOM_NOT_FOUND"
    message = "Room not found"
    status_code = 404
    close_code = CLOSE_ROOM_NOT_FOUND


class PasswordRequired(AuthFailure):
    code = "PASSWORD_REQUIRED"
    message = "Password required"
    close_code = CLOSE_PASSWORD_REQUIRED


class InvalidPassword(AuthFailure):
    code = "INVALID_PASSWORD"
    message = "Invalid password"
    close_code = CLOSE_INVALID_PASSWORD


class AuthInternalError(RoomSyncError):
    code = "AUTH_ERROR"
    message = "Authentication error"


__all__ = [
    "RoomSyncError",
    "StorageError",
    "NotFound",
    "AlreadyExists",
    "ValidationFailure",
    "AuthFailure",
    "RoomNotFound",
    "PasswordRequired",
    "InvalidPassword",
    "AuthInternalError",
]
