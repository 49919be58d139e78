import logging
from typing import Optional

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from .errors import (
    AuthInternalError,
    InvalidPassword,
    NotFound,
    PasswordRequired,
    RoomNotFound,
    StorageError,
    ValidationFailure,
)
from .store import PersistentStore

logger = logging.getLogger(__name__)

# -----------------------------
# Password hashing helpers
# -----------------------------

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    """Return a secure bcrypt hash of *password*."""
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify *password* against *hashed* bcrypt digest."""
    return pwd_context.verify(password, hashed)


async def hash_password_async(password: str) -> str:
    return await run_in_threadpool(hash_password, password)


# -----------------------------
# Room join policy
# -----------------------------

class RoomAuthenticator:
    """Decides whether a client may join a room.

    The HTTP join probe and the realtime handshake both go through
    :meth:`authenticate` so their answers can never disagree.
    """

    def __init__(self, store: PersistentStore):
        self.store = store

    async def authenticate(self, room_name: Optional[str], password: Optional[str]) -> str:
        """Return *room_name* if the join is allowed.

        Raises
        ------
        ValidationFailure
            If no room name was supplied.
        RoomNotFound, PasswordRequired, InvalidPassword
            If the join is refused.
        AuthInternalError
            If the room could not be looked up.
        """
        if not room_name:
            raise ValidationFailure("Room name is required")
        try:
            password_hash = await self.store.get_room_password_hash(room_name)
        except NotFound:
            raise RoomNotFound()
        except StorageError as exc:
            logger.exception("Error looking up room %s", room_name)
            raise AuthInternalError() from exc

        if password_hash is None:
            return room_name
        # Checked before hashing so the two refusals stay distinguishable.
        if not password:
            raise PasswordRequired()
        try:
            valid = await run_in_threadpool(verify_password, password, password_hash)
        except ValueError as exc:
            logger.exception("Unreadable password hash for room %s", room_name)
            raise AuthInternalError() from exc
        if not valid:
            raise InvalidPassword()
        return room_name


__all__ = [
    "pwd_context",
    "hash_password",
    "hash_password_async",
    "verify_password",
    "RoomAuthenticator",
]
