import pytest
import pytest_asyncio

from roomsync.auth_utils import RoomAuthenticator, hash_password, verify_password
from roomsync.errors import (
    AuthInternalError,
    InvalidPassword,
    PasswordRequired,
    RoomNotFound,
    StorageError,
    ValidationFailure,
)


@pytest_asyncio.fixture
async def authenticator(store):
    await store.create_room("demo", None)
    await store.create_room("secure", hash_password("x123"))
    return RoomAuthenticator(store)


def test_hash_roundtrip():
    hashed = hash_password("x123")

    assert hashed != "x123"
    assert verify_password("x123", hashed)
    assert not verify_password("wrong", hashed)


class TestAuthenticate:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", [None, "", "anything"])
    async def test_open_room_accepts_any_password(self, authenticator, password):
        assert await authenticator.authenticate("demo", password) == "demo"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", [None, ""])
    async def test_missing_password_is_required(self, authenticator, password):
        with pytest.raises(PasswordRequired) as exc_info:
            await authenticator.authenticate("secure", password)
        assert exc_info.value.code == "PASSWORD_REQUIRED"
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_password(self, authenticator):
        with pytest.raises(InvalidPassword) as exc_info:
            await authenticator.authenticate("secure", "wrong")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_correct_password(self, authenticator):
        assert await authenticator.authenticate("secure", "x123") == "secure"

    @pytest.mark.asyncio
    async def test_unknown_room(self, authenticator):
        with pytest.raises(RoomNotFound) as exc_info:
            await authenticator.authenticate("nope", None)
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_room_name_required(self, authenticator):
        with pytest.raises(ValidationFailure):
            await authenticator.authenticate("", "x123")

    @pytest.mark.asyncio
    async def test_storage_failure_is_internal_error(self, store, monkeypatch):
        async def broken(room_name):
            raise StorageError("database is gone")

        monkeypatch.setattr(store, "get_room_password_hash", broken)

        with pytest.raises(AuthInternalError):
            await RoomAuthenticator(store).authenticate("demo", None)
