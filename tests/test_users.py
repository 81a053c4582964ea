import time

import jwt
import pytest

from app.config import Settings
from app.errors import AuthError, ConflictError, ExpiredError, NotFoundError, ValidationError
from app.kv.keys import KVKeys
from app.kv.store import KVStore
from app.security.auth import create_access_token, decode_access_token, hash_password, verify_password
from app.security.users import UserRepository


@pytest.fixture()
def users(store: KVStore, settings: Settings) -> UserRepository:
    return UserRepository(store, settings)


def test_password_hash_roundtrip():
    hashed = hash_password("s3cret")
    assert hashed != "s3cret"
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


async def test_signup_stores_hashed_password(users: UserRepository):
    user = await users.signup("alice", "pw")

    stored = await users.get_by_username("alice")
    assert stored.id == user.id
    assert stored.password != "pw"
    assert verify_password("pw", stored.password)


async def test_signup_duplicate_username_conflicts(users: UserRepository):
    await users.signup("alice", "pw")
    with pytest.raises(ConflictError):
        await users.signup("alice", "other")


@pytest.mark.parametrize("username, password", [("", "pw"), ("bob", ""), ("bob", "x" * 73)])
async def test_signup_validates_input(users: UserRepository, username, password):
    with pytest.raises(ValidationError):
        await users.signup(username, password)


async def test_login_unknown_user(users: UserRepository):
    with pytest.raises(NotFoundError):
        await users.login("ghost", "pw")


async def test_login_wrong_password(users: UserRepository):
    await users.signup("alice", "pw")
    with pytest.raises(AuthError):
        await users.login("alice", "nope")


async def test_login_issues_tokens_for_stored_user(users: UserRepository, store: KVStore, settings: Settings):
    user = await users.signup("alice", "pw")

    result = await users.login("alice", "pw")

    payload = decode_access_token(settings, result.access_token)
    assert payload["id"] == user.id == result.id
    assert payload["username"] == "alice"
    assert payload["exp"] == result.exp
    session = await store.get(KVKeys.refresh_token(user.id))
    assert session["token"] == result.refresh_token


async def test_login_overwrites_previous_refresh_token(users: UserRepository, store: KVStore):
    user = await users.signup("alice", "pw")
    first = await users.login("alice", "pw")
    second = await users.login("alice", "pw")

    assert first.refresh_token != second.refresh_token
    assert (await store.get(KVKeys.refresh_token(user.id)))["token"] == second.refresh_token


async def test_logout_is_idempotent(users: UserRepository, store: KVStore):
    user = await users.signup("alice", "pw")
    await users.login("alice", "pw")

    await users.logout(user.id)
    await users.logout(user.id)

    assert await store.get(KVKeys.refresh_token(user.id)) is None


async def test_refresh_issues_new_access_token(users: UserRepository, settings: Settings):
    user = await users.signup("alice", "pw")
    login = await users.login("alice", "pw")

    result = await users.refresh_access_token(login.access_token, login.refresh_token)

    payload = decode_access_token(settings, result.access_token)
    assert payload["id"] == user.id
    assert payload["username"] == "alice"
    assert result.exp == payload["exp"]


async def test_refresh_accepts_expired_access_token(users: UserRepository, settings: Settings):
    user = await users.signup("alice", "pw")
    login = await users.login("alice", "pw")
    expired = jwt.encode(
        {"id": user.id, "username": "alice", "token_type": "access", "exp": int(time.time()) - 60},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    result = await users.refresh_access_token(expired, login.refresh_token)

    assert decode_access_token(settings, result.access_token)["id"] == user.id


async def test_refresh_rejects_mismatched_refresh_token(users: UserRepository):
    await users.signup("alice", "pw")
    login = await users.login("alice", "pw")

    with pytest.raises(AuthError):
        await users.refresh_access_token(login.access_token, "not-the-token")


async def test_refresh_rejects_forged_access_token(users: UserRepository, settings: Settings):
    user = await users.signup("alice", "pw")
    login = await users.login("alice", "pw")
    forged = jwt.encode(
        {"id": user.id, "username": "alice", "token_type": "access", "exp": int(time.time()) + 60},
        "some-other-secret-that-is-long-enough-000",
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(AuthError):
        await users.refresh_access_token(forged, login.refresh_token)


async def test_refresh_without_session(users: UserRepository, settings: Settings):
    user = await users.signup("alice", "pw")
    token, _ = create_access_token(settings, user_id=user.id, username="alice")

    with pytest.raises(NotFoundError):
        await users.refresh_access_token(token, "anything")


async def test_refresh_rejects_expired_session(users: UserRepository, store: KVStore):
    user = await users.signup("alice", "pw")
    login = await users.login("alice", "pw")
    await store.set(
        KVKeys.refresh_token(user.id),
        {"token": login.refresh_token, "exp": int(time.time()) - 1},
    )

    with pytest.raises(ExpiredError):
        await users.refresh_access_token(login.access_token, login.refresh_token)


async def test_refresh_requires_both_tokens(users: UserRepository):
    with pytest.raises(ValidationError):
        await users.refresh_access_token("", "x")


def test_verify_password_rejects_overlong_input():
    assert not verify_password("x" * 80, hash_password("pw"))


async def test_login_overlong_password_is_wrong_password(users: UserRepository):
    await users.signup("alice", "pw")
    with pytest.raises(AuthError):
        await users.login("alice", "x" * 80)
