"""
用户与会话仓储：注册 / 登录 / 注销 / 刷新 access_token

存储布局（见 KVKeys）：
- ("user", id)              → User
- ("username", username)    → id，set_if_absent 保证用户名唯一
- ("refresh-token", id)     → RefreshSession，登录时覆盖写入
"""

import time

import structlog

from app.config import Settings
from app.errors import AuthError, ConflictError, ExpiredError, NotFoundError, ValidationError
from app.kv.ids import new_id
from app.kv.keys import KVKeys
from app.kv.store import KVStore
from app.observability.metrics import AUTH_EVENT_TOTAL
from app.security.auth import (
    BCRYPT_MAX_BYTES,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from app.security.schemas import LoginResult, RefreshResult, RefreshSession, User

log = structlog.get_logger()

class UserRepository:
    """基于 KVStore 的用户与 Refresh Token 管理"""

    def __init__(self, store: KVStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def get_by_username(self, username: str) -> User | None:
        user_id = await self.store.get(KVKeys.username(username))
        if user_id is None:
            return None
        raw = await self.store.get(KVKeys.user(user_id))
        if raw is None:
            return None
        return User.model_validate(raw)

    async def signup(self, username: str, password: str) -> User:
        if not username or not password:
            raise ValidationError("username and password are required")
        if len(password.encode()) > BCRYPT_MAX_BYTES:
            raise ValidationError(f"password must be at most {BCRYPT_MAX_BYTES} bytes")

        user = User(id=new_id(), username=username, password=hash_password(password))

        # 先占用户名索引，并发注册同名用户时只有一个能成功
        if not await self.store.set_if_absent(KVKeys.username(username), user.id):
            AUTH_EVENT_TOTAL.labels(event="signup", outcome="failure").inc()
            raise ConflictError("username already exists")
        await self.store.set(KVKeys.user(user.id), user.model_dump())

        AUTH_EVENT_TOTAL.labels(event="signup", outcome="success").inc()
        log.info("用户注册成功", user_id=user.id, username=username)
        return user

    async def login(self, username: str, password: str) -> LoginResult:
        user = await self.get_by_username(username)
        if user is None:
            AUTH_EVENT_TOTAL.labels(event="login", outcome="failure").inc()
            raise NotFoundError("user not found")
        if not verify_password(password, user.password):
            AUTH_EVENT_TOTAL.labels(event="login", outcome="failure").inc()
            raise AuthError("wrong password")

        access_token, exp = create_access_token(
            self.settings, user_id=user.id, username=user.username
        )
        refresh_token, refresh_exp = create_refresh_token(self.settings)
        await self.store.set(
            KVKeys.refresh_token(user.id),
            RefreshSession(token=refresh_token, exp=refresh_exp).model_dump(),
        )

        AUTH_EVENT_TOTAL.labels(event="login", outcome="success").inc()
        log.info("用户登录成功", user_id=user.id, username=user.username)
        return LoginResult(
            id=user.id,
            username=user.username,
            exp=exp,
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def logout(self, user_id: str) -> None:
        """删除 Refresh Token，幂等"""
        await self.store.delete(KVKeys.refresh_token(user_id))
        AUTH_EVENT_TOTAL.labels(event="logout", outcome="success").inc()
        log.info("用户注销", user_id=user_id)

    async def refresh_access_token(self, access_token: str, refresh_token: str) -> RefreshResult:
        """
        用 Refresh Token 换取新的 access_token。

        旧 access_token 必须签名有效（允许已过期），其中的用户 id 才会被用于查找会话。
        """
        if not access_token or not refresh_token:
            raise ValidationError("accessToken and refreshToken are required")

        try:
            payload = decode_access_token(self.settings, access_token, verify_exp=False)
            raw = await self.store.get(KVKeys.refresh_token(payload["id"]))
            if raw is None:
                raise NotFoundError("refresh token not found")

            session = RefreshSession.model_validate(raw)
            if session.token != refresh_token:
                raise AuthError("refresh token mismatch")
            if session.exp <= int(time.time()):
                raise ExpiredError("refresh token expired")
        except (AuthError, ExpiredError, NotFoundError):
            AUTH_EVENT_TOTAL.labels(event="refresh", outcome="failure").inc()
            raise

        new_token, exp = create_access_token(
            self.settings, user_id=payload["id"], username=payload.get("username", "")
        )
        AUTH_EVENT_TOTAL.labels(event="refresh", outcome="success").inc()
        log.info("access_token 已刷新", user_id=payload["id"])
        return RefreshResult(access_token=new_token, exp=exp)
