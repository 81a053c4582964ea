"""
JWT 鉴权模块：密码哈希 / Token 签发 / 校验 / Bearer 依赖
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.config import Settings, get_settings
from app.errors import AuthError

log = structlog.get_logger()
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class AuthenticatedUser:
    """鉴权后的用户上下文，贯穿整个请求生命周期"""

    id: str
    username: str
    exp: int


# ── 密码 ──

BCRYPT_MAX_BYTES = 72


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """校验密码；超过 bcrypt 72 字节上限的输入不可能匹配任何已注册密码"""
    if len(plain_password.encode()) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(plain_password.encode(), hashed_password.encode())


def hash_password(password: str) -> str:
    """生成密码哈希"""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


# ── Token 签发 ──

def create_access_token(settings: Settings, *, user_id: str, username: str) -> tuple[str, int]:
    """签发 access_token，返回 (token, exp 时间戳)"""
    now = datetime.now(timezone.utc)
    exp = int((now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)).timestamp())
    payload = {
        "id": user_id,
        "username": username,
        "token_type": "access",
        "iat": int(now.timestamp()),
        "exp": exp,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, exp


def create_refresh_token(settings: Settings) -> tuple[str, int]:
    """签发 refresh_token（不携带用户信息），返回 (token, exp 时间戳)"""
    now = datetime.now(timezone.utc)
    exp = int((now + timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES)).timestamp())
    payload = {
        "jti": str(uuid.uuid4()),
        "token_type": "refresh",
        "exp": exp,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, exp


# ── Token 校验 ──

def decode_access_token(settings: Settings, token: str, *, verify_exp: bool = True) -> dict:
    """
    校验签名并解码 access_token。

    verify_exp=False 仅用于 /refresh：access_token 过期正是刷新的前提，
    但签名必须有效，否则 payload 中的用户 id 不可信。
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_exp": verify_exp},
        )
    except jwt.ExpiredSignatureError:
        raise AuthError("token expired")
    except jwt.InvalidTokenError:
        raise AuthError("invalid token")

    if payload.get("token_type") != "access" or not payload.get("id"):
        raise AuthError("invalid token")
    return payload


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedUser:
    """FastAPI 依赖注入：校验 Bearer Token 并返回用户上下文，失败一律 401"""
    if credentials is None:
        raise AuthError("missing bearer token")

    payload = decode_access_token(settings, credentials.credentials)
    user = AuthenticatedUser(
        id=payload["id"],
        username=payload.get("username", ""),
        exp=payload.get("exp", 0),
    )

    request.state.user_id = user.id
    structlog.contextvars.bind_contextvars(user_id=user.id)
    return user
