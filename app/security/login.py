"""
认证接口：注册 / 登录 / 刷新 access_token / 注销
"""

from fastapi import APIRouter, Depends

from app.api.envelope import envelope
from app.cache.redis_client import get_kv_store
from app.config import Settings, get_settings
from app.kv.store import KVStore
from app.security.auth import AuthenticatedUser, get_current_user
from app.security.schemas import CredentialsRequest, RefreshRequest
from app.security.users import UserRepository

router = APIRouter(tags=["认证"])


async def get_user_repository(
    store: KVStore = Depends(get_kv_store),
    settings: Settings = Depends(get_settings),
) -> UserRepository:
    return UserRepository(store, settings)


@router.post("/signup")
async def signup(body: CredentialsRequest, users: UserRepository = Depends(get_user_repository)):
    """注册：用户名唯一，密码 bcrypt 哈希后存储"""
    await users.signup(body.username, body.password)
    return envelope(None, "signup success")


@router.post("/login")
async def login(body: CredentialsRequest, users: UserRepository = Depends(get_user_repository)):
    """登录：校验密码，签发 access_token + refresh_token"""
    result = await users.login(body.username, body.password)
    return envelope(result, "login success")


@router.post("/refresh")
async def refresh(body: RefreshRequest, users: UserRepository = Depends(get_user_repository)):
    """用 refresh_token 换取新的 access_token"""
    result = await users.refresh_access_token(body.access_token, body.refresh_token)
    return envelope(result, "token refresh success")


@router.post("/auth/logout")
async def logout(
    user: AuthenticatedUser = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    """注销：删除服务端保存的 refresh_token"""
    await users.logout(user.id)
    return envelope(None, "logout success")
