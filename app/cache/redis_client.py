"""
Redis 客户端：连接池 + KVStore 构造 + FastAPI 依赖注入
"""

import redis.asyncio as aioredis

from app.config import get_settings
from app.kv.store import KVStore

settings = get_settings()

redis_pool = aioredis.ConnectionPool.from_url(
    settings.REDIS_URL,
    max_connections=settings.REDIS_MAX_CONNECTIONS,
    decode_responses=True,
    socket_timeout=5,
    socket_connect_timeout=5,
    retry_on_timeout=True,
)

redis_client = aioredis.Redis(connection_pool=redis_pool)


async def get_redis() -> aioredis.Redis:
    """FastAPI 依赖注入：获取 Redis 客户端"""
    return redis_client


async def get_kv_store() -> KVStore:
    """FastAPI 依赖注入：获取基于共享连接池的 KVStore"""
    return KVStore(redis_client, root=settings.KV_ROOT)
