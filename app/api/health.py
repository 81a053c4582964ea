"""
健康检查接口：探活 + Redis 状态
"""

import redis.asyncio as aioredis
import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.cache.redis_client import get_redis

router = APIRouter(tags=["健康检查"])
log = structlog.get_logger()


@router.get("/", response_class=PlainTextResponse)
async def index():
    return "Hello, kv-todo!"


@router.get("/health")
async def health_check(redis: aioredis.Redis = Depends(get_redis)):
    """健康检查：校验 Redis 连接"""
    status = {"status": "ok", "redis": "ok"}

    try:
        await redis.ping()
    except Exception as e:
        status["redis"] = f"error: {e}"
        status["status"] = "degraded"
        log.error("Redis 健康检查失败", error=str(e))

    return status
