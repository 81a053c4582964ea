import os

# 必须在导入 app 之前设置，CORS 中间件在导入时读取配置
os.environ.setdefault("JWT_SECRET", "test-secret-for-the-kv-todo-suite-0123456789")
os.environ.setdefault("CORS_ORIGIN", "http://localhost:5173")
os.environ.setdefault("ENV", "test")

import fakeredis
import fakeredis.aioredis
import pytest
from fastapi.testclient import TestClient

from app.cache.redis_client import get_kv_store, get_redis
from app.config import Settings, get_settings
from app.kv.store import KVStore
from app.main import app


@pytest.fixture()
def settings() -> Settings:
    return get_settings()


@pytest.fixture()
def fake_server() -> fakeredis.FakeServer:
    return fakeredis.FakeServer()


@pytest.fixture()
async def store(fake_server: fakeredis.FakeServer) -> KVStore:
    redis = fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)
    yield KVStore(redis, root="test")
    await redis.aclose()


@pytest.fixture()
def client(fake_server: fakeredis.FakeServer):
    # 每个请求在 TestClient 自己的事件循环里新建连接，共享同一个 FakeServer
    async def _fake_redis():
        return fakeredis.aioredis.FakeRedis(server=fake_server, decode_responses=True)

    async def _fake_store():
        return KVStore(await _fake_redis(), root="test")

    app.dependency_overrides[get_redis] = _fake_redis
    app.dependency_overrides[get_kv_store] = _fake_store
    yield TestClient(app)
    app.dependency_overrides.clear()
