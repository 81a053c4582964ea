"""
有序 KV 存储：在 Redis 之上实现「复合 Key + 前缀范围扫描」

Key 是字符串分段组成的元组，例如 ("todo-list", "<id>")。
- 值：JSON 序列化后存入 Redis String，Key = {root}:{seg1}:{seg2}...
- 顺序索引：所有 Key 同时写入一个 Sorted Set（score 恒为 0），
  借助 ZRANGEBYLEX 按字典序做前缀扫描

一致性：单 Key 读写原子；set/delete 的「值 + 索引」在同一个 MULTI/EXEC 中提交。
set_if_absent 例外：SET NX 成功后才单独补写索引，两步之间前缀扫描可能漏掉该条目。
前缀扫描不保证与并发写入处于同一快照。
"""

import json
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote

import redis.asyncio as aioredis

Key = tuple[str, ...]

SEPARATOR = ":"


@dataclass(frozen=True)
class KVEntry:
    """前缀扫描返回的单个条目"""

    key: Key
    value: Any


def _encode_segment(segment: str) -> str:
    if not isinstance(segment, str) or not segment:
        raise ValueError(f"Key 分段必须是非空字符串: {segment!r}")
    # 转义分隔符，保证分段边界不被用户输入（如用户名）破坏
    return quote(segment, safe="-_.~")


def encode_key(key: Key) -> str:
    """复合 Key → 索引成员字符串"""
    if not key:
        raise ValueError("Key 不能为空")
    return SEPARATOR.join(_encode_segment(s) for s in key)


def decode_key(member: str) -> Key:
    """索引成员字符串 → 复合 Key"""
    return tuple(unquote(s) for s in member.split(SEPARATOR))


class KVStore:
    """基于 Redis 的有序复合 Key 存储"""

    def __init__(self, redis: aioredis.Redis, root: str = "kv"):
        self.redis = redis
        self.root = root
        self.index_key = f"{root}#index"

    def _redis_key(self, member: str) -> str:
        return f"{self.root}{SEPARATOR}{member}"

    # ── 单 Key 操作 ──

    async def get(self, key: Key) -> Any | None:
        """读取单个值，不存在返回 None"""
        raw = await self.redis.get(self._redis_key(encode_key(key)))
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: Key, value: Any) -> None:
        """覆盖写入单个值（值 + 索引同一事务提交）"""
        member = encode_key(key)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(self._redis_key(member), json.dumps(value, ensure_ascii=False))
            pipe.zadd(self.index_key, {member: 0})
            await pipe.execute()

    async def set_if_absent(self, key: Key, value: Any) -> bool:
        """仅当 Key 不存在时写入，返回是否写入成功"""
        member = encode_key(key)
        created = await self.redis.set(
            self._redis_key(member),
            json.dumps(value, ensure_ascii=False),
            nx=True,
        )
        if not created:
            return False
        # 值与索引分两步写入：值先落地，索引随后补上，其间前缀扫描可能看不到该条目
        await self.redis.zadd(self.index_key, {member: 0})
        return True

    async def delete(self, key: Key) -> None:
        """删除单个 Key，不存在时静默成功"""
        await self.delete_many([key])

    async def delete_many(self, keys: list[Key]) -> None:
        """批量删除，一次 MULTI/EXEC 提交"""
        if not keys:
            return
        members = [encode_key(k) for k in keys]
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.delete(*[self._redis_key(m) for m in members])
            pipe.zrem(self.index_key, *members)
            await pipe.execute()

    # ── 前缀扫描 ──

    async def list(self, prefix: Key) -> list[KVEntry]:
        """
        返回所有以 prefix 开头的条目，按 Key 字典序排列。

        索引中存在但值已缺失的成员（并发删除的中间态）会被跳过。
        """
        encoded = encode_key(prefix)
        # ':' 的下一个字符是 ';'，[prefix: , prefix;) 恰好覆盖全部子 Key
        members = await self.redis.zrangebylex(
            self.index_key,
            f"[{encoded}{SEPARATOR}",
            f"({encoded};",
        )
        if not members:
            return []

        raws = await self.redis.mget([self._redis_key(m) for m in members])
        return [
            KVEntry(key=decode_key(member), value=json.loads(raw))
            for member, raw in zip(members, raws)
            if raw is not None
        ]
