"""
KV 模块：Redis 之上的有序复合 Key 存储

供 Todo 仓储、用户与会话仓储使用。
"""

from app.kv.ids import new_id
from app.kv.keys import KVKeys
from app.kv.store import KVEntry, KVStore

__all__ = ["KVEntry", "KVKeys", "KVStore", "new_id"]
