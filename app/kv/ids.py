"""
ID 生成：UUIDv7 前 48 位为毫秒时间戳，字符串形式按创建时间字典序递增
"""

from uuid6 import uuid7


def new_id() -> str:
    return str(uuid7())
