"""
KV Key 统一管理，避免散弹式硬编码
命名规范：(业务域, 标识...)
"""

from app.kv.store import Key


class KVKeys:
    """复合 Key 构造器"""

    # ── Todo ──
    @staticmethod
    def todo_namespace(user_id: str | None = None) -> Key:
        """Todo 列表前缀：匿名为公共列表，登录用户按 user_id 隔离"""
        if user_id is None:
            return ("todo-list",)
        return ("user-todo-list", user_id)

    # ── 用户 ──
    @staticmethod
    def user(user_id: str) -> Key:
        return ("user", user_id)

    @staticmethod
    def username(username: str) -> Key:
        """用户名唯一索引 → user_id"""
        return ("username", username)

    # ── 会话 ──
    @staticmethod
    def refresh_token(user_id: str) -> Key:
        """当前有效的 Refresh Token（每个用户至多一个）"""
        return ("refresh-token", user_id)
