"""
Todo 模块：基于 KV 前缀扫描的待办列表

提供 TodoRepository（分页 / 过滤 / 统计 / 单条写操作）和对应 schema，
供 app.api.todo 的公共路由与登录用户路由共用。
"""

from app.todo.repository import TodoRepository, parse_filter, parse_page
from app.todo.schemas import Dashboard, Todo, TodoPage

__all__ = ["Dashboard", "Todo", "TodoPage", "TodoRepository", "parse_filter", "parse_page"]
