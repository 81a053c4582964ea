"""
Todo 接口：公共列表 /todo/* 与登录用户列表 /auth/todo/*

两组路由由同一个工厂函数生成，只有命名空间依赖不同：
- /todo       → ("todo-list",)
- /auth/todo  → ("user-todo-list", user_id)，需 Bearer Token
"""

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, Query

from app.api.envelope import envelope
from app.cache.redis_client import get_kv_store
from app.config import Settings, get_settings
from app.kv.keys import KVKeys
from app.kv.store import Key, KVStore
from app.security.auth import AuthenticatedUser, get_current_user
from app.todo.repository import TodoRepository, parse_filter, parse_page
from app.todo.schemas import CreateTodoRequest, UpdateTodoRequest


async def public_namespace() -> Key:
    return KVKeys.todo_namespace()


async def user_namespace(user: AuthenticatedUser = Depends(get_current_user)) -> Key:
    return KVKeys.todo_namespace(user.id)


def build_todo_router(
    prefix: str,
    namespace_dependency: Callable[..., Awaitable[Key]],
    tags: list[str],
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=tags)

    async def get_repository(
        store: KVStore = Depends(get_kv_store),
        namespace: Key = Depends(namespace_dependency),
        settings: Settings = Depends(get_settings),
    ) -> TodoRepository:
        return TodoRepository(store, namespace, page_size=settings.TODO_PAGE_SIZE)

    @router.get("")
    async def list_todos(
        page: str | None = Query(default=None),
        filter_: str | None = Query(default=None, alias="filter"),
        repo: TodoRepository = Depends(get_repository),
    ):
        """分页列表：page 从 1 开始，filter = all | checked | unchecked"""
        result = await repo.list(page=parse_page(page), filter=parse_filter(filter_))
        return envelope(result)

    @router.get("/count")
    async def count_pages(repo: TodoRepository = Depends(get_repository)):
        """未过滤全集的总页数（旧版接口，新客户端直接读取列表中的 totalPage）"""
        return envelope(await repo.count_pages())

    @router.get("/dashboard")
    async def dashboard(repo: TodoRepository = Depends(get_repository)):
        return envelope(await repo.dashboard())

    @router.post("/create")
    async def create_todo(
        body: CreateTodoRequest,
        repo: TodoRepository = Depends(get_repository),
    ):
        todo = await repo.create(body.content)
        return envelope(todo, "todo creation success")

    @router.patch("/update/{todo_id}")
    async def update_todo(
        todo_id: str,
        body: UpdateTodoRequest,
        repo: TodoRepository = Depends(get_repository),
    ):
        todo = await repo.update(todo_id, body.is_checked)
        return envelope(todo, "todo update success")

    # 必须先于 /delete/{todo_id} 注册，否则 "all" 会被当作 id
    @router.delete("/delete/all")
    async def delete_all_todos(repo: TodoRepository = Depends(get_repository)):
        await repo.delete_all()
        return envelope(None, "todo delete success")

    @router.delete("/delete/{todo_id}")
    async def delete_todo(todo_id: str, repo: TodoRepository = Depends(get_repository)):
        await repo.delete(todo_id)
        return envelope(None, "todo delete success")

    return router


router = build_todo_router("/todo", public_namespace, tags=["Todo"])
user_router = build_todo_router("/auth/todo", user_namespace, tags=["Todo（登录用户）"])
