"""
Todo 仓储：在给定 Key 前缀下做 列表/分页/过滤/统计 以及单条写操作

所有查询都是「前缀全量扫描 + 内存过滤 + 切片」，不维护 checked/unchecked 冗余索引，
因此更新完成状态只需写回同一个 Key。
"""

import math

import structlog

from app.errors import NotFoundError, ValidationError
from app.kv.ids import new_id
from app.kv.store import Key, KVStore
from app.observability.metrics import TODO_MUTATION_TOTAL
from app.todo.schemas import Dashboard, Todo, TodoFilter, TodoPage

log = structlog.get_logger()

DEFAULT_PAGE_SIZE = 6
FILTERS: tuple[TodoFilter, ...] = ("all", "checked", "unchecked")


def parse_page(raw: str | None) -> int:
    """页码从 1 开始；缺省为 1，非数字或小于 1 视为非法"""
    if raw is None or raw == "":
        return 1
    # 只接受 ASCII 数字，排除 "1_0"、" 2 "、全角数字等 int() 能解析的写法
    if not (raw.isascii() and raw.isdigit()):
        raise ValidationError(f"page must be a positive integer, got {raw!r}")
    page = int(raw)
    if page < 1:
        raise ValidationError(f"page must be a positive integer, got {raw!r}")
    return page


def parse_filter(raw: str | None) -> TodoFilter:
    """未识别的取值（含缺省）一律按 all 处理，返回不过滤的分页"""
    if raw not in FILTERS:
        return "all"
    return raw


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size)


class TodoRepository:
    """单个命名空间（公共列表或某个用户）下的 Todo CRUD"""

    def __init__(self, store: KVStore, namespace: Key, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size < 1:
            raise ValueError("page_size 必须 >= 1")
        self.store = store
        self.namespace = namespace
        self.page_size = page_size

    def _key(self, todo_id: str) -> Key:
        return (*self.namespace, todo_id)

    async def _scan(self) -> list[Todo]:
        """按 Key 顺序（即创建顺序）读取命名空间下全部 Todo"""
        entries = await self.store.list(self.namespace)
        return [Todo.model_validate(entry.value) for entry in entries]

    # ── 查询 ──

    async def list(self, page: int = 1, filter: TodoFilter = "all") -> TodoPage:
        """
        分页 + 过滤查询。

        页码越界返回空列表（不报错），totalPage 按过滤后的数量计算。
        """
        if page < 1:
            raise ValidationError(f"page must be a positive integer, got {page}")

        todos = await self._scan()
        if filter == "checked":
            todos = [t for t in todos if t.is_checked]
        elif filter == "unchecked":
            todos = [t for t in todos if not t.is_checked]

        start = (page - 1) * self.page_size
        end = start + self.page_size
        return TodoPage(todos=todos[start:end], total_page=total_pages(len(todos), self.page_size))

    async def count_pages(self) -> int:
        """未过滤全集的总页数（旧版 /todo/count 接口）"""
        todos = await self._scan()
        return total_pages(len(todos), self.page_size)

    async def dashboard(self) -> Dashboard:
        todos = await self._scan()
        total = len(todos)
        finished = sum(1 for t in todos if t.is_checked)
        progress = finished / total * 100 if total else 0.0
        return Dashboard(progress=progress, finished=finished, left=total - finished)

    async def get(self, todo_id: str) -> Todo | None:
        raw = await self.store.get(self._key(todo_id))
        if raw is None:
            return None
        return Todo.model_validate(raw)

    # ── 写操作 ──

    async def create(self, content: str | None) -> Todo:
        if content is None or not content.strip():
            raise ValidationError("content is required")

        todo = Todo(id=new_id(), content=content, is_checked=False)
        await self.store.set(self._key(todo.id), todo.model_dump(by_alias=True))

        TODO_MUTATION_TOTAL.labels(operation="create").inc()
        log.info("Todo 已创建", namespace=self.namespace, todo_id=todo.id)
        return todo

    async def update(self, todo_id: str, is_checked: bool) -> Todo:
        """只改写 isChecked，保留 id 与 content"""
        todo = await self.get(todo_id)
        if todo is None:
            raise NotFoundError("todo not found")

        updated = todo.model_copy(update={"is_checked": is_checked})
        await self.store.set(self._key(todo_id), updated.model_dump(by_alias=True))

        TODO_MUTATION_TOTAL.labels(operation="update").inc()
        log.info("Todo 已更新", namespace=self.namespace, todo_id=todo_id, is_checked=is_checked)
        return updated

    async def delete(self, todo_id: str) -> None:
        """幂等删除：不存在时同样成功"""
        await self.store.delete(self._key(todo_id))
        TODO_MUTATION_TOTAL.labels(operation="delete").inc()
        log.info("Todo 已删除", namespace=self.namespace, todo_id=todo_id)

    async def delete_all(self) -> int:
        """
        删除命名空间下扫描到的全部条目，返回删除数量。

        删除在同一事务中提交；扫描之后才写入的条目不受影响。
        """
        entries = await self.store.list(self.namespace)
        await self.store.delete_many([entry.key for entry in entries])

        TODO_MUTATION_TOTAL.labels(operation="delete_all").inc()
        log.info("Todo 已全部删除", namespace=self.namespace, count=len(entries))
        return len(entries)
