import pytest

from app.errors import NotFoundError, ValidationError
from app.kv.keys import KVKeys
from app.kv.store import KVStore
from app.todo.repository import TodoRepository, parse_filter, parse_page


@pytest.fixture()
def repo(store: KVStore) -> TodoRepository:
    return TodoRepository(store, KVKeys.todo_namespace())


async def _seed(repo: TodoRepository, n: int, checked_every: int = 0) -> list[str]:
    ids = []
    for i in range(n):
        todo = await repo.create(f"todo {i}")
        if checked_every and i % checked_every == 0:
            await repo.update(todo.id, True)
        ids.append(todo.id)
    return ids


# ── 参数解析 ──

@pytest.mark.parametrize("raw, expected", [(None, 1), ("", 1), ("1", 1), ("7", 7)])
def test_parse_page(raw, expected):
    assert parse_page(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "0", "-2", "1.5", "1_0", " 2 ", "+3", "\uff12"])
def test_parse_page_rejects_invalid(raw):
    with pytest.raises(ValidationError):
        parse_page(raw)


@pytest.mark.parametrize(
    "raw, expected",
    [(None, "all"), ("", "all"), ("checked", "checked"), ("unchecked", "unchecked"), ("done", "all"), ("ALL", "all")],
)
def test_parse_filter(raw, expected):
    assert parse_filter(raw) == expected


# ── 创建 / 更新 / 删除 ──

async def test_create_defaults_to_unchecked_and_is_retrievable(repo: TodoRepository):
    todo = await repo.create("买牛奶")

    assert todo.is_checked is False
    assert await repo.get(todo.id) == todo
    page = await repo.list()
    assert [t.content for t in page.todos] == ["买牛奶"]


@pytest.mark.parametrize("content", ["", "   ", None])
async def test_create_rejects_empty_content(repo: TodoRepository, content):
    with pytest.raises(ValidationError):
        await repo.create(content)
    assert (await repo.list()).todos == []


async def test_update_preserves_id_and_content(repo: TodoRepository):
    todo = await repo.create("A")

    updated = await repo.update(todo.id, True)

    assert updated.id == todo.id
    assert updated.content == "A"
    assert (await repo.get(todo.id)).is_checked is True


async def test_update_missing_id_raises_and_leaves_store_unchanged(repo: TodoRepository, store: KVStore):
    await repo.create("A")
    before = await store.list(("todo-list",))

    with pytest.raises(NotFoundError):
        await repo.update("missing", True)

    assert await store.list(("todo-list",)) == before


async def test_delete_missing_id_is_noop(repo: TodoRepository):
    await repo.create("A")
    await repo.delete("missing")
    assert len((await repo.list()).todos) == 1


async def test_delete_all_only_touches_namespace(repo: TodoRepository, store: KVStore):
    await _seed(repo, 8)
    other = TodoRepository(store, KVKeys.todo_namespace("user-1"))
    await other.create("keep me")

    assert await repo.delete_all() == 8

    assert (await repo.list()).todos == []
    assert [t.content for t in (await other.list()).todos] == ["keep me"]


# ── 分页 / 过滤 ──

async def test_pages_hold_at_most_six_and_reconstruct_full_set(repo: TodoRepository):
    ids = await _seed(repo, 14)

    first = await repo.list(page=1)
    assert first.total_page == 3

    collected = []
    for page in range(1, first.total_page + 1):
        result = await repo.list(page=page)
        assert len(result.todos) <= 6
        collected.extend(t.id for t in result.todos)

    assert collected == ids


async def test_page_past_end_is_empty_with_total(repo: TodoRepository):
    await _seed(repo, 7)

    result = await repo.list(page=5)

    assert result.todos == []
    assert result.total_page == 2


async def test_filter_then_paginate(repo: TodoRepository):
    # 0, 3, 6, 9, 12 为已完成
    ids = await _seed(repo, 13, checked_every=3)

    checked = await repo.list(filter="checked")
    unchecked_p2 = await repo.list(page=2, filter="unchecked")

    assert [t.id for t in checked.todos] == ids[0::3]
    assert checked.total_page == 1
    unchecked_ids = [i for n, i in enumerate(ids) if n % 3]
    assert [t.id for t in unchecked_p2.todos] == unchecked_ids[6:12]
    assert unchecked_p2.total_page == 2


async def test_list_rejects_non_positive_page(repo: TodoRepository):
    with pytest.raises(ValidationError):
        await repo.list(page=0)


async def test_custom_page_size(store: KVStore):
    repo = TodoRepository(store, KVKeys.todo_namespace(), page_size=2)
    await _seed(repo, 5)
    assert await repo.count_pages() == 3


# ── 统计 ──

async def test_count_pages_ignores_filter(repo: TodoRepository):
    assert await repo.count_pages() == 0
    await _seed(repo, 13, checked_every=2)
    assert await repo.count_pages() == 3


async def test_dashboard_empty_is_zero(repo: TodoRepository):
    dashboard = await repo.dashboard()
    assert dashboard.progress == 0.0
    assert dashboard.finished == 0
    assert dashboard.left == 0


async def test_dashboard_counts(repo: TodoRepository):
    a = await repo.create("A")
    b = await repo.create("B")
    await repo.create("C")
    await repo.update(b.id, True)

    dashboard = await repo.dashboard()

    assert dashboard.finished == 1
    assert dashboard.left == 2
    assert dashboard.progress == pytest.approx(33.333, abs=0.01)
    assert (await repo.list(filter="checked")).todos[0].id == b.id
    assert a.id != b.id
