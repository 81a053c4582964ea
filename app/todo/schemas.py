"""
Todo 数据模型

对外 JSON 字段沿用 camelCase（isChecked / totalPage），Python 侧使用 snake_case。
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TodoFilter = Literal["all", "checked", "unchecked"]


class Todo(BaseModel):
    """单个 Todo 条目"""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    content: str
    is_checked: bool = Field(default=False, alias="isChecked")


class TodoPage(BaseModel):
    """分页查询结果"""

    model_config = ConfigDict(populate_by_name=True)

    todos: list[Todo]
    total_page: int = Field(alias="totalPage")


class Dashboard(BaseModel):
    """完成进度统计：progress 为百分比（0-100），空列表时为 0"""

    progress: float
    finished: int
    left: int


# ── 请求模型 ──

class CreateTodoRequest(BaseModel):
    content: str = ""


class UpdateTodoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_checked: bool = Field(alias="isChecked")
