"""
用户 / 会话数据模型

存入 KV 的结构和接口出入参都在这里定义，对外字段使用 camelCase。
"""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """KV 中的用户记录，password 为 bcrypt 哈希"""

    id: str
    username: str
    password: str


class RefreshSession(BaseModel):
    """KV 中每个用户当前唯一有效的 Refresh Token"""

    token: str
    exp: int


# ── 请求模型 ──

class CredentialsRequest(BaseModel):
    username: str = ""
    password: str = ""


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(default="", alias="accessToken")
    refresh_token: str = Field(default="", alias="refreshToken")


# ── 响应模型 ──

class LoginResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    username: str
    exp: int
    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")


class RefreshResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    exp: int
