"""
应用级异常：业务层抛出，由 app.api.envelope 中注册的处理器统一转成响应信封
"""


class AppError(Exception):
    """业务异常基类，status_code 即响应信封中的 code"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """必填字段为空 / 参数非法"""

    status_code = 400


class ConflictError(AppError):
    """唯一性冲突（用户名已存在）"""

    status_code = 400


class NotFoundError(AppError):
    """Todo / 用户 / Refresh Token 不存在"""

    status_code = 404


class AuthError(AppError):
    """密码错误、Bearer Token 无效、Refresh Token 不匹配"""

    status_code = 401


class ExpiredError(AppError):
    """Refresh Token 已过期"""

    status_code = 401
