"""
统一响应信封 {code, message, data} + 异常处理器注册

成功与失败都返回同一结构，HTTP 状态码与 code 保持一致。
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import AppError
from app.observability.metrics import ERROR_TOTAL

log = structlog.get_logger()


def envelope(data: Any = None, message: str = "success", code: int = 200) -> dict:
    return {"code": code, "message": message, "data": jsonable_encoder(data, by_alias=True)}


def _error_response(code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=code, content=envelope(None, message, code))


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    ERROR_TOTAL.labels(error_type=type(exc).__name__).inc()
    log.warning(
        "业务错误",
        error_type=type(exc).__name__,
        error=exc.message,
        path=request.url.path,
    )
    return _error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """请求体 / 参数类型错误统一按 400 返回，message 取第一条错误"""
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
    else:
        message = "invalid request"

    ERROR_TOTAL.labels(error_type="RequestValidationError").inc()
    log.warning("请求参数校验失败", error=message, path=request.url.path)
    return _error_response(400, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
