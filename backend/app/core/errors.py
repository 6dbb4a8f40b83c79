"""
统一响应格式与异常处理
成功：{code: 0, msg: 'ok', data}；失败：{code: 1, msg}
"""

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

INVALID_BODY_MSG = "invalid request body"


class ApiError(Exception):
    """客户端可见的业务错误，默认 400"""

    def __init__(self, msg: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(msg)
        self.msg = msg
        self.status_code = status_code


def ok(data: Any = None) -> dict:
    return {"code": 0, "msg": "ok", "data": jsonable_encoder(data)}


def fail(msg: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"code": 1, "msg": msg})


def first_validation_message(exc: RequestValidationError) -> str:
    """取第一条校验错误；自定义校验器抛出的 ValueError 原样返回其消息"""
    for err in exc.errors():
        if err.get("type") == "value_error":
            cause = (err.get("ctx") or {}).get("error")
            if cause is not None:
                return str(cause)
        break
    return INVALID_BODY_MSG


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return fail(exc.msg, exc.status_code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # 路由未匹配（包括方法不匹配）统一按 404 返回
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return fail("not found", status.HTTP_404_NOT_FOUND)
    return fail(str(exc.detail), exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return fail(first_validation_message(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    rid = getattr(request.state, "request_id", "-")
    logger.opt(exception=exc).error(f"Server error [{rid}] {request.method} {request.url.path}")
    # 不向客户端暴露内部错误细节
    return fail("server error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
