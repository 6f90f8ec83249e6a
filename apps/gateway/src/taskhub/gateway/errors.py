"""错误响应映射 -- core 业务异常 -> HTTP 状态码

错误体统一为 {"error": {"code": ..., "message": ...}}。
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse
from taskhub.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    TaskHubError,
    TaskNotFoundError,
    TaskValidationError,
    VersionConflictError,
)

log = structlog.get_logger()

# 业务异常类型 -> HTTP 状态码
STATUS_BY_ERROR: dict[type[TaskHubError], int] = {
    TaskNotFoundError: 404,
    TaskValidationError: 400,
    AuthorizationError: 403,
    InvalidTransitionError: 409,
    VersionConflictError: 409,
}


class HeaderError(Exception):
    """请求头缺失或非法（传输层输入错误，400）"""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message}},
    )


def status_for(error: TaskHubError) -> int:
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return status_code
    return 400


async def taskhub_error_handler(request: Request, exc: TaskHubError) -> JSONResponse:
    status_code = status_for(exc)
    log.info(
        "request_rejected",
        error_code=exc.code,
        status_code=status_code,
    )
    return error_response(status_code, exc.code, exc.message)


async def header_error_handler(request: Request, exc: HeaderError) -> JSONResponse:
    return error_response(400, exc.code, exc.message)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """请求体/查询参数不符合 schema（如未知 to_state、priority）"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "invalid request")
    if location:
        message = f"{location}: {message}"
    return error_response(400, "VALIDATION_ERROR", message)


def register_error_handlers(app: FastAPI) -> None:
    """注册全局异常处理器"""
    app.add_exception_handler(TaskHubError, taskhub_error_handler)
    app.add_exception_handler(HeaderError, header_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
