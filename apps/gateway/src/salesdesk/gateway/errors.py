"""Core 异常 -> HTTP 错误响应映射

错误响应体统一为 {"error": {"code", "message", "retryable", ...}}，
retryable 表示调用方可原样重试（存储暂时不可用）。
"""

from salesdesk.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    SalesdeskError,
    StoreUnavailableError,
    ValidationFailedError,
)
from starlette.responses import JSONResponse


def error_response(error: SalesdeskError) -> JSONResponse:
    """将 core 异常转换为 JSONResponse"""
    body: dict = {"message": error.message, "retryable": error.recoverable}

    if isinstance(error, NotFoundError):
        status_code = 404
        body["code"] = f"{error.entity.upper()}_NOT_FOUND"
    elif isinstance(error, InvalidTransitionError):
        status_code = 409
        body["code"] = "INVALID_TRANSITION"
        body["status"] = error.status
        body["action"] = error.action
    elif isinstance(error, ValidationFailedError):
        status_code = 422
        body["code"] = "VALIDATION_FAILED"
        body["field"] = error.field
    elif isinstance(error, StoreUnavailableError):
        status_code = 503
        body["code"] = "STORE_UNAVAILABLE"
        body["message"] = "Storage temporarily unavailable, please retry"
    else:
        status_code = 500
        body["code"] = "INTERNAL_ERROR"

    return JSONResponse(status_code=status_code, content={"error": body})
