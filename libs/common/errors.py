"""Application error type and the JSON error envelope.

Every error leaves the API as::

    {"success": false, "message": "...", "code": "NOT_FOUND"}

Services raise ``AppError`` (or plain ``HTTPException``) and the handlers
registered by ``register_exception_handlers`` render the envelope.
"""

from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from libs.common.logging import get_logger, get_request_id

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------
VALIDATION = "VALIDATION"
NOT_FOUND = "NOT_FOUND"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
CONFLICT = "CONFLICT"
INVALID_TRANSITION = "INVALID_TRANSITION"
INVALID_AFTERSALE_TRANSITION = "INVALID_AFTERSALE_TRANSITION"
INVALID_STATE_FOR_CANCEL = "INVALID_STATE_FOR_CANCEL"
INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
EMPTY_CART = "EMPTY_CART"
NO_SELECTION = "NO_SELECTION"
MULTI_FARMER_CART = "MULTI_FARMER_CART"
PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
AFTER_SALE_NOT_ELIGIBLE = "AFTER_SALE_NOT_ELIGIBLE"
AFTER_SALE_NOT_FOUND = "AFTER_SALE_NOT_FOUND"
LOGISTICS_NOT_SET = "LOGISTICS_NOT_SET"
ORDER_CANCELLED = "ORDER_CANCELLED"
RATE_LIMITED = "RATE_LIMITED"
STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
STORAGE_FAILED = "STORAGE_FAILED"
INTERNAL = "INTERNAL"

_DEFAULT_CODES = {
    status.HTTP_400_BAD_REQUEST: VALIDATION,
    status.HTTP_401_UNAUTHORIZED: UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: FORBIDDEN,
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: VALIDATION,
    status.HTTP_409_CONFLICT: CONFLICT,
    status.HTTP_429_TOO_MANY_REQUESTS: RATE_LIMITED,
}


class AppError(HTTPException):
    """HTTPException carrying a stable machine-readable ``code``."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code

    @property
    def message(self) -> str:
        return self.detail


def bad_request(message: str, code: str = VALIDATION) -> AppError:
    return AppError(status.HTTP_400_BAD_REQUEST, code, message)


def not_found(message: str, code: str = NOT_FOUND) -> AppError:
    return AppError(status.HTTP_404_NOT_FOUND, code, message)


def unauthorized(message: str = "未登录或登录已过期") -> AppError:
    return AppError(
        status.HTTP_401_UNAUTHORIZED,
        UNAUTHORIZED,
        message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def forbidden(message: str = "无权执行该操作") -> AppError:
    return AppError(status.HTTP_403_FORBIDDEN, FORBIDDEN, message)


def conflict(message: str) -> AppError:
    return AppError(status.HTTP_409_CONFLICT, CONFLICT, message)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def error_body(message: str, code: str, details: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message, "code": code}
    if details is not None:
        body["details"] = details
    return body


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    code = getattr(exc, "code", None) or _DEFAULT_CODES.get(exc.status_code, INTERNAL)
    message = exc.detail if isinstance(exc.detail, str) else "请求失败"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(error_body("请求参数不合法", VALIDATION, details)),
    )


async def rate_limit_exception_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body(f"请求过于频繁（{exc.detail}），请稍后再试", RATE_LIMITED),
        headers={"Retry-After": "60"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    request_id = get_request_id()
    logger.exception(
        "Unhandled error on %s %s [request_id=%s]",
        request.method,
        request.url.path,
        request_id or "-",
    )
    headers = {"X-Request-ID": request_id} if request_id else None
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("服务器内部错误", INTERNAL),
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-producing handlers on ``app``."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
