"""
Error types raised by services and their HTTP rendering.

Every error leaves the API as
``{"error": {"code", "message", "request_id"}, "detail": message}`` with the
request id echoed in ``x-request-id``.
"""

from typing import Optional
from uuid import uuid4

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from shegoes.core.logging import get_request_id, log_event


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, LookupError):
    code = "not_found"
    status_code = 404


class PremiumRequiredError(AppError):
    """A free account reached for a premium-only feature; clients show the paywall."""
    code = "premium_required"
    status_code = 402


class ConflictError(AppError):
    code = "conflict"
    status_code = 409


class AuthError(AppError):
    """Identity failure already translated to a user-facing message."""
    code = "auth_error"
    status_code = 401


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or get_request_id() or str(uuid4())


def error_response(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    rid = _request_id(request)
    response = JSONResponse(
        status_code=status_code,
        content={"error": {"code": code, "message": message, "request_id": rid}, "detail": message},
    )
    response.headers["x-request-id"] = rid
    return response


async def app_error_handler(request: Request, exc: AppError):
    log_event(
        "error" if exc.status_code >= 500 else "warning",
        "app.error",
        request_id=_request_id(request),
        event_type=f"http.{exc.status_code}",
        error_code=exc.code,
        extra={"path": request.url.path},
    )
    return error_response(request, exc.status_code, exc.code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else "Invalid request"
    log_event("warning", "request.invalid", request_id=_request_id(request), error_code="validation_error", extra={"field": field})
    return error_response(request, 422, "validation_error", message)


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = "not_found" if exc.status_code == 404 else "http_error"
    log_event("warning", "http.error", request_id=_request_id(request), error_code=code, extra={"status": exc.status_code})
    return error_response(request, exc.status_code, code, str(exc.detail or "HTTP error"))


async def unhandled_exception_handler(request: Request, exc: Exception):
    log_event(
        "exception",
        "unhandled.exception",
        request_id=_request_id(request),
        error_code="internal_error",
        extra={"path": request.url.path, "exception": type(exc).__name__},
    )
    return error_response(request, 500, "internal_error", "Unexpected error")
