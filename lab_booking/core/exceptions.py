from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from lab_booking.core.request_context import request_id_ctx_var


class AppError(HTTPException):
    """Base class for errors raised by services.

    Subclasses pin the HTTP status and a stable machine-readable ``code`` so
    services can fail without knowing which transport renders the failure.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_detail: str = "Internal server error"

    def __init__(self, detail: Any = None, headers: dict[str, str] | None = None) -> None:
        super().__init__(
            status_code=type(self).status_code,
            detail=detail if detail is not None else self.default_detail,
            headers=headers,
        )


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_detail = "Could not validate credentials"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "Not enough permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_detail = "Request conflicts with the current state of the resource"


class StaleVersionError(ConflictError):
    code = "stale_version"
    default_detail = "Booking was modified by another request. Reload and retry."


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    default_detail = "Invalid request"


class RateLimitedError(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "rate_limited"
    default_detail = "Too many requests. Please try again later."


def _error_payload(code: str, message: str, detail):
    return {
        "error": {
            "code": code,
            "message": message,
            "detail": detail,
        },
        "detail": detail,
        "request_id": request_id_ctx_var.get(),
    }


async def http_exception_handler(_: Request, exc: HTTPException) -> JSONResponse:
    code = exc.code if isinstance(exc, AppError) else f"http_{exc.status_code}"
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_payload(
            code=code,
            message=str(exc.detail),
            detail=exc.detail,
        ),
        headers=exc.headers,
    )


async def validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_payload(
            code="validation_error",
            message="Request validation failed",
            detail=jsonable_encoder(exc.errors()),
        ),
    )
