"""Error taxonomy and the JSON error responses it maps to.

Every failure leaves the API as {"error": <title>, "message": <text>},
plus "details" for field-level validation problems. Services raise
AppError subclasses; the handlers registered here do the HTTP mapping so
routes stay free of try/except boilerplate.
"""

from typing import Any, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

logger = structlog.get_logger()


class AppError(Exception):
    """Base exception for estatehub. Carries its own HTTP mapping."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(
        self,
        message: str,
        *,
        error: Optional[str] = None,
        details: Optional[list[Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.error, "message": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(AppError):
    """Malformed or out-of-range input."""
    status_code = 400
    error = "Validation error"


class NoOpUpdate(ValidationFailed):
    """A partial update that supplied no fields."""
    error = "No updates provided"


class InvalidDate(ValidationFailed):
    """Appointment date earlier than today."""
    error = "Invalid date"


class Unauthenticated(AppError):
    """No credential supplied."""
    status_code = 401
    error = "Unauthorized"


class Forbidden(AppError):
    """Bad credential, wrong role, or failed ownership check."""
    status_code = 403
    error = "Forbidden"


class NotFound(AppError):
    """Resource, or its parent in the ownership chain, is absent."""
    status_code = 404
    error = "Not Found"


class Conflict(AppError):
    """Duplicate unique value (e.g. registration email)."""
    status_code = 409
    error = "Conflict"


def register_exception_handlers(app: FastAPI, *, expose_internal_errors: bool) -> None:
    """Install the JSON error handlers on an app."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        # "input" can echo passwords back; "ctx" may hold exception objects
        details = jsonable_encoder([
            {k: v for k, v in err.items() if k not in ("ctx", "input", "url")}
            for err in exc.errors()
        ])
        first = details[0] if details else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "message": message, "details": details},
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405) and exc.detail in ("Not Found", "Method Not Allowed"):
            return JSONResponse(
                status_code=404,
                content={
                    "error": "Not Found",
                    "message": f"Route {request.method} {request.url.path} not found",
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Error", "message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(
            "request.unhandled_error",
            method=request.method,
            path=request.url.path,
        )
        message = str(exc) if expose_internal_errors else "Something went wrong"
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": message},
        )
