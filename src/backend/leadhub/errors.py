from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from leadhub.config import settings
from leadhub.utils.logger import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors that map onto the JSON response envelope."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Any]] = None):
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": False, "message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class ValidationError(AppError):
    status_code = 400
    default_message = "Validation failed"


class InvalidCredentials(AppError):
    status_code = 401
    default_message = "Invalid credentials"


class Unauthorized(AppError):
    status_code = 401
    default_message = "Not authorized to access this route"


class Forbidden(AppError):
    status_code = 403
    default_message = "Not authorized to perform this action"


class NotFound(AppError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(AppError):
    status_code = 400
    default_message = "Resource conflict"


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or "request"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    logger.info(
        "%s %s -> %s: %s", request.method, request.url.path, exc.status_code, exc.message
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def error_message(err: Dict[str, Any]) -> str:
    # validators raising ValueError carry the user-facing text in ctx
    if err.get("type") == "value_error" and err.get("ctx", {}).get("error"):
        return str(err["ctx"]["error"])
    return err.get("msg", "Invalid value")


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"field": _field_name(err.get("loc", ())), "message": error_message(err)}
        for err in exc.errors()
    ]
    logger.debug("Request validation failed for %s: %s", request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": "Validation failed", "errors": errors},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code, content={"success": False, "message": message}
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    content: Dict[str, Any] = {"success": False, "message": "Server error"}
    if not settings.is_production:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
