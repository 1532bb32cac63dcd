"""Exception handlers: every failure is returned as {"errors": [{"msg": ...}]}."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.services.store import StoreError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"
_LOCATIONS = ("body", "query", "path", "header", "cookie")
_VALUE_ERROR_PREFIX = "Value error, "


def field_error(msg: str, path: str | None = None, location: str = "body") -> dict[str, Any]:
    """Build one field-level error item."""
    return {"type": "field", "msg": msg, "path": path, "location": location}


def _from_pydantic(err: dict[str, Any]) -> dict[str, Any]:
    loc = [str(part) for part in err.get("loc", ())]
    location = loc[0] if loc and loc[0] in _LOCATIONS else "body"
    path = ".".join(part for part in loc if part not in _LOCATIONS) or None
    msg = str(err.get("msg") or "Invalid value")
    if msg.startswith(_VALUE_ERROR_PREFIX):
        msg = msg[len(_VALUE_ERROR_PREFIX):]
    return field_error(msg, path, location)


def error_body(detail: Any) -> dict[str, Any]:
    """Normalize an HTTPException detail (string or list of items) to the envelope."""
    if isinstance(detail, list):
        return {"errors": detail}
    return {"errors": [{"msg": str(detail)}]}


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"errors": [_from_pydantic(err) for err in exc.errors()]},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


def _internal_error_response(exc: Exception) -> JSONResponse:
    content: dict[str, Any] = {"errors": [{"msg": INTERNAL_ERROR_MESSAGE}]}
    if get_settings().DEBUG:
        cause = exc.__cause__ or exc
        content["detail"] = f"{type(cause).__name__}: {cause!s}"
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)


async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    # Traceback already logged by store_operation.
    logger.error(
        "Request failed on store error",
        extra={"method": request.method, "url_path": request.url.path},
    )
    return _internal_error_response(exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error",
        extra={"method": request.method, "url_path": request.url.path},
    )
    return _internal_error_response(exc)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
