"""API error type and the handlers that render every failure as an envelope"""
import logging
from typing import Any, Optional
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(status_code=status_code, detail=message)
        self.message = message
        self.code = code
        self.details = details


def error_body(message: str, code: Optional[str] = None, details: Any = None) -> dict:
    body = {"success": False, "error": message}
    if code:
        body["code"] = code
    if details is not None:
        body["details"] = details
    return body


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path", "header")]
    return ".".join(parts) or "request"


async def api_error_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, APIError):
        body = error_body(exc.message, exc.code, exc.details)
    else:
        body = error_body(str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = [
        {"field": _field_name(err.get("loc", ())), "message": err.get("msg", "Invalid value")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("Validation failed", "VALIDATION_ERROR", details),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
