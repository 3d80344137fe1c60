"""Uniform response envelope and the exception handlers that produce it."""

import logging
from typing import Generic, Optional, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from catalog.errors import CatalogError, StorageUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{success, data, message}`` wrapper used by every API response."""
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "ApiResponse[T]":
        return cls(success=True, data=data, message=None)

    @classmethod
    def fail(cls, message: str) -> "ApiResponse[T]":
        return cls(success=False, data=None, message=message or "Request failed")


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ApiResponse.fail(message).model_dump())


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if isinstance(exc, StorageUnavailableError):
        logger.error(f"Storage unavailable while serving {request.url.path}: {exc.detail}")
    else:
        logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("query", "path"))
        message = f"Invalid input: {field} {first.get('msg', '')}".strip()
    else:
        message = "Invalid input"
    logger.warning(f"Request validation failed on {request.url.path}: {message}")
    return error_response(400, message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(exc.status_code, message)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error serving {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
