# errors.py
import logging
from typing import Any, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error rendered in the error envelope"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, errors: Optional[List[Any]] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


class PersistenceError(ApiError):
    """A create/update/delete came back without a result"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(status_code: int, message: str, errors: Optional[List[Any]] = None) -> dict:
    body = {"status": "error", "statusCode": status_code, "message": message}
    if errors:
        body["errors"] = jsonable_encoder(errors)
    return body


async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.status_code, exc.message, exc.errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, "Invalid request", exc.errors()),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
