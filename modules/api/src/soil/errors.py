"""
Error taxonomy for the API.

Every error carries the HTTP status it maps to and a public message that is
safe to return to the caller. Store and runtime failures are logged in full
server-side and only their fixed message reaches the client.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo import errors as mongo_errors

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base app error."""

    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request."


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Invalid email or password."


class NotFoundError(AppError):
    status_code = 404
    default_message = "Resource not found."


class ConflictError(AppError):
    # Clients expect duplicates to be reported as a plain bad request.
    status_code = 400
    default_message = "Resource already exists."


class StorageUnavailableError(AppError):
    status_code = 503
    default_message = "The data store is currently unavailable."


class StorageTimeoutError(AppError):
    status_code = 504
    default_message = "The data store did not respond in time."


class UnknownError(AppError):
    pass


def classify_storage_error(exc: mongo_errors.PyMongoError) -> AppError:
    """Map a driver exception onto the public taxonomy."""
    if isinstance(exc, mongo_errors.DuplicateKeyError):
        return ConflictError()
    if isinstance(exc, (mongo_errors.ExecutionTimeout, mongo_errors.NetworkTimeout, mongo_errors.WTimeoutError)):
        return StorageTimeoutError()
    if isinstance(exc, mongo_errors.ConnectionFailure):
        return StorageUnavailableError()
    return UnknownError()


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(status_code=error.status_code, content={"message": error.message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return ValidationError.default_message
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "is invalid")
    if first.get("type") == "missing" and location:
        return f"{location} is required"
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return _error_response(ValidationError(_describe_validation_error(exc)))

    @app.exception_handler(mongo_errors.PyMongoError)
    async def handle_storage_error(request: Request, exc: mongo_errors.PyMongoError):
        error = classify_storage_error(exc)
        logger.exception(f"Store error on {request.method} {request.url.path}", exc_info=exc)
        return _error_response(error)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return _error_response(UnknownError())
