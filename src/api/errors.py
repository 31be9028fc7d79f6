"""
Exception handlers - Map domain errors to JSON responses.

Every error leaving the API has the shape {"message": "..."}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.domain.exceptions import (
    AuthError,
    ConflictError,
    DependencyError,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
    NotFoundError,
    ValidationError,
    WorkflowError,
)

logger = logging.getLogger(__name__)

# Most specific first
_STATUS_BY_ERROR: list[tuple[type[WorkflowError], int]] = [
    (InvalidCredentials, status.HTTP_400_BAD_REQUEST),
    (MissingToken, status.HTTP_401_UNAUTHORIZED),
    (InvalidToken, status.HTTP_403_FORBIDDEN),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_400_BAD_REQUEST),
    (DependencyError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(exc: WorkflowError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"message": str(exc)})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn pydantic body/form errors into a 400 with a readable message."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": message})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all JSON error handlers on the application."""
    app.add_exception_handler(WorkflowError, workflow_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
