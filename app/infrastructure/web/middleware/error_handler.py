"""
Global error handler middleware for the FastAPI application.
Catches and formats all exceptions consistently.
"""

import logging
import traceback
from typing import Any, Dict
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from fastapi import status

from app.config import settings
from app.domain.models.base import (
    DomainException,
    ValidationError,
    NotFoundError,
    ForbiddenError,
    ConflictError,
)

logger = logging.getLogger(__name__)

# Most specific first; DomainException is the catch-all for the taxonomy.
DOMAIN_STATUS = (
    (NotFoundError, "Not Found", status.HTTP_404_NOT_FOUND),
    (ForbiddenError, "Forbidden", status.HTTP_403_FORBIDDEN),
    (ConflictError, "Conflict", status.HTTP_409_CONFLICT),
    (ValidationError, "Validation Error", 422),
    (DomainException, "Bad Request", status.HTTP_400_BAD_REQUEST),
)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    async def dispatch(self, request: Request, call_next):
        """
        Process the request and handle any exceptions.
        """
        try:
            response = await call_next(request)
            return response
        except Exception as exc:
            return await self.handle_exception(request, exc)

    async def handle_exception(self, request: Request, exc: Exception) -> JSONResponse:
        """
        Handle different types of exceptions and return appropriate responses.
        """
        error_response = self.format_error_response(exc)

        if isinstance(exc, DomainException):
            logger.info(
                f"{request.method} {request.url.path} -> "
                f"{error_response['status_code']} {exc.code}: {exc.message}"
            )
        else:
            logger.error(
                f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
                exc_info=True,
                extra={
                    "request_path": request.url.path,
                    "request_method": request.method,
                    "client_host": request.client.host if request.client else None
                }
            )
            if settings.debug:
                error_response["debug"] = {
                    "exception_type": type(exc).__name__,
                    "traceback": traceback.format_exc().split("\n")
                }

        return JSONResponse(
            status_code=error_response["status_code"],
            content=error_response
        )

    def format_error_response(self, exc: Exception) -> Dict[str, Any]:
        """
        Format exception into a consistent error response structure.
        """
        for exc_type, error, status_code in DOMAIN_STATUS:
            if isinstance(exc, exc_type):
                response = {
                    "error": error,
                    "message": exc.message,
                    "code": exc.code,
                    "status_code": status_code,
                }
                if isinstance(exc, ValidationError) and exc.field:
                    response["field"] = exc.field
                if isinstance(exc, ConflictError) and exc.fields:
                    response["fields"] = exc.fields
                return response

        return {
            "error": "Internal Server Error",
            "message": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
        }
