"""Custom exception handlers for FastAPI application.

This module registers global exception handlers that convert domain exceptions and validation
errors into the response envelope with the right status code:

    ValidationException / RequestValidationError -> 400 (with field-level details)
    AuthenticationError                          -> 401
    EntityNotFoundException / unknown route      -> 404
    ExternalServiceError (incl. DataSourceError) -> 500
    ConfigurationError                           -> 503
    anything else                                -> 500, logged with traceback

Upstream error messages can contain spreadsheet ids or hostnames, so in production the client
only sees a generic message. Development shows the real one.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from discovinyl.api.responses import ERROR_NAMES, error_response
from discovinyl.domain.exceptions import (
    AuthenticationError,
    ConfigurationError,
    EntityNotFoundException,
    ExternalServiceError,
    ValidationException,
)

logger = logging.getLogger(__name__)

GENERIC_SERVER_MESSAGE = "An unexpected error occurred"


# Hey future me - pydantic's errors() can carry raw request bytes in 'input', and 'loc' is a
# tuple like ("body", "artistName"). The front end wants {field, message} pairs, nothing else.
def _field_details(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    details = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        # first element is where the value came from, a query param may itself be named "query"
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        details.append(
            {
                "field": ".".join(loc) or "request",
                "message": str(error.get("msg", "Invalid value")),
            }
        )
    return details


def register_exception_handlers(app: FastAPI, expose_errors: bool = True) -> None:
    """Register envelope-producing exception handlers.

    Args:
        app: FastAPI application instance
        expose_errors: Put upstream/internal error messages into 500 responses
            (development only, pass False in production)
    """

    def _server_message(message: str) -> str:
        return message if expose_errors else GENERIC_SERVER_MESSAGE

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(
        request: Request, exc: ValidationException
    ) -> JSONResponse:
        """Handle domain validation exceptions with 400 Bad Request."""
        logger.warning(
            "Validation error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Validation Error", exc.message, exc.details
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle pydantic request validation errors with 400 Bad Request."""
        details = _field_details(list(exc.errors()))
        logger.warning(
            "Request validation error at %s: %s",
            request.url.path,
            details,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST, "Validation Error", "Invalid input data", details
        )

    @app.exception_handler(EntityNotFoundException)
    async def entity_not_found_exception_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        """Handle entity not found exceptions with 404 Not Found."""
        logger.info(
            "Entity not found at %s: %s %s",
            request.url.path,
            exc.entity_type,
            exc.entity_id,
            extra={"path": request.url.path, "entity_type": exc.entity_type},
        )
        return error_response(
            status.HTTP_404_NOT_FOUND, "Not Found", f"{exc.entity_type} not found"
        )

    @app.exception_handler(AuthenticationError)
    async def authentication_error_handler(
        request: Request, exc: AuthenticationError
    ) -> JSONResponse:
        """Handle authentication errors with 401 Unauthorized."""
        logger.info(
            "Authentication error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        """Handle configuration errors with 503 Service Unavailable."""
        logger.error(
            "Configuration error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path},
        )
        return error_response(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            "Service Unavailable",
            _server_message(exc.message),
        )

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        """Handle backing store / upstream failures with 500."""
        logger.error(
            "External service error at %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            _server_message(exc.message),
        )

    # Yo, this one also catches the router's own 404 for unknown paths ("Not Found" detail) and
    # 405s, so those come back in the envelope too instead of FastAPI's {"detail": ...}.
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions with proper logging."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP error %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        name = ERROR_NAMES.get(exc.status_code, "Error")
        message = str(exc.detail)
        if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
            message = "Route not found"
        return error_response(
            exc.status_code, name, message, headers=getattr(exc, "headers", None)
        )

    # Listen future me, LAST line of defense. Starlette routes this through
    # ServerErrorMiddleware, which re-raises after responding (so uvicorn logs it too) - in
    # tests use TestClient(app, raise_server_exceptions=False) to see the response.
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all: log with traceback, return a generic 500."""
        logger.exception(
            "Unhandled error at %s",
            request.url.path,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error",
            _server_message(str(exc) or GENERIC_SERVER_MESSAGE),
        )
