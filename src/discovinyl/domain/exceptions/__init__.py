"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so handlers can put it straight into the
    # response envelope without parsing str(exception). DON'T raise this directly - always use a
    # specific subclass so the exception handlers can pick the right status code.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """Raised when an entity is not found."""

    # Yo, "not found" is a NORMAL outcome for catalog lookups (ids are derived, the user may have
    # renamed the album since). The handler maps this to 404 and logs at INFO, not ERROR.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationException(DomainException):
    """Raised when input violates catalog rules.

    Carries optional field-level details, e.g.
    ``[{"field": "artistName", "message": "is required"}]``.

    HTTP Status: 400
    """

    def __init__(
        self, message: str, details: list[dict[str, str]] | None = None
    ) -> None:
        super().__init__(message)
        self.details = details or []


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised when required configuration is missing or invalid.

    HTTP Status: 503 (Service Unavailable)

    Example:
        raise ConfigurationError("Missing required environment variables: JWT_SECRET")
    """

    pass


class AuthenticationError(DomainException):
    """User is not authenticated or token expired.

    The message is deliberately generic ("Invalid or expired token") so callers
    can't probe why a credential was rejected.

    HTTP Status: 401
    """

    pass


class ExternalServiceError(DomainException):
    """External service (Sheets, MusicBrainz, image host) returned an error.

    HTTP Status: 500 (generic message in production)
    """

    pass


class DataSourceError(ExternalServiceError):
    """No spreadsheet location candidate produced data.

    Raised after every candidate range returned nothing or failed.

    HTTP Status: 500
    """

    def __init__(
        self,
        message: str = "No data found in any spreadsheet range",
        attempted: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.attempted = attempted or []


__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "DataSourceError",
    "DomainException",
    "EntityNotFoundException",
    "ExternalServiceError",
    "ValidationException",
]
