"""Response envelope shared by every endpoint.

Every JSON body is {"success": bool, "data"?, "error"?, "message"?, "details"?}. The front end
checks `success` first and shows `message` on failure, so never return a bare object.
"""

from typing import Any

from fastapi import status
from fastapi.responses import JSONResponse


def ok(data: Any = None) -> dict[str, Any]:
    """Success envelope (status code comes from the route decorator)."""
    return {"success": True, "data": data}


def error_body(
    error: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "error": error, "message": message}
    if details:
        body["details"] = details
    return body


def error_response(
    status_code: int,
    error: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(error, message, details),
        headers=headers,
    )


ERROR_NAMES = {
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "Not Found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "Method Not Allowed",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
    status.HTTP_503_SERVICE_UNAVAILABLE: "Service Unavailable",
}
