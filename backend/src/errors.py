"""Typed application errors.

ApiError is raised wherever a request cannot be served and is turned into the
JSON error envelope by the handlers registered in main.py:

    {"error": {"code": "...", "message": "...", "details": ..., "traceId": "..."}}
"""

from typing import Any, Optional


class ApiError(Exception):
    """Error with an HTTP status, a stable machine-readable code and a message.

    Attributes:
        status_code: HTTP status to answer with
        code: snake_case error code clients can branch on
        message: Human readable message
        details: Optional JSON-serialisable payload
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Any] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"ApiError({self.status_code}, {self.code!r}, {self.message!r})"


def error_body(code: str, message: str, trace_id: str, details: Optional[Any] = None) -> dict:
    """Build the error envelope. ``details`` is omitted when empty."""
    error = {"code": code, "message": message, "traceId": trace_id}
    if details is not None:
        error["details"] = details
    return {"error": error}


INTERNAL_ERROR_MESSAGE = "Internal server error."


def internal_error_body(trace_id: str) -> dict:
    """Envelope for unhandled failures; never carries exception text."""
    return error_body("internal_error", INTERNAL_ERROR_MESSAGE, trace_id)
