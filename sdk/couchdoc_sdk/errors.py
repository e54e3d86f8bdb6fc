"""
Error types for the couchdoc SDK.

This module defines all exception types raised by the SDK:
- CouchDocError: Base exception
- RequestError: Request could not be built (bad method or URL)
- ConnectionError: Server could not be reached
- ResponseReadError: Response body could not be read
- ServerError: Server answered with a non-2xx status
- EncodingError: Request body could not be serialized
- DecodingError: Response body could not be parsed
- ProtocolError: 2xx response with a false acknowledgement
- ValidationError: Caller misuse, never sent over the wire

Invariants:
    - All errors inherit from CouchDocError
    - Errors include context for debugging
    - Underlying exceptions are chained, never dropped
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

# Reasons CouchDB gives when the target database is missing (2.x, 1.x)
NO_DATABASE_REASONS = frozenset({"Database does not exist.", "no_db_file"})

WRONG_DOCTYPE_REASON = "wrong_doctype"


class CouchDocError(Exception):
    """Base exception for all couchdoc SDK errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "COUCHDOC_ERROR"
        self.details = details or {}


class RequestError(CouchDocError):
    """Request could not be constructed.

    Raised when:
    - HTTP method is malformed
    - URL cannot be parsed or uses an unsupported scheme
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="REQUEST_ERROR",
            details={"method": method, "url": url},
        )
        self.method = method
        self.url = url


class ConnectionError(CouchDocError):
    """Failed to reach the CouchDB server.

    Raised when:
    - Connection is refused
    - Connection times out
    - Connection is reset before a response arrives
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="CONNECTION_ERROR",
            details={"address": address},
        )
        self.address = address


class ResponseReadError(CouchDocError):
    """Response headers arrived but the body could not be read.

    Usually the server hung up mid-response.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(
            message,
            code="RESPONSE_READ_ERROR",
            details={"status_code": status_code},
        )
        self.status_code = status_code


class ServerError(CouchDocError):
    """CouchDB answered with a non-2xx status.

    CouchDB error bodies look like ``{"error": "not_found", "reason":
    "Database does not exist."}``. Both fields are extracted when present
    so callers can branch on them.

    Attributes:
        status_code: HTTP status code
        body: Raw response body
        error: CouchDB error name (e.g. "not_found", "file_exists")
        reason: CouchDB reason string
    """

    def __init__(
        self,
        status_code: int,
        body: bytes = b"",
        error: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        if error is None and reason is None:
            error, reason = _parse_error_body(body)
        self.status_code = status_code
        self.body = body
        self.error = error or ""
        self.reason = reason or ""

        msg = f"CouchDB error {status_code}"
        if self.error:
            msg += f": {self.error}"
        if self.reason:
            msg += f" ({self.reason})"

        super().__init__(
            msg,
            code="SERVER_ERROR",
            details={
                "status_code": status_code,
                "error": self.error,
                "reason": self.reason,
            },
        )

    @property
    def is_no_database(self) -> bool:
        """Whether the target database does not exist."""
        return self.status_code == 404 and self.reason in NO_DATABASE_REASONS

    @property
    def is_wrong_doctype(self) -> bool:
        """Whether the doctype asked for has no database."""
        return self.reason == WRONG_DOCTYPE_REASON

    @property
    def is_file_exists(self) -> bool:
        """Whether a database creation hit an existing database."""
        return self.status_code == 412 and self.error == "file_exists"

    def with_reason(self, reason: str) -> ServerError:
        """Return a copy of this error carrying a different reason."""
        return ServerError(
            self.status_code,
            self.body,
            error=self.error,
            reason=reason,
        )


class EncodingError(CouchDocError):
    """Request body could not be serialized to JSON."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="ENCODING_ERROR")


class DecodingError(CouchDocError):
    """Response body could not be parsed into the expected shape.

    Attributes:
        body: Raw response body
    """

    def __init__(self, message: str, body: bytes = b"") -> None:
        super().__init__(
            message,
            code="DECODING_ERROR",
            details={"body": body.decode("utf-8", errors="replace")},
        )
        self.body = body


class ProtocolError(CouchDocError):
    """Well-formed 2xx response whose ``ok`` flag is false.

    Raised when:
    - CouchDB acknowledges a write with ``ok: false``
    """

    def __init__(
        self,
        message: str,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message,
            code="PROTOCOL_ERROR",
            details={"response": response or {}},
        )
        self.response = response or {}


class ValidationError(CouchDocError):
    """Caller misuse detected locally.

    Raised when:
    - Value passed as a document does not implement Doc
    - Creating a document that already has an id
    - Document has no doctype
    """

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            code="VALIDATION_ERROR",
            details={"field": field_name},
        )
        self.field_name = field_name


def _parse_error_body(body: bytes) -> tuple[Optional[str], Optional[str]]:
    try:
        data = json.loads(body)
    except ValueError:
        return None, None
    if not isinstance(data, dict):
        return None, None
    error = data.get("error")
    reason = data.get("reason")
    return (
        error if isinstance(error, str) else None,
        reason if isinstance(reason, str) else None,
    )
