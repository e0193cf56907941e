"""Error taxonomy for the Vector CLI.

Every failure the CLI can report is one of a closed set of
:class:`VectorError` subclasses.  Each carries a human-readable message and
a fixed process exit code, so scripts can branch on ``$?`` without parsing
output.
"""

from __future__ import annotations

from pydantic import ValidationError as _ModelValidationError

from vector_common.models import ErrorEnvelope

EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_AUTH_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_NOT_FOUND = 4
EXIT_NETWORK_ERROR = 5


class VectorError(Exception):
    """Base exception for all Vector operations."""

    exit_code: int = EXIT_GENERAL_ERROR
    prefix: str = ""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        if self.prefix:
            return f"{self.prefix}: {self.message}"
        return self.message


class UnauthorizedError(VectorError):
    """HTTP 401, or no API token available."""

    exit_code = EXIT_AUTH_ERROR
    prefix = "Authentication failed"


class ForbiddenError(VectorError):
    """HTTP 403."""

    exit_code = EXIT_AUTH_ERROR
    prefix = "Access denied"


class NotFoundError(VectorError):
    """HTTP 404."""

    exit_code = EXIT_NOT_FOUND
    prefix = "Not found"


class ValidationError(VectorError):
    """HTTP 422: the API rejected the request payload."""

    exit_code = EXIT_VALIDATION_ERROR
    prefix = "Validation failed"


class ServerError(VectorError):
    """HTTP 5xx."""

    exit_code = EXIT_NETWORK_ERROR
    prefix = "Server error"


class NetworkError(VectorError):
    """The request never produced a response (DNS, TCP, TLS, timeout)."""

    exit_code = EXIT_NETWORK_ERROR
    prefix = "Network error"


class ConfigError(VectorError):
    """Local misconfiguration: bad token, unreadable config or credentials."""

    exit_code = EXIT_GENERAL_ERROR
    prefix = "Configuration error"


class OtherError(VectorError):
    """Any other failure, including undecodable success responses."""

    exit_code = EXIT_GENERAL_ERROR


def parse_error_message(body: str) -> str:
    """Extract a human message from an error response body.

    Field errors (``{"errors": {"field": ["msg", ...]}}``) win and are joined
    as ``field: msg`` pairs separated by ``"; "`` in document order.  Then a
    top-level ``message``.  Anything else, including non-JSON bodies, is
    returned unchanged.
    """
    try:
        envelope = ErrorEnvelope.model_validate_json(body)
    except _ModelValidationError:
        return body

    if envelope.errors:
        pairs = [
            f"{field}: {msg}"
            for field, messages in envelope.errors.items()
            for msg in messages
        ]
        if pairs:
            return "; ".join(pairs)
    if envelope.message is not None:
        return envelope.message
    return body


_STATUS_ERRORS: dict[int, type[VectorError]] = {
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    422: ValidationError,
}


def error_from_response(status: int, body: str) -> VectorError:
    """Classify a non-2xx response into exactly one :class:`VectorError`."""
    message = parse_error_message(body)
    if status in _STATUS_ERRORS:
        return _STATUS_ERRORS[status](message)
    if 500 <= status <= 599:
        return ServerError(message)
    return OtherError(message)
