"""Client exception classes.

API-level failures (unknown station, bad query) are returned as
``ErrorResponse`` values and never raised. Only the faults below propagate.
"""


class WeatheredError(Exception):
    """Base class for all faults raised by the weathered client."""


class ConfigError(WeatheredError):
    """Raised when settings or client options are invalid or incomplete."""


class InvalidQueryError(WeatheredError, ValueError):
    """Raised when query input cannot form a request (blank id, bad limit)."""


class TransportError(WeatheredError):
    """Raised when the request could not be sent or no response was received."""

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class ResponseDecodeError(WeatheredError):
    """Raised when a success response body is not JSON or has the wrong shape."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
