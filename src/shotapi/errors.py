# -*- coding: utf-8 -*-
"""
Error taxonomy for the ShotAPI client.

Every failed call surfaces exactly one ShotAPIError carrying a human message,
a machine code, optional details and, for HTTP failures, the status code.
"""
from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    MISSING_API_KEY = "MISSING_API_KEY"
    MISSING_URL = "MISSING_URL"
    INVALID_URL = "INVALID_URL"
    INVALID_QUALITY = "INVALID_QUALITY"
    INVALID_DELAY = "INVALID_DELAY"
    HTTP_ERROR = "HTTP_ERROR"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    IMAGE_FETCH_ERROR = "IMAGE_FETCH_ERROR"
    MAX_RETRIES = "MAX_RETRIES"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


VALIDATION_CODES = frozenset(
    {
        ErrorCode.MISSING_API_KEY,
        ErrorCode.MISSING_URL,
        ErrorCode.INVALID_URL,
        ErrorCode.INVALID_QUALITY,
        ErrorCode.INVALID_DELAY,
    }
)

# Transport failures worth another attempt
RETRYABLE_CODES = frozenset({ErrorCode.TIMEOUT, ErrorCode.NETWORK_ERROR})


class ShotAPIError(Exception):
    """
    Error raised by the ShotAPI client.

    The code is usually an ErrorCode, but structured API error bodies may carry
    codes the client does not know about, so plain strings are kept as-is.
    Instances are read-only once constructed.
    """

    def __init__(
            self,
            message: str,
            code: ErrorCode | str | None = None,
            details: str | None = None,
            status_code: int | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = _coerce_code(code)
        self.details = details
        self.status_code = status_code
        self._frozen = True

    def __setattr__(self, name, value):
        # Dunder slots (__traceback__, __cause__, __notes__) stay writable for the interpreter
        if getattr(self, "_frozen", False) and not name.startswith("__"):
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    def __reduce__(self):
        # Rebuild through __init__; BaseException.__setstate__ would trip the freeze
        return type(self), (self.message, self.code, self.details, self.status_code)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, code={self.code!r}, "
            f"status_code={self.status_code!r})"
        )

    @property
    def is_client_error(self) -> bool:
        """True for 4xx responses."""
        return self.status_code is not None and 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        """True for 5xx responses."""
        return self.status_code is not None and self.status_code >= 500

    @property
    def retryable(self) -> bool:
        """
        Whether the executor may re-attempt the call that raised this error.

        HTTP failures are decided by status alone (5xx only); the transport
        codes only count when no response was received.
        """
        if self.status_code is not None:
            return self.is_server_error
        return self.code in RETRYABLE_CODES


class ShotAPIValidationError(ShotAPIError):
    """Raised before any network I/O when a request is malformed."""


def _coerce_code(code: ErrorCode | str | None) -> ErrorCode | str | None:
    if code is None or isinstance(code, ErrorCode):
        return code
    try:
        return ErrorCode(code)
    except ValueError:
        return code


def is_retryable(error: BaseException) -> bool:
    """Retry predicate used by the request executor."""
    return isinstance(error, ShotAPIError) and error.retryable
