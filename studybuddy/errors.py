"""Exception types raised by the relay and mapped to HTTP responses by the backend."""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """Base class for every error the relay reports to a caller."""

    error_code = "relay_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class FormatError(RelayError):
    """Upload has an unsupported suffix or is otherwise unacceptable."""

    error_code = "unsupported_format"


class ParseError(RelayError):
    """Upload kind is supported but its content could not be decoded."""

    error_code = "parse_failed"


class InputError(RelayError):
    error_code = "invalid_input"


class SessionError(RelayError):
    error_code = "invalid_session"


class InferenceError(RelayError):
    """The provider call failed. ``cause`` holds the underlying exception."""

    error_code = "inference_failed"

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.cause = cause


class InferenceTimeoutError(InferenceError):
    error_code = "inference_timeout"


__all__ = [
    "RelayError",
    "FormatError",
    "ParseError",
    "InputError",
    "SessionError",
    "InferenceError",
    "InferenceTimeoutError",
]
