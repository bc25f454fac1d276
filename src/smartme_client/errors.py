"""Exceptions raised by the smart-me API client.

Transport failures (DNS, connection, TLS) are not wrapped: they surface as
the ``httpx.TransportError`` raised by the underlying HTTP client.
"""


class SmartMeError(Exception):
    """Base class for all errors raised by this library."""


class SmartMeValidationError(SmartMeError, ValueError):
    """Raised for invalid arguments, before any request is sent."""


class APIError(SmartMeError):
    """Raised when the smart-me API answers with a status code >= 400."""

    def __init__(self, status_code: int, reason_phrase: str):
        self.status_code = status_code
        self.reason_phrase = reason_phrase
        super().__init__(
            f"API error: {status_code} {reason_phrase} (status code: {status_code})"
        )


class DecodeError(SmartMeError):
    """Raised when a response body cannot be decoded into the expected type."""


class DeadlineExceededError(SmartMeError, TimeoutError):
    """Raised when a per-call deadline elapsed while the request was in flight."""
