"""
AI Service Exceptions

This module contains exception classes for the translation and chat requests.
Separated to avoid circular imports between service.py, chat.py and providers.py.
"""


class TranslationError(Exception):
    """Translation or chat request error with optional code and details."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}


class MissingApiKeyError(TranslationError):
    """No API key is configured."""

    def __init__(self):
        super().__init__(
            "Claude API key is not set. Please set it in the extension settings.",
            code="missing_api_key",
        )


class TranslationTimeoutError(TranslationError):
    """The hover translation did not finish in time."""

    def __init__(self, timeout: float):
        super().__init__(
            f"Translation timed out after {timeout:g}s",
            code="timeout",
            details={"timeout": timeout},
        )
        self.timeout = timeout


class ApiError(TranslationError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, status: int, body: str = ""):
        super().__init__(
            f"API request failed with status {status}",
            code="api_error",
            details={"status": status, "body": body},
        )
        self.status = status
        self.body = body


class InvalidResponseShapeError(TranslationError):
    """The decoded response body is not a Messages API reply."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid response data from Claude API ({reason})",
            code="invalid_response",
            details={"reason": reason},
        )
        self.reason = reason


class NetworkError(TranslationError):
    """Transport-level failure: DNS, connection, transport timeout."""

    def __init__(self, message: str):
        super().__init__(message, code="network_error")
