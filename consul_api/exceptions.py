"""
Custom exceptions for the Consul API client.

API clients return these as values inside QueryResult / WriteResult
instead of raising them; ``unwrap()`` raises the carried error.
"""

from __future__ import annotations

# Maximum number of body characters kept in error messages
BODY_SNIPPET_LENGTH = 512


class ConsulClientError(Exception):
    """Base exception for all Consul client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(ConsulClientError):
    """Raised when a caller passes a malformed key, prefix or pair.

    Detected before any network activity; never worth retrying.
    """

    def __init__(self, argument: str, reason: str, value: object = None):
        details: dict = {"argument": argument, "reason": reason}
        if value is not None:
            details["value"] = repr(value)
        super().__init__(f"Invalid argument {argument}: {reason}", details)
        self.argument = argument
        self.reason = reason
        self.value = value


class TransportError(ConsulClientError):
    """Raised when the transport could not complete a request."""

    def __init__(self, endpoint: str, cause: Exception | None = None):
        details = {"endpoint": endpoint}
        if cause:
            details["cause"] = str(cause)
        message = f"Request to {endpoint} failed"
        if cause:
            message += f": {cause}"
        super().__init__(message, details)
        self.endpoint = endpoint
        self.cause = cause


class RequestFailedError(ConsulClientError):
    """Raised when the server answers with an unexpected status code."""

    def __init__(
        self,
        status_code: int,
        body: str = "",
        method: str | None = None,
        path: str | None = None,
    ):
        details: dict = {"status_code": status_code, "body": body[:BODY_SNIPPET_LENGTH]}
        if method:
            details["method"] = method
        if path:
            details["path"] = path
        super().__init__(f"{status_code}: {body[:BODY_SNIPPET_LENGTH]}", details)
        self.status_code = status_code
        self.body = body
        self.method = method
        self.path = path


class DecodeError(ConsulClientError):
    """Raised when a response body does not have the expected JSON shape."""

    def __init__(self, reason: str, body: bytes | str | None = None):
        details: dict = {"reason": reason}
        if body is not None:
            text = body.decode("utf-8", "replace") if isinstance(body, bytes) else body
            details["body"] = text[:BODY_SNIPPET_LENGTH]
        super().__init__(f"Unable to decode response: {reason}", details)
        self.reason = reason
        self.body = body


class ConfigurationError(ConsulClientError):
    """Raised when client configuration is invalid."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid configuration for {field}: {reason}",
            {"field": field, "reason": reason},
        )
        self.field = field
        self.reason = reason
