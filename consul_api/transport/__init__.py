"""
Transport layer.

Moves requests to the agent; API clients never touch aiohttp directly.
"""

from .base import Transport, TransportResponse
from .http import HttpTransport, build_ssl_context
from .resilience import RetryConfig, retry_with_backoff

__all__ = [
    "Transport",
    "TransportResponse",
    "HttpTransport",
    "build_ssl_context",
    "RetryConfig",
    "retry_with_backoff",
]
