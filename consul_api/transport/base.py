"""
Abstract transport contract.

API clients build requests and interpret responses; a transport only moves
bytes. Implementations own connection handling, timeouts and retries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class TransportResponse:
    """Raw HTTP answer.

    Attributes:
        status: HTTP status code
        body: Undecoded response body
        headers: Response headers (case-insensitive for real transports)
        duration: Seconds spent on the request, retries included
    """

    status: int
    body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    duration: float = 0.0

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", "replace")


class Transport(ABC):
    """Moves one request to the agent and returns its raw response."""

    @abstractmethod
    async def perform_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        """Perform one HTTP request.

        Args:
            method: HTTP method ("GET", "PUT", ...)
            path: Path relative to the API root, e.g. "v1/kv/foo"
            params: Query parameters; an empty string value sends a bare flag
            body: Request body
            headers: Extra request headers

        Returns:
            The response, whatever its status code

        Raises:
            TransportError: If no response could be obtained
        """

    @abstractmethod
    async def close(self) -> None:
        """Release connections held by the transport."""
