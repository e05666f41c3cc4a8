"""
Request options, response metadata and result containers shared by all
API clients.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Generic, TypeVar

from .exceptions import ConsulClientError

T = TypeVar("T")


@dataclass
class QueryOptions:
    """Per-call options for read requests.

    Values left as None fall back to the client configuration.
    """

    datacenter: str | None = None
    namespace: str | None = None
    allow_stale: bool = False  # Any server may answer
    require_consistent: bool = False  # Leader verifies leadership before answering
    near: str | None = None  # Sort results by round trip time to this node
    token: str | None = None


@dataclass
class WriteOptions:
    """Per-call options for write requests."""

    datacenter: str | None = None
    namespace: str | None = None
    token: str | None = None


@dataclass(frozen=True)
class QueryMeta:
    """Out-of-band information returned with every read.

    Attributes:
        last_index: X-Consul-Index, the index at which the result was produced
        last_contact: Seconds since the answering server last heard from the leader
        known_leader: Whether the answering server knew of a leader
        request_time: Seconds spent on the request, retries included
    """

    last_index: int = 0
    last_contact: float = 0.0
    known_leader: bool = False
    request_time: float = 0.0

    @property
    def may_be_stale(self) -> bool:
        """True when the result may come from a lagging replica."""
        return not self.known_leader or self.last_contact > 0

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], request_time: float) -> QueryMeta:
        """Parse the X-Consul-* headers; missing or garbled headers read as zero."""
        return cls(
            last_index=_header_int(headers, "X-Consul-Index"),
            last_contact=_header_int(headers, "X-Consul-LastContact") / 1000.0,
            known_leader=headers.get("X-Consul-KnownLeader", "").lower() == "true",
            request_time=request_time,
        )


@dataclass(frozen=True)
class WriteMeta:
    """Out-of-band information returned with every write."""

    request_time: float = 0.0


def _header_int(headers: Mapping[str, str], name: str) -> int:
    try:
        return int(headers.get(name, "0"))
    except ValueError:
        return 0


@dataclass
class QueryResult(Generic[T]):
    """Outcome of a read: a value (possibly None), metadata and an error slot.

    ``value`` is None both on error and when a lookup legitimately found
    nothing; ``error`` tells the two apart.
    """

    value: T | None = None
    meta: QueryMeta | None = None
    error: ConsulClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value


@dataclass
class WriteResult(Generic[T]):
    """Outcome of a write: metadata, an error slot and an optional value.

    ``value`` is only populated by writes that return something, such as
    the id of a newly created prepared query.
    """

    meta: WriteMeta | None = None
    error: ConsulClientError | None = None
    value: T | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        """Return the value, raising the carried error if there is one."""
        if self.error is not None:
            raise self.error
        return self.value
