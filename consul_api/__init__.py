"""
Consul API Client

Typed asyncio client for the Consul HTTP API.

Provides:
- Key-value store access (get, list, put, delete)
- Check-and-set and session lock primitives
- Reconstruction of key listings into directory trees
- Prepared query management and execution

Usage:

    >>> from consul_api import ConsulClient, KVPair
    >>> async with ConsulClient.from_env() as consul:
    ...     await consul.kv.put(KVPair("app/db/host", b"10.0.0.7"))
    ...
    ...     result = await consul.kv.get("app/db/host")
    ...     if result.error is not None:
    ...         raise result.error
    ...
    ...     # Nested view of everything under app/
    ...     tree = (await consul.kv.tree("app/")).unwrap()
    ...     for path, node in tree.walk():
    ...         print(path)

Errors:

    Operations never raise for request failures. Each returns a QueryResult
    or WriteResult whose ``error`` slot holds an InvalidArgumentError,
    TransportError, RequestFailedError or DecodeError. ``get`` on a missing
    key succeeds with ``value=None``.
"""

from .client import ConsulClient
from .config import ClientConfig, TLSConfig
from .exceptions import (
    ConfigurationError,
    ConsulClientError,
    DecodeError,
    InvalidArgumentError,
    RequestFailedError,
    TransportError,
)
from .kv import KVClient, KVPair, KVTree, build_tree
from .logging_utils import configure_request_logging
from .query import (
    PreparedQueryClient,
    PreparedQueryDefinition,
    PreparedQueryExecuteResponse,
    QueryDatacenterOptions,
    QueryDNSOptions,
    QueryTemplate,
    ServiceEntry,
    ServiceQuery,
)
from .transport import HttpTransport, RetryConfig, Transport, TransportResponse
from .types import QueryMeta, QueryOptions, QueryResult, WriteMeta, WriteOptions, WriteResult

__all__ = [
    # Entry point
    "ConsulClient",
    "ClientConfig",
    "TLSConfig",
    "RetryConfig",
    "configure_request_logging",
    # KV
    "KVClient",
    "KVPair",
    "KVTree",
    "build_tree",
    # Prepared queries
    "PreparedQueryClient",
    "PreparedQueryDefinition",
    "PreparedQueryExecuteResponse",
    "QueryDatacenterOptions",
    "QueryDNSOptions",
    "QueryTemplate",
    "ServiceEntry",
    "ServiceQuery",
    # Options, metadata, results
    "QueryOptions",
    "WriteOptions",
    "QueryMeta",
    "WriteMeta",
    "QueryResult",
    "WriteResult",
    # Transport
    "Transport",
    "TransportResponse",
    "HttpTransport",
    # Exceptions
    "ConsulClientError",
    "InvalidArgumentError",
    "TransportError",
    "RequestFailedError",
    "DecodeError",
    "ConfigurationError",
]

__version__ = "0.1.0"
