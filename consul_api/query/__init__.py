"""
Prepared query module.
"""

from .client import PreparedQueryClient
from .types import (
    PreparedQueryDefinition,
    PreparedQueryExecuteResponse,
    QueryDatacenterOptions,
    QueryDNSOptions,
    QueryTemplate,
    ServiceEntry,
    ServiceQuery,
)

__all__ = [
    "PreparedQueryClient",
    "PreparedQueryDefinition",
    "PreparedQueryExecuteResponse",
    "QueryDatacenterOptions",
    "QueryDNSOptions",
    "QueryTemplate",
    "ServiceEntry",
    "ServiceQuery",
]
