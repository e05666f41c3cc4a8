"""
Prepared query client.

Thin pass-through over the /v1/query endpoints. Like the KV client, every
operation returns its error in the result instead of raising.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..api import ApiClient
from ..exceptions import ConsulClientError, DecodeError, InvalidArgumentError
from ..types import QueryOptions, QueryResult, WriteOptions, WriteResult
from .types import PreparedQueryDefinition, PreparedQueryExecuteResponse

logger = logging.getLogger(__name__)

QUERY_ENDPOINT = "v1/query"


def _validate_id(argument: str, query_id: object) -> InvalidArgumentError | None:
    if not isinstance(query_id, str):
        return InvalidArgumentError(
            argument, f"expected str, got {type(query_id).__name__}", query_id
        )
    if not query_id:
        return InvalidArgumentError(argument, "must not be empty")
    return None


def _encode(definition: PreparedQueryDefinition) -> bytes:
    return json.dumps(definition.to_dict()).encode("utf-8")


def _definitions(data: list[Any], body: bytes) -> list[PreparedQueryDefinition]:
    if not all(isinstance(item, dict) for item in data):
        raise DecodeError("expected an array of query objects", body)
    return [PreparedQueryDefinition.from_dict(item) for item in data]


class PreparedQueryClient(ApiClient):
    """Client for prepared query management and execution.

    Example:
        >>> queries = PreparedQueryClient(transport)
        >>> created = await queries.create(
        ...     PreparedQueryDefinition(name="web", service=ServiceQuery(service="web"))
        ... )
        >>> result = await queries.execute("web")
        >>> for entry in result.unwrap().nodes:
        ...     print(entry.address, entry.port)
    """

    async def create(
        self,
        definition: PreparedQueryDefinition,
        options: WriteOptions | None = None,
    ) -> WriteResult[str]:
        """Store a new prepared query; the result value is its id."""
        if not isinstance(definition, PreparedQueryDefinition):
            return WriteResult(
                error=InvalidArgumentError(
                    "definition", f"expected PreparedQueryDefinition, got {type(definition).__name__}"
                )
            )

        try:
            response = await self._write("POST", QUERY_ENDPOINT, options, body=_encode(definition))
            self._require_ok(response, "POST", QUERY_ENDPOINT)
            data = self._decode_body(response)
            if not isinstance(data, dict) or not isinstance(data.get("ID"), str):
                raise DecodeError("expected an object with an ID", response.body)
        except ConsulClientError as e:
            return WriteResult(error=e)

        logger.info(f"Created prepared query {data['ID']} ({definition.name or 'unnamed'})")
        return WriteResult(self._write_meta(response), value=data["ID"])

    async def update(
        self,
        definition: PreparedQueryDefinition,
        options: WriteOptions | None = None,
    ) -> WriteResult:
        """Replace an existing prepared query; ``definition.id`` selects it."""
        if not isinstance(definition, PreparedQueryDefinition):
            return WriteResult(
                error=InvalidArgumentError(
                    "definition", f"expected PreparedQueryDefinition, got {type(definition).__name__}"
                )
            )
        error = _validate_id("definition.id", definition.id)
        if error is not None:
            return WriteResult(error=error)

        path = f"{QUERY_ENDPOINT}/{definition.id}"
        try:
            response = await self._write("PUT", path, options, body=_encode(definition))
            self._require_ok(response, "PUT", path)
        except ConsulClientError as e:
            return WriteResult(error=e)
        return WriteResult(self._write_meta(response))

    async def list(
        self, options: QueryOptions | None = None
    ) -> QueryResult[list[PreparedQueryDefinition]]:
        """List every prepared query visible to the token."""
        meta = None
        try:
            response = await self._query(QUERY_ENDPOINT, options)
            meta = self._query_meta(response)
            self._require_ok(response, "GET", QUERY_ENDPOINT)
            definitions = _definitions(self._decode_list(response), response.body)
        except ConsulClientError as e:
            return QueryResult(meta=meta, error=e)
        return QueryResult(definitions, meta)

    async def get(
        self, query_id: str, options: QueryOptions | None = None
    ) -> QueryResult[list[PreparedQueryDefinition]]:
        """Fetch one prepared query; the server wraps it in a list."""
        error = _validate_id("query_id", query_id)
        if error is not None:
            return QueryResult(error=error)

        path = f"{QUERY_ENDPOINT}/{query_id}"
        meta = None
        try:
            response = await self._query(path, options)
            meta = self._query_meta(response)
            self._require_ok(response, "GET", path)
            definitions = _definitions(self._decode_list(response), response.body)
        except ConsulClientError as e:
            return QueryResult(meta=meta, error=e)
        return QueryResult(definitions, meta)

    async def delete(self, query_id: str, options: WriteOptions | None = None) -> WriteResult:
        """Delete a prepared query."""
        error = _validate_id("query_id", query_id)
        if error is not None:
            return WriteResult(error=error)

        path = f"{QUERY_ENDPOINT}/{query_id}"
        try:
            response = await self._write("DELETE", path, options)
            self._require_ok(response, "DELETE", path)
        except ConsulClientError as e:
            return WriteResult(error=e)
        return WriteResult(self._write_meta(response))

    async def execute(
        self, query_id_or_name: str, options: QueryOptions | None = None
    ) -> QueryResult[PreparedQueryExecuteResponse]:
        """Run a prepared query by id or name."""
        error = _validate_id("query_id_or_name", query_id_or_name)
        if error is not None:
            return QueryResult(error=error)

        path = f"{QUERY_ENDPOINT}/{query_id_or_name}/execute"
        meta = None
        try:
            response = await self._query(path, options)
            meta = self._query_meta(response)
            self._require_ok(response, "GET", path)
            data = self._decode_body(response)
            if not isinstance(data, dict):
                raise DecodeError("expected a JSON object", response.body)
        except ConsulClientError as e:
            return QueryResult(meta=meta, error=e)
        return QueryResult(PreparedQueryExecuteResponse.from_dict(data), meta)
