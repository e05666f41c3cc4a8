"""
Shared plumbing for the endpoint clients.

Merges configuration defaults with per-call options, performs the request
through the transport and turns raw responses into metadata or errors.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .config import ClientConfig
from .exceptions import DecodeError, InvalidArgumentError, RequestFailedError
from .transport.base import Transport, TransportResponse
from .types import QueryMeta, QueryOptions, WriteMeta, WriteOptions

logger = logging.getLogger(__name__)


class ApiClient:
    """Base class for endpoint clients sharing one transport and config."""

    def __init__(self, transport: Transport, config: ClientConfig | None = None) -> None:
        self.transport = transport
        self.config = config or ClientConfig()

    def _query_params(self, options: QueryOptions | None) -> tuple[dict[str, str], dict[str, str]]:
        opts = options or QueryOptions()
        if opts.allow_stale and opts.require_consistent:
            raise InvalidArgumentError(
                "options", "allow_stale and require_consistent are mutually exclusive"
            )

        params, headers = self._common_params(opts.datacenter, opts.namespace, opts.token)
        if opts.allow_stale:
            params["stale"] = ""
        if opts.require_consistent:
            params["consistent"] = ""
        if opts.near:
            params["near"] = opts.near
        return params, headers

    def _write_params(self, options: WriteOptions | None) -> tuple[dict[str, str], dict[str, str]]:
        opts = options or WriteOptions()
        return self._common_params(opts.datacenter, opts.namespace, opts.token)

    def _common_params(
        self,
        datacenter: str | None,
        namespace: str | None,
        token: str | None,
    ) -> tuple[dict[str, str], dict[str, str]]:
        params: dict[str, str] = {}
        headers: dict[str, str] = {}

        dc = datacenter or self.config.datacenter
        if dc:
            params["dc"] = dc
        ns = namespace or self.config.namespace
        if ns:
            params["ns"] = ns
        if token:
            headers["X-Consul-Token"] = token
        return params, headers

    async def _query(
        self,
        path: str,
        options: QueryOptions | None = None,
        params: dict[str, str] | None = None,
    ) -> TransportResponse:
        """Perform a GET with query options applied."""
        request_params, headers = self._query_params(options)
        request_params.update(params or {})
        return await self.transport.perform_request(
            "GET", path, params=request_params, headers=headers
        )

    async def _write(
        self,
        method: str,
        path: str,
        options: WriteOptions | None = None,
        params: dict[str, str] | None = None,
        body: bytes | None = None,
    ) -> TransportResponse:
        """Perform a mutating request with write options applied."""
        request_params, headers = self._write_params(options)
        request_params.update(params or {})
        return await self.transport.perform_request(
            method, path, params=request_params, body=body, headers=headers
        )

    @staticmethod
    def _require_ok(response: TransportResponse, method: str, path: str) -> TransportResponse:
        if response.status != 200:
            logger.debug(f"{method} {path} answered {response.status}")
            raise RequestFailedError(response.status, response.text, method, path)
        return response

    @staticmethod
    def _query_meta(response: TransportResponse) -> QueryMeta:
        return QueryMeta.from_headers(response.headers, response.duration)

    @staticmethod
    def _write_meta(response: TransportResponse) -> WriteMeta:
        return WriteMeta(request_time=response.duration)

    @staticmethod
    def _decode_body(response: TransportResponse) -> Any:
        try:
            return json.loads(response.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DecodeError(str(e), response.body) from e

    @staticmethod
    def _decode_list(response: TransportResponse) -> list[Any]:
        data = ApiClient._decode_body(response)
        if not isinstance(data, list):
            raise DecodeError(f"expected a JSON array, got {type(data).__name__}", response.body)
        return data
