"""
aiohttp-backed transport.

Provides the production transport:
- Lazily created, reusable ClientSession
- TLS and mutual TLS from TLSConfig
- Default ACL token header
- Retry with backoff for connection failures and timeouts (idempotent
  methods only)
"""

from __future__ import annotations

import asyncio
import logging
import ssl
import time
from dataclasses import replace
from collections.abc import Mapping
from typing import TYPE_CHECKING
from urllib.parse import quote

import aiohttp

from ..exceptions import TransportError
from ..logging_utils import RequestLoggerAdapter, get_client_logger
from .base import Transport, TransportResponse
from .resilience import retry_with_backoff

if TYPE_CHECKING:
    from ..config import ClientConfig, TLSConfig

logger = get_client_logger("transport")

TOKEN_HEADER = "X-Consul-Token"

# Methods resent after a dropped connection
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE"})


def build_ssl_context(tls: TLSConfig) -> ssl.SSLContext:
    """Create an SSL context honoring the CA bundle, client cert and verify flag."""
    context = ssl.create_default_context(cafile=tls.ca_file)
    if tls.cert_file:
        context.load_cert_chain(tls.cert_file, tls.key_file)
    if tls.insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


class HttpTransport(Transport):
    """Transport talking HTTP(S) to a Consul agent through aiohttp.

    Example:
        >>> transport = HttpTransport(ClientConfig(address="10.0.0.5:8500"))
        >>> response = await transport.perform_request("GET", "v1/kv/app/config")
        >>> await transport.close()
    """

    def __init__(
        self,
        config: ClientConfig,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            config: Client configuration (address, scheme, TLS, token, retry)
            session: Optional externally managed session; it is not closed
                by ``close()``
        """
        self.config = config
        self._session = session
        self._owns_session = session is None
        self._lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._lock:
            if self._session is None or self._session.closed:
                connector = None
                if self.config.scheme == "https":
                    connector = aiohttp.TCPConnector(ssl=build_ssl_context(self.config.tls))
                self._session = aiohttp.ClientSession(
                    connector=connector,
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                )
                self._owns_session = True
                logger.debug(f"Opened HTTP session to {self.config.base_url}")
            return self._session

    async def perform_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        url = f"{self.config.base_url}/{quote(path.lstrip('/'), safe='/:@')}"

        request_headers: dict[str, str] = {}
        if self.config.token:
            request_headers[TOKEN_HEADER] = self.config.token
        if headers:
            request_headers.update(headers)

        log = RequestLoggerAdapter(
            logger,
            {"method": method, "path": path, "datacenter": (params or {}).get("dc")},
        )
        retry = self.config.retry
        if method.upper() not in IDEMPOTENT_METHODS:
            retry = replace(retry, max_retries=0)
        session = await self._get_session()

        start = time.monotonic()
        try:
            status, content, response_headers = await retry_with_backoff(
                self._send_once,
                session,
                method,
                url,
                dict(params or {}),
                body,
                request_headers,
                config=retry,
                context_msg=f"{method} {path}",
            )
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            log.error(f"Request failed: {method} {path}: {e}", extra={"error": type(e).__name__})
            raise TransportError(url, e) from e

        duration = time.monotonic() - start
        log.debug(
            f"{method} {path} -> {status}",
            extra={"status": status, "duration_ms": round(duration * 1000, 1)},
        )
        return TransportResponse(
            status=status,
            body=content,
            headers=response_headers,
            duration=duration,
        )

    async def _send_once(
        self,
        session: aiohttp.ClientSession,
        method: str,
        url: str,
        params: dict[str, str],
        body: bytes | None,
        headers: dict[str, str],
    ) -> tuple[int, bytes, Mapping[str, str]]:
        async with session.request(
            method, url, params=params, data=body, headers=headers
        ) as response:
            content = await response.read()
            return response.status, content, response.headers

    async def close(self) -> None:
        """Close the session if this transport created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed HTTP session")
        self._session = None
