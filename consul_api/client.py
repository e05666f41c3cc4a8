"""
Top-level client.

Owns the configuration and transport shared by the endpoint clients.
"""

from __future__ import annotations

import logging
from types import TracebackType

from .config import ClientConfig
from .kv.client import KVClient
from .query.client import PreparedQueryClient
from .transport.base import Transport
from .transport.http import HttpTransport

logger = logging.getLogger(__name__)


class ConsulClient:
    """Entry point bundling the KV and prepared query clients.

    Example:
        >>> async with ConsulClient.from_env() as consul:
        ...     result = await consul.kv.tree("service/web/")
        ...     tree = result.unwrap()
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: Transport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration (defaults to a local agent)
            transport: Transport to use (defaults to HttpTransport over config)
        """
        self.config = config or ClientConfig()
        self.transport = transport or HttpTransport(self.config)
        self._kv = KVClient(self.transport, self.config)
        self._prepared_query = PreparedQueryClient(self.transport, self.config)
        logger.debug(f"Consul client configured for {self.config.base_url}")

    @classmethod
    def from_env(cls) -> ConsulClient:
        """Create a client configured from CONSUL_* environment variables."""
        return cls(ClientConfig.from_env())

    @property
    def kv(self) -> KVClient:
        return self._kv

    @property
    def prepared_query(self) -> PreparedQueryClient:
        return self._prepared_query

    async def close(self) -> None:
        await self.transport.close()

    async def __aenter__(self) -> ConsulClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
