"""Tests for the top-level client."""

from __future__ import annotations

import pytest
from conftest import FakeTransport, kv_entry

from consul_api import ConsulClient
from consul_api.config import ClientConfig
from consul_api.transport import HttpTransport


class TestConsulClient:
    def test_defaults(self):
        client = ConsulClient()

        assert isinstance(client.transport, HttpTransport)
        assert client.config == ClientConfig()

    def test_endpoint_clients_share_transport(self):
        transport = FakeTransport()
        client = ConsulClient(transport=transport)

        assert client.kv.transport is transport
        assert client.prepared_query.transport is transport

    async def test_context_manager_closes_transport(self):
        transport = FakeTransport()
        transport.queue(200, [kv_entry("a", b"1")])

        async with ConsulClient(transport=transport) as consul:
            result = await consul.kv.get("a")

        assert result.unwrap().value == b"1"
        assert transport.closed

    async def test_config_flows_to_requests(self):
        transport = FakeTransport()
        client = ConsulClient(ClientConfig(datacenter="dc9"), transport)

        await client.kv.delete("a")

        assert transport.last.params["dc"] == "dc9"

    def test_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("CONSUL_HTTP_ADDR", "consul.example:8500")
        monkeypatch.delenv("CONSUL_HTTP_SSL", raising=False)

        client = ConsulClient.from_env()

        assert client.config.base_url == "http://consul.example:8500"
