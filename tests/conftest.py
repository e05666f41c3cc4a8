"""
Shared test configuration and fixtures.

Provides two in-memory transports:
- FakeTransport: records requests and replays scripted responses
- FakeConsulServer: emulates the KV endpoints closely enough for
  put/get/cas/acquire/release round trips
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from consul_api.config import ClientConfig
from consul_api.exceptions import TransportError
from consul_api.kv import KVClient
from consul_api.query import PreparedQueryClient
from consul_api.transport.base import Transport, TransportResponse


@dataclass
class RecordedRequest:
    method: str
    path: str
    params: dict[str, str]
    body: bytes | None
    headers: dict[str, str]


def make_response(
    status: int = 200,
    body: Any = b"",
    headers: Mapping[str, str] | None = None,
    duration: float = 0.01,
) -> TransportResponse:
    """Build a TransportResponse, JSON-encoding non-bytes bodies."""
    if not isinstance(body, bytes):
        body = json.dumps(body).encode("utf-8")
    return TransportResponse(status=status, body=body, headers=dict(headers or {}), duration=duration)


def kv_entry(key: str, value: bytes | None = b"", **fields: Any) -> dict[str, Any]:
    """A KV entry as the server encodes it."""
    entry = {
        "Key": key,
        "Value": base64.b64encode(value).decode("ascii") if value else None,
        "Flags": 0,
        "CreateIndex": 1,
        "ModifyIndex": 1,
        "LockIndex": 0,
    }
    entry.update(fields)
    return entry


class FakeTransport(Transport):
    """Scripted transport: returns queued responses in order."""

    def __init__(self, *responses: TransportResponse) -> None:
        self.responses = list(responses)
        self.requests: list[RecordedRequest] = []
        self.error: Exception | None = None
        self.closed = False

    def queue(self, status: int = 200, body: Any = b"", headers: Mapping[str, str] | None = None) -> None:
        self.responses.append(make_response(status, body, headers))

    async def perform_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        self.requests.append(
            RecordedRequest(method, path, dict(params or {}), body, dict(headers or {}))
        )
        if self.error is not None:
            raise TransportError(path, self.error)
        if not self.responses:
            return make_response(200, b"")
        return self.responses.pop(0)

    async def close(self) -> None:
        self.closed = True

    @property
    def last(self) -> RecordedRequest:
        return self.requests[-1]


@dataclass
class StoredKey:
    value: bytes
    flags: int
    create_index: int
    modify_index: int
    lock_index: int = 0
    session: str | None = None


@dataclass
class FakeConsulServer(Transport):
    """In-memory emulation of the /v1/kv endpoints."""

    store: dict[str, StoredKey] = field(default_factory=dict)
    index: int = 0
    requests: list[RecordedRequest] = field(default_factory=list)

    async def perform_request(
        self,
        method: str,
        path: str,
        params: Mapping[str, str] | None = None,
        body: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        params = dict(params or {})
        self.requests.append(RecordedRequest(method, path, params, body, dict(headers or {})))

        if not path.startswith("v1/kv/"):
            return self._respond(404, b"")
        key = path[len("v1/kv/") :]

        if method == "GET":
            return self._get(key, params)
        if method == "PUT":
            return self._put(key, params, body or b"")
        if method == "DELETE":
            self.store.pop(key, None)
            self.index += 1
            return self._respond(200, b"true")
        return self._respond(405, b"method not allowed")

    async def close(self) -> None:
        pass

    def _respond(self, status: int, body: Any) -> TransportResponse:
        return make_response(
            status,
            body,
            {
                "X-Consul-Index": str(self.index),
                "X-Consul-KnownLeader": "true",
                "X-Consul-LastContact": "0",
            },
        )

    def _entry(self, key: str) -> dict[str, Any]:
        stored = self.store[key]
        return kv_entry(
            key,
            stored.value,
            Flags=stored.flags,
            Session=stored.session,
            CreateIndex=stored.create_index,
            ModifyIndex=stored.modify_index,
            LockIndex=stored.lock_index,
        )

    def _get(self, key: str, params: dict[str, str]) -> TransportResponse:
        if "recurse" in params or "keys" in params:
            matches = sorted(k for k in self.store if k.startswith(key))
            if not matches:
                return self._respond(404, b"")
            if "keys" in params:
                return self._respond(200, matches)
            return self._respond(200, [self._entry(k) for k in matches])

        if key not in self.store:
            return self._respond(404, b"")
        return self._respond(200, [self._entry(key)])

    def _put(self, key: str, params: dict[str, str], body: bytes) -> TransportResponse:
        existing = self.store.get(key)
        session = existing.session if existing else None
        lock_index = existing.lock_index if existing else 0

        if "cas" in params:
            expected = int(params["cas"])
            current = existing.modify_index if existing else 0
            if expected != current:
                return self._respond(200, b"false")

        if "acquire" in params:
            if session is not None and session != params["acquire"]:
                return self._respond(200, b"false")
            if session is None:
                lock_index += 1
            session = params["acquire"]

        if "release" in params:
            if session != params["release"]:
                return self._respond(200, b"false")
            session = None

        self.index += 1
        self.store[key] = StoredKey(
            value=body,
            flags=int(params.get("flags", "0")),
            create_index=existing.create_index if existing else self.index,
            modify_index=self.index,
            lock_index=lock_index,
            session=session,
        )
        return self._respond(200, b"true")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def kv(transport: FakeTransport) -> KVClient:
    return KVClient(transport, ClientConfig())


@pytest.fixture
def queries(transport: FakeTransport) -> PreparedQueryClient:
    return PreparedQueryClient(transport, ClientConfig())


@pytest.fixture
def server() -> FakeConsulServer:
    return FakeConsulServer()


@pytest.fixture
def server_kv(server: FakeConsulServer) -> KVClient:
    return KVClient(server)
