"""
Key-value store client.

Every operation returns a QueryResult or WriteResult instead of raising:
callers check ``result.error`` (or call ``result.unwrap()``) before using
the value.
"""

from __future__ import annotations

import logging

from ..api import ApiClient
from ..exceptions import ConsulClientError, DecodeError, InvalidArgumentError
from ..types import QueryOptions, QueryResult, WriteOptions, WriteResult
from .tree import build_tree
from .types import MAX_FLAGS, KVPair, KVTree

logger = logging.getLogger(__name__)

KV_ENDPOINT = "v1/kv"


def _validate_key(argument: str, key: object) -> None:
    if not isinstance(key, str):
        raise InvalidArgumentError(argument, f"expected str, got {type(key).__name__}", key)
    if key == "":
        raise InvalidArgumentError(argument, "must not be empty")


def _is_uint(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _validate_pair(pair: object) -> KVPair:
    if not isinstance(pair, KVPair):
        raise InvalidArgumentError("pair", f"expected KVPair, got {type(pair).__name__}", pair)
    _validate_key("pair.key", pair.key)
    if not _is_uint(pair.flags) or pair.flags > MAX_FLAGS:
        raise InvalidArgumentError("pair.flags", "must be an unsigned 64-bit integer", pair.flags)
    return pair


def _validate_session(pair: KVPair) -> None:
    if not (isinstance(pair.session, str) and pair.session):
        raise InvalidArgumentError("pair.session", "a session id is required", pair.session)


def _flag_params(pair: KVPair) -> dict[str, str]:
    # Zero is the server default and is never sent
    if pair.flags != 0:
        return {"flags": str(pair.flags)}
    return {}


class KVClient(ApiClient):
    """Client for the /v1/kv endpoints.

    Example:
        >>> kv = KVClient(transport)
        >>> await kv.put(KVPair("app/config/port", b"8080"))
        >>> result = await kv.get("app/config/port")
        >>> if result.error is None and result.value is not None:
        ...     print(result.value.value)
        >>> tree = (await kv.tree("app/")).unwrap()
    """

    async def get(
        self, key: str, options: QueryOptions | None = None
    ) -> QueryResult[KVPair | None]:
        """Fetch a single key.

        A missing key is not an error: the result has ``value=None`` and
        ``error=None``.
        """
        if not isinstance(key, str):
            return QueryResult(
                error=InvalidArgumentError("key", f"expected str, got {type(key).__name__}", key)
            )

        path = f"{KV_ENDPOINT}/{key}"
        meta = None
        try:
            response = await self._query(path, options)
            meta = self._query_meta(response)

            if response.status == 404:
                return QueryResult(None, meta)
            self._require_ok(response, "GET", path)

            data = self._decode_list(response)
            if not data:
                return QueryResult(None, meta)
            return QueryResult(KVPair.from_dict(data[0]), meta)
        except ConsulClientError as e:
            return QueryResult(meta=meta, error=e)

    async def value_list(
        self, prefix: str, options: QueryOptions | None = None
    ) -> QueryResult[dict[str, KVPair]]:
        """List every pair whose key starts with ``prefix``.

        The mapping is keyed by each pair's key, in server (lexicographic)
        order. Unlike ``get``, any status other than 200 is an error, including
        the 404 the server answers when nothing matches.
        """
        try:
            _validate_key("prefix", prefix)
        except InvalidArgumentError as e:
            return QueryResult(error=e)

        path = f"{KV_ENDPOINT}/{prefix}"
        meta = None
        try:
            response = await self._query(path, options, {"recurse": ""})
            meta = self._query_meta(response)
            self._require_ok(response, "GET", path)

            pairs: dict[str, KVPair] = {}
            for item in self._decode_list(response):
                pair = KVPair.from_dict(item)
                pairs[pair.key] = pair
        except ConsulClientError as e:
            return QueryResult(meta=meta, error=e)

        logger.debug(f"Listed {len(pairs)} keys under {prefix!r}")
        return QueryResult(pairs, meta)

    async def keys(
        self, prefix: str | None = None, options: QueryOptions | None = None
    ) -> QueryResult[list[str]]:
        """List key names under ``prefix``, or the whole store when None."""
        if prefix is not None and not isinstance(prefix, str):
            return QueryResult(
                error=InvalidArgumentError(
                    "prefix", f"expected str or None, got {type(prefix).__name__}", prefix
                )
            )

        path = f"{KV_ENDPOINT}/{prefix or ''}"
        meta = None
        try:
            response = await self._query(path, options, {"keys": ""})
            meta = self._query_meta(response)
            self._require_ok(response, "GET", path)

            keys = self._decode_list(response)
            if not all(isinstance(k, str) for k in keys):
                raise DecodeError("keys listing holds non-string entries", response.body)
        except ConsulClientError as e:
            return QueryResult(meta=meta, error=e)

        return QueryResult(keys, meta)

    async def put(self, pair: KVPair, options: WriteOptions | None = None) -> WriteResult:
        """Write ``pair.value`` to ``pair.key``."""
        return await self._put_pair(pair, options, {})

    async def delete(self, key: str, options: WriteOptions | None = None) -> WriteResult:
        """Delete a single key unconditionally."""
        try:
            _validate_key("key", key)
        except InvalidArgumentError as e:
            return WriteResult(error=e)

        path = f"{KV_ENDPOINT}/{key}"
        try:
            response = await self._write("DELETE", path, options)
            self._require_ok(response, "DELETE", path)
        except ConsulClientError as e:
            return WriteResult(error=e)
        return WriteResult(self._write_meta(response))

    async def cas(self, pair: KVPair, options: WriteOptions | None = None) -> WriteResult:
        """Check-and-set: write only if the key's index still equals
        ``pair.modify_index`` (0 means "only if the key does not exist").

        The server answers 200 whether or not the write applied; the body is
        ``true`` or ``false``. That outcome is deliberately not surfaced: a
        lost race produces the same WriteResult as a successful write.
        Re-read the key and compare ``modify_index`` or ``value`` to find out
        which one happened.
        """
        try:
            _validate_pair(pair)
            if not _is_uint(pair.modify_index):
                raise InvalidArgumentError(
                    "pair.modify_index", "must be a non-negative integer", pair.modify_index
                )
        except InvalidArgumentError as e:
            return WriteResult(error=e)
        return await self._put_pair(pair, options, {"cas": str(pair.modify_index)})

    async def acquire(self, pair: KVPair, options: WriteOptions | None = None) -> WriteResult:
        """Attach the lock of session ``pair.session`` to ``pair.key``.

        As with ``cas``, the server reports whether the lock was obtained only
        in the response body; re-read the key and check ``session``.
        """
        try:
            _validate_pair(pair)
            _validate_session(pair)
        except InvalidArgumentError as e:
            return WriteResult(error=e)
        return await self._put_pair(pair, options, {"acquire": pair.session})

    async def release(self, pair: KVPair, options: WriteOptions | None = None) -> WriteResult:
        """Release the lock held by session ``pair.session`` on ``pair.key``."""
        try:
            _validate_pair(pair)
            _validate_session(pair)
        except InvalidArgumentError as e:
            return WriteResult(error=e)
        return await self._put_pair(pair, options, {"release": pair.session})

    async def tree(
        self, prefix: str, options: QueryOptions | None = None
    ) -> QueryResult[KVTree]:
        """List ``prefix`` and rebuild its directory hierarchy.

        Errors from the listing are returned unchanged.
        """
        listing = await self.value_list(prefix, options)
        if listing.error is not None:
            return QueryResult(meta=listing.meta, error=listing.error)
        return QueryResult(build_tree(listing.value or {}), listing.meta)

    async def _put_pair(
        self,
        pair: KVPair,
        options: WriteOptions | None,
        params: dict[str, str],
    ) -> WriteResult:
        try:
            _validate_pair(pair)
        except InvalidArgumentError as e:
            return WriteResult(error=e)

        path = f"{KV_ENDPOINT}/{pair.key}"
        try:
            response = await self._write(
                "PUT", path, options, {**_flag_params(pair), **params}, pair.value
            )
            self._require_ok(response, "PUT", path)
        except ConsulClientError as e:
            return WriteResult(error=e)
        return WriteResult(self._write_meta(response))
