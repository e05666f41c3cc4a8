"""
Key-value types.

KVPair is one stored entry as the server reports it. KVTree is a directory
node produced by tree reconstruction; it is never sent to the server.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Union

from ..exceptions import DecodeError

MAX_FLAGS = 2**64 - 1


@dataclass
class KVPair:
    """A single stored key.

    Attributes:
        key: Full path of the key
        value: Opaque payload; a str is stored as its UTF-8 encoding
        flags: Opaque unsigned 64-bit integer set by the writer
        session: Session currently holding the lock on this key, if any
        create_index: Index at which the key was created
        modify_index: Index of the last write; the check-and-set token
        lock_index: Number of times the lock has been acquired
    """

    key: str
    value: bytes = b""
    flags: int = 0
    session: str | None = None
    create_index: int = 0
    modify_index: int = 0
    lock_index: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.value, str):
            self.value = self.value.encode("utf-8")
        elif self.value is None:
            self.value = b""

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the server's field names (Value base64 encoded)."""
        return {
            "Key": self.key,
            "Value": base64.b64encode(self.value).decode("ascii") if self.value else None,
            "Flags": self.flags,
            "Session": self.session or "",
            "CreateIndex": self.create_index,
            "ModifyIndex": self.modify_index,
            "LockIndex": self.lock_index,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KVPair:
        """Deserialize one element of a KV response.

        Raises:
            DecodeError: If the element lacks a key, carries invalid base64 or
                a non-integer flags or index field
        """
        if not isinstance(data, dict) or not isinstance(data.get("Key"), str):
            raise DecodeError("KV entry without a string Key", str(data))

        raw = data.get("Value")
        try:
            value = base64.b64decode(raw, validate=True) if raw else b""
        except (binascii.Error, TypeError, ValueError) as e:
            raise DecodeError(f"invalid base64 Value for {data['Key']}: {e}") from e

        return cls(
            key=data["Key"],
            value=value,
            flags=_uint_field(data, "Flags"),
            session=data.get("Session") or None,
            create_index=_uint_field(data, "CreateIndex"),
            modify_index=_uint_field(data, "ModifyIndex"),
            lock_index=_uint_field(data, "LockIndex"),
        )


def _uint_field(data: dict[str, Any], name: str) -> int:
    raw = data.get(name) or 0
    if not isinstance(raw, int) or isinstance(raw, bool) or raw < 0:
        raise DecodeError(f"{name} of {data['Key']} is not an unsigned integer: {raw!r}")
    return raw


TreeEntry = Union["KVTree", KVPair]


class KVTree(Mapping[str, TreeEntry]):
    """A directory in a reconstructed key tree.

    Children are keyed by their full path: ``"a/b/"`` for a subdirectory,
    ``"a/b/c"`` for a leaf. Iteration follows insertion order, which is the
    server's lexicographic order. A KVTree never carries a value of its own.
    """

    __slots__ = ("path", "_children")

    def __init__(self, path: str = "") -> None:
        self.path = path
        self._children: dict[str, TreeEntry] = {}

    @property
    def children(self) -> Mapping[str, TreeEntry]:
        """Read-only view of the direct children."""
        return MappingProxyType(self._children)

    @property
    def name(self) -> str:
        """Last segment of the path, with its trailing slash."""
        if not self.path:
            return ""
        parent_end = self.path.rfind("/", 0, len(self.path) - 1)
        return self.path[parent_end + 1 :]

    def __getitem__(self, path: str) -> TreeEntry:
        return self._children[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._children)

    def __len__(self) -> int:
        return len(self._children)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KVTree):
            return NotImplemented
        return self.path == other.path and list(self._children.items()) == list(
            other._children.items()
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"KVTree(path={self.path!r}, children={list(self._children)!r})"

    def _ensure_directory(self, path: str) -> KVTree:
        node = self._children.get(path)
        if not isinstance(node, KVTree):
            node = KVTree(path)
            self._children[path] = node
        return node

    def _add_leaf(self, path: str, pair: KVPair) -> None:
        self._children[path] = pair

    def find(self, path: str) -> TreeEntry | None:
        """Look up a directory or leaf anywhere below this node by full path."""
        if path in self._children:
            return self._children[path]
        for child_path, child in self._children.items():
            if isinstance(child, KVTree) and path.startswith(child_path):
                return child.find(path)
        return None

    def walk(self) -> Iterator[tuple[str, TreeEntry]]:
        """Yield every (path, node) below this node, depth first, in order."""
        for child_path, child in self._children.items():
            yield child_path, child
            if isinstance(child, KVTree):
                yield from child.walk()

    def leaves(self) -> Iterator[KVPair]:
        """Yield every stored pair below this node, in order."""
        for _, node in self.walk():
            if isinstance(node, KVPair):
                yield node
