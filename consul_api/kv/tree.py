"""
Tree reconstruction for prefix listings.

The server stores keys flat; directories exist only by convention. A key
ending in ``/`` is an explicit directory marker, every other ``/`` in a key
implies a directory. ``build_tree`` turns the flat, lexicographically ordered
listing of ``KVClient.value_list`` into nested KVTree nodes.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from .types import KVPair, KVTree


def directory_prefixes(path: str) -> Iterator[str]:
    """Yield every slash-terminated prefix of ``path``, shortest first.

    Prefixes ending in an empty segment (``"a//"``) are skipped; the first
    segment is always yielded, even when empty (``"/"`` for ``"/a/b"``).

        >>> list(directory_prefixes("a/b/c"))
        ['a/', 'a/b/']
        >>> list(directory_prefixes("a/b/"))
        ['a/', 'a/b/']
    """
    start = 0
    first = True
    while True:
        slash = path.find("/", start)
        if slash == -1:
            return
        if first or slash > start:
            yield path[: slash + 1]
        first = False
        start = slash + 1


def build_tree(pairs: Mapping[str, KVPair]) -> KVTree:
    """Reconstruct the directory hierarchy of a prefix listing.

    Every directory implied by a key's depth exists in the result whether or
    not the listing held an explicit marker for it. Marker pairs only
    materialize their directories; they are not stored as leaves. Pairs are
    re-parented by reference.

    Args:
        pairs: Mapping of key to pair in server order

    Returns:
        Root node (path ``""``); its children are top-level leaves and
        directories
    """
    root = KVTree()

    for path, pair in pairs.items():
        if "/" not in path:
            root._add_leaf(path, pair)
            continue

        is_marker = path.endswith("/")
        directory = path if is_marker else path[: path.rfind("/") + 1]

        node = root
        for prefix in directory_prefixes(directory):
            node = node._ensure_directory(prefix)

        if not is_marker:
            node._add_leaf(path, pair)

    return root
