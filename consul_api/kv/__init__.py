"""
Key-value store module.

Provides the KV client, its pair and tree types, and the tree
reconstruction used by ``KVClient.tree``.
"""

from .client import KVClient
from .tree import build_tree, directory_prefixes
from .types import KVPair, KVTree

__all__ = [
    "KVClient",
    "KVPair",
    "KVTree",
    "build_tree",
    "directory_prefixes",
]
