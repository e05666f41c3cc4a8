"""Tests for reconstructing directory trees from flat key listings."""

from __future__ import annotations

import pytest

from consul_api.kv import KVPair, KVTree, build_tree, directory_prefixes


def listing(*keys: str) -> dict[str, KVPair]:
    """Flat listing as value_list returns it: sorted, keyed by key."""
    return {key: KVPair(key, b"" if key.endswith("/") else key.encode()) for key in sorted(keys)}


def directory_paths(tree: KVTree) -> list[str]:
    return [path for path, node in tree.walk() if isinstance(node, KVTree)]


class TestDirectoryPrefixes:
    def test_leaf_path(self):
        assert list(directory_prefixes("a/b/c")) == ["a/", "a/b/"]

    def test_marker_path_includes_itself(self):
        assert list(directory_prefixes("a/b/")) == ["a/", "a/b/"]

    def test_no_slash(self):
        assert list(directory_prefixes("abc")) == []

    def test_empty_segments_skipped(self):
        assert list(directory_prefixes("a//b/c")) == ["a/", "a//b/"]

    def test_leading_slash_is_root_segment(self):
        assert list(directory_prefixes("/a/b")) == ["/", "/a/"]


class TestBuildTree:
    def test_mixed_scenario(self):
        """a is a leaf, a/b implies directory a/, c/ is an empty directory."""
        pairs = {
            "a": KVPair("a", b"1"),
            "a/b": KVPair("a/b", b"2"),
            "c/": KVPair("c/", b""),
        }

        tree = build_tree(pairs)

        assert list(tree) == ["a", "a/", "c/"]
        assert tree["a"].value == b"1"

        a_dir = tree["a/"]
        assert isinstance(a_dir, KVTree)
        assert a_dir.path == "a/"
        assert list(a_dir) == ["a/b"]
        assert a_dir["a/b"].value == b"2"

        c_dir = tree["c/"]
        assert isinstance(c_dir, KVTree)
        assert len(c_dir) == 0

    def test_top_level_leaves_only(self):
        tree = build_tree(listing("x", "y", "z"))
        assert list(tree) == ["x", "y", "z"]
        assert all(isinstance(node, KVPair) for node in tree.values())

    def test_empty_listing(self):
        tree = build_tree({})
        assert tree.path == ""
        assert len(tree) == 0

    def test_implicit_directories_are_nested(self):
        tree = build_tree(listing("a/b/c/d"))

        a_dir = tree["a/"]
        b_dir = a_dir["a/b/"]
        c_dir = b_dir["a/b/c/"]
        assert c_dir["a/b/c/d"].value == b"a/b/c/d"
        assert list(tree) == ["a/"]
        assert list(a_dir) == ["a/b/"]

    def test_deep_marker_materializes_empty_ancestors(self):
        tree = build_tree(listing("x/y/z/"))

        assert directory_paths(tree) == ["x/", "x/y/", "x/y/z/"]
        assert len(tree.find("x/y/z/")) == 0

    def test_marker_pairs_are_not_stored(self):
        tree = build_tree(listing("app/", "app/port"))
        assert [pair.key for pair in tree.leaves()] == ["app/port"]

    def test_every_ancestor_exists(self):
        pairs = listing("a/b/c", "a/d", "e/f/g/h", "i", "j/k/")
        tree = build_tree(pairs)

        for key in pairs:
            for prefix in directory_prefixes(key):
                node = tree.find(prefix)
                assert isinstance(node, KVTree), f"missing directory {prefix} for {key}"

    def test_directories_never_hold_values(self):
        tree = build_tree(listing("a/", "a/b/", "a/b/c", "d/e"))
        for _, node in tree.walk():
            if isinstance(node, KVTree):
                assert not hasattr(node, "value")

    def test_markers_and_implied_directories_build_equal_trees(self):
        leaves = ("a/b/c", "a/b0", "a/b-x", "d/e/f/g", "h")
        markers = ("a/", "a/b/", "d/", "d/e/", "d/e/f/")

        explicit = build_tree(listing(*leaves, *markers))
        implied = build_tree(listing(*leaves))

        assert explicit == implied
        assert directory_paths(explicit) == directory_paths(implied)

    def test_idempotent(self):
        pairs = listing("a/b/c", "a/b/d", "a/e", "f", "g/")
        first = build_tree(pairs)
        second = build_tree(pairs)

        assert first == second
        assert list(first.walk()) == list(second.walk())

    def test_sibling_order_follows_input(self):
        tree = build_tree(listing("dir/b", "dir/a", "dir/c"))
        assert list(tree["dir/"]) == ["dir/a", "dir/b", "dir/c"]

    def test_pairs_are_reparented_not_copied(self):
        pairs = listing("a/b")
        tree = build_tree(pairs)
        assert tree["a/"]["a/b"] is pairs["a/b"]

    def test_double_slash_keeps_leaf_under_real_directory(self):
        tree = build_tree(listing("a//b"))
        assert list(tree["a/"]) == ["a//b"]

    def test_leading_slash_key(self):
        tree = build_tree(listing("/etc/hosts"))
        assert tree["/"]["/etc/"]["/etc/hosts"].value == b"/etc/hosts"

    def test_leaf_and_directory_with_same_stem_are_distinct(self):
        tree = build_tree(listing("svc", "svc/port"))
        assert isinstance(tree["svc"], KVPair)
        assert isinstance(tree["svc/"], KVTree)


class TestKVTree:
    @pytest.fixture
    def tree(self) -> KVTree:
        return build_tree(listing("a/b/c", "a/b/d", "a/e", "f"))

    def test_children_are_read_only(self, tree: KVTree):
        with pytest.raises(TypeError):
            tree.children["x"] = KVPair("x")  # type: ignore[index]

    def test_name(self, tree: KVTree):
        assert tree.name == ""
        assert tree["a/"].name == "a/"
        assert tree.find("a/b/").name == "b/"

    def test_find(self, tree: KVTree):
        assert tree.find("a/b/d").value == b"a/b/d"
        assert tree.find("a/e").value == b"a/e"
        assert tree.find("missing/") is None
        assert tree.find("a/b/zz") is None

    def test_walk_is_depth_first(self, tree: KVTree):
        assert [path for path, _ in tree.walk()] == [
            "a/",
            "a/b/",
            "a/b/c",
            "a/b/d",
            "a/e",
            "f",
        ]

    def test_leaves(self, tree: KVTree):
        assert [pair.key for pair in tree["a/"].leaves()] == ["a/b/c", "a/b/d", "a/e"]

    def test_equality_is_order_sensitive(self):
        one = build_tree({"x": KVPair("x"), "y": KVPair("y")})
        two = build_tree({"y": KVPair("y"), "x": KVPair("x")})
        assert one != two
