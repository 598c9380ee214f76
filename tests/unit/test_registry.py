"""Unit tests for ConnectionRegistry."""

import threading

import pytest

from pairsignal.core.registry import ConnectionRegistry
from pairsignal.exceptions import DuplicateIdentity


@pytest.mark.unit
class TestConnectionRegistry:
    """Test cases for ConnectionRegistry."""

    def test_register_and_resolve(self, registry: ConnectionRegistry, make_handle):
        handle = make_handle("a")
        registry.register("A", handle)

        assert registry.resolve("A") is handle
        assert "A" in registry
        assert len(registry) == 1

    def test_register_duplicate_raises(self, registry: ConnectionRegistry, make_handle):
        first = make_handle("first")
        registry.register("A", first)

        with pytest.raises(DuplicateIdentity) as exc_info:
            registry.register("A", make_handle("second"))

        assert exc_info.value.identity == "A"
        # Original binding untouched
        assert registry.resolve("A") is first

    def test_deregister_absent_is_noop(self, registry: ConnectionRegistry):
        assert registry.deregister("missing") is False
        assert len(registry) == 0

    def test_deregister_removes_binding(self, registry: ConnectionRegistry, make_handle):
        registry.register("A", make_handle())
        assert registry.deregister("A") is True
        assert registry.resolve("A") is None
        assert "A" not in registry

    def test_resolve_none_and_unknown(self, registry: ConnectionRegistry):
        assert registry.resolve(None) is None
        assert registry.resolve("nobody") is None

    def test_snapshot_is_a_copy(self, registry: ConnectionRegistry, make_handle):
        registry.register("A", make_handle())
        registry.register("B", make_handle())

        snap = registry.snapshot()
        registry.deregister("A")
        registry.register("C", make_handle())

        assert snap == ["A", "B"]
        assert registry.snapshot() == ["B", "C"]

    def test_items_pairs_identity_with_handle(self, registry: ConnectionRegistry, make_handle):
        a, b = make_handle("a"), make_handle("b")
        registry.register("A", a)
        registry.register("B", b)

        assert registry.items() == [("A", a), ("B", b)]

    def test_snapshot_size_tracks_connect_disconnect_sequence(
        self, registry: ConnectionRegistry, make_handle
    ):
        open_ids = set()
        steps = [("+", "A"), ("+", "B"), ("-", "A"), ("+", "C"), ("-", "Z"), ("-", "B"), ("+", "A")]
        for op, identity in steps:
            if op == "+":
                registry.register(identity, make_handle(identity))
                open_ids.add(identity)
            else:
                registry.deregister(identity)
                open_ids.discard(identity)
            assert len(registry.snapshot()) == len(open_ids)
            assert set(registry.snapshot()) == open_ids

    def test_concurrent_register_deregister(self, registry: ConnectionRegistry, make_handle):
        def worker(prefix: str):
            for i in range(200):
                identity = f"{prefix}-{i}"
                registry.register(identity, make_handle(identity))
                registry.snapshot()
                if i % 2:
                    registry.deregister(identity)

        threads = [threading.Thread(target=worker, args=(p,)) for p in "abcd"]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # Each worker keeps its even-numbered identities
        assert len(registry) == 4 * 100
