"""Unit tests for Matchmaker."""

import random

import pytest

from pairsignal.core.matchmaker import Matchmaker


@pytest.fixture
def matchmaker(registry, broadcaster, ledger, fixed_choice):
    return Matchmaker(registry, broadcaster, ledger=ledger, rng=fixed_choice("B"))


@pytest.mark.unit
class TestMatchmaker:
    """Test cases for Matchmaker."""

    @pytest.mark.asyncio
    async def test_empty_registry_no_match(self, matchmaker: Matchmaker):
        assert await matchmaker.request_match("A") is None

    @pytest.mark.asyncio
    async def test_self_only_registry_sends_nothing(self, matchmaker, registry, make_handle):
        handle = make_handle("a")
        registry.register("A", handle)

        assert await matchmaker.request_match("A") is None
        assert handle.sent == []

    @pytest.mark.asyncio
    async def test_match_notifies_both_then_broadcasts(self, matchmaker, registry, make_handle):
        a, b, c = make_handle("a"), make_handle("b"), make_handle("c")
        registry.register("A", a)
        registry.register("B", b)
        registry.register("C", c)

        assert await matchmaker.request_match("A") == "B"

        assert a.kinds() == ["match-found", "user-list"]
        assert b.kinds() == ["match-found", "user-list"]
        # Bystanders only see the presence broadcast
        assert c.kinds() == ["user-list"]
        assert a.sent[0]["users"] == ["A", "B"]
        assert b.sent[0]["users"] == ["A", "B"]
        assert a.sent[1]["users"] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_match_is_recorded_in_ledger(self, matchmaker, registry, ledger, make_handle):
        registry.register("A", make_handle())
        registry.register("B", make_handle())

        await matchmaker.request_match("A")

        assert ledger.are_paired("A", "B")
        assert ledger.are_paired("B", "A")

    def test_candidates_exclude_requester(self, registry, broadcaster, fixed_choice, make_handle):
        rng = fixed_choice("A")
        matchmaker = Matchmaker(registry, broadcaster, rng=rng)
        for identity in "ABC":
            registry.register(identity, make_handle(identity))

        assert matchmaker.find_match("A") == "B"
        assert rng.calls == [["B", "C"]]

    def test_never_returns_requester(self, registry, broadcaster, make_handle):
        matchmaker = Matchmaker(registry, broadcaster, rng=random.Random(7))
        for identity in "ABCDE":
            registry.register(identity, make_handle(identity))

        for _ in range(200):
            assert matchmaker.find_match("C") in {"A", "B", "D", "E"}

    def test_draw_covers_all_candidates(self, registry, broadcaster, make_handle):
        matchmaker = Matchmaker(registry, broadcaster, rng=random.Random(1))
        for identity in "ABCD":
            registry.register(identity, make_handle(identity))

        seen = {matchmaker.find_match("A") for _ in range(300)}
        assert seen == {"B", "C", "D"}

    @pytest.mark.asyncio
    async def test_candidate_gone_before_delivery(self, registry, broadcaster, make_handle):
        a = make_handle("a")
        registry.register("A", a)
        registry.register("B", make_handle("b"))

        class DropsCandidate:
            def choice(self, seq):
                registry.deregister("B")
                return "B"

        matchmaker = Matchmaker(registry, broadcaster, rng=DropsCandidate())

        assert await matchmaker.request_match("A") == "B"
        assert a.sent[0] == {"type": "match-found", "users": ["A", "B"]}
        assert a.sent[1] == {"type": "user-list", "users": ["A"]}

    @pytest.mark.asyncio
    async def test_failed_send_does_not_stop_match(self, matchmaker, registry, make_handle):
        a = make_handle("a", fail=True)
        b = make_handle("b")
        registry.register("A", a)
        registry.register("B", b)

        assert await matchmaker.request_match("A") == "B"
        assert b.kinds() == ["match-found", "user-list"]
