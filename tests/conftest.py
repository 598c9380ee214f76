"""Pytest configuration and shared fixtures."""

import asyncio
import itertools
import json
from typing import Any, Callable, List

import pytest
from websockets.protocol import State

from pairsignal.core.lifecycle import SignalingController
from pairsignal.core.pairings import PairingLedger
from pairsignal.core.presence import PresenceBroadcaster
from pairsignal.core.registry import ConnectionRegistry
from pairsignal.protocol import SignalingMessage


class RecordingHandle:
    """In-memory connection handle that records wire frames."""

    def __init__(self, name: str = "", fail: bool = False):
        self.name = name
        self.fail = fail
        self.sent: List[dict[str, Any]] = []

    async def send(self, message: SignalingMessage) -> None:
        if self.fail:
            raise ConnectionError("socket gone")
        self.sent.append(message.to_wire())

    def kinds(self) -> List[str]:
        return [frame["type"] for frame in self.sent]

    def of_kind(self, kind: str) -> List[dict[str, Any]]:
        return [frame for frame in self.sent if frame["type"] == kind]

    def clear(self) -> None:
        self.sent.clear()


class FixedChoice:
    """Stand-in for random.Random that picks a preferred candidate."""

    def __init__(self, preferred: str | None = None):
        self.preferred = preferred
        self.calls: List[list] = []

    def choice(self, seq):
        self.calls.append(list(seq))
        if self.preferred in seq:
            return self.preferred
        return seq[0]


class FakeWebSocket:
    """Minimal websocket double: records sends, yields queued inbound frames."""

    def __init__(self, remote_address=("127.0.0.1", 54321)):
        self.remote_address = remote_address
        self.sent: List[str] = []
        self.state = State.OPEN
        self.close_code: int | None = None
        self.close_reason = ""
        self.incoming: asyncio.Queue = asyncio.Queue()

    async def send(self, frame: str) -> None:
        self.sent.append(frame)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.state = State.CLOSED
        self.close_code = code
        self.close_reason = reason
        self.incoming.put_nowait(None)

    def push(self, frame: Any) -> None:
        if not isinstance(frame, (str, bytes)):
            frame = json.dumps(frame)
        self.incoming.put_nowait(frame)

    def hang_up(self) -> None:
        self.incoming.put_nowait(None)

    def frames(self) -> List[dict[str, Any]]:
        return [json.loads(frame) for frame in self.sent]

    def __aiter__(self):
        return self

    async def __anext__(self):
        frame = await self.incoming.get()
        if frame is None:
            raise StopAsyncIteration
        return frame


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until true, letting writer tasks run."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def make_handle() -> Callable[..., RecordingHandle]:
    return RecordingHandle


@pytest.fixture
def make_websocket() -> Callable[..., FakeWebSocket]:
    return FakeWebSocket


@pytest.fixture
def fixed_choice() -> Callable[..., FixedChoice]:
    return FixedChoice


@pytest.fixture
def until() -> Callable[..., Any]:
    return wait_until


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def ledger() -> PairingLedger:
    return PairingLedger()


@pytest.fixture
def broadcaster(registry: ConnectionRegistry) -> PresenceBroadcaster:
    return PresenceBroadcaster(registry)


@pytest.fixture
def identity_source() -> Callable[[], str]:
    """Hands out A, B, C, ... in order."""
    names = (chr(c) for c in itertools.count(ord("A")))
    return lambda: next(names)


@pytest.fixture
def make_controller(identity_source) -> Callable[..., SignalingController]:
    def factory(preferred: str | None = None, **kwargs) -> SignalingController:
        kwargs.setdefault("identity_source", identity_source)
        kwargs.setdefault("rng", FixedChoice(preferred))
        return SignalingController(**kwargs)

    return factory
