"""Per-connection lifecycle and message dispatch."""

import random
from enum import Enum
from typing import Any, AsyncIterable, Optional

from pairsignal.exceptions import DuplicateIdentity
from pairsignal.exceptions import IdentityExhaustion
from pairsignal.exceptions import MalformedMessage
from pairsignal.logger import logger
from pairsignal.protocol import MessageKinds
from pairsignal.protocol import SignalingMessage
from pairsignal.protocol import identity_assigned
from pairsignal.protocol import parse_message
from .delivery import deliver
from .identity import IdentityFactory
from .identity import identity_factory
from .matchmaker import Matchmaker
from .pairings import PairingLedger
from .presence import PresenceBroadcaster
from .registry import ConnectionRegistry
from .relay import SessionRelay


class ConnectionState(str, Enum):
    """Connection lifecycle state."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"  # Terminal


class Connection:
    """Lifecycle record for one accepted transport connection."""

    def __init__(self, handle: Any):
        self.handle = handle
        self.identity: Optional[str] = None
        self.state = ConnectionState.CONNECTING

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def __repr__(self) -> str:
        return f"Connection(identity={self.identity!r}, state={self.state.value})"


class SignalingController:
    """Wires registry, matchmaker, relay and broadcaster to connection events.

    ``connect``/``receive``/``disconnect`` are the three transport events;
    ``run`` drives one connection from an inbound frame stream.
    """

    def __init__(
        self,
        registry: Optional[ConnectionRegistry] = None,
        *,
        identity_source: Optional[IdentityFactory] = None,
        max_identity_attempts: int = 8,
        enforce_pairings: bool = False,
        rng: Optional[random.Random] = None,
    ):
        self.registry = registry or ConnectionRegistry()
        self.ledger = PairingLedger()
        self.broadcaster = PresenceBroadcaster(self.registry)
        self.matchmaker = Matchmaker(
            self.registry, self.broadcaster, ledger=self.ledger, rng=rng
        )
        self.relay = SessionRelay(
            self.registry, ledger=self.ledger, enforce_pairings=enforce_pairings
        )
        self.identity_source = identity_source or identity_factory()
        self.max_identity_attempts = max(1, max_identity_attempts)

    # ----------------------------
    # Transport events
    # ----------------------------
    async def connect(self, handle: Any) -> Connection:
        """Issue an identity for ``handle`` and register it.

        Only the new connection is told its identity; presence is not
        broadcast on connect.

        Raises:
            IdentityExhaustion: no unique identity within the retry bound.
                The connection is left CLOSED and nothing is registered.
        """
        connection = Connection(handle)
        try:
            connection.identity = self._register(handle)
        except IdentityExhaustion:
            connection.state = ConnectionState.CLOSED
            raise

        connection.state = ConnectionState.OPEN
        await deliver(connection.identity, handle, identity_assigned(connection.identity))
        return connection

    async def receive(self, connection: Connection, raw: str | bytes) -> None:
        """Parse and dispatch one inbound frame. Malformed frames are dropped."""
        if not connection.is_open:
            logger.debug(f"Dropped frame for {connection.identity}: connection is {connection.state.value}")
            return

        try:
            message = parse_message(raw)
        except MalformedMessage as e:
            logger.warning(f"Malformed message from {connection.identity}: {e}")
            return

        await self.dispatch(connection, message)

    async def disconnect(self, connection: Connection) -> None:
        """Deregister and broadcast presence. Repeated calls are no-ops."""
        if connection.state is ConnectionState.CLOSED:
            return

        was_open = connection.is_open
        connection.state = ConnectionState.CLOSED
        if connection.identity is None:
            return

        self.registry.deregister(connection.identity)
        self.ledger.forget(connection.identity)
        logger.info(
            f"Disconnected {connection.identity} | Registered: {len(self.registry)}"
        )
        if was_open:
            await self.broadcaster.broadcast()

    async def run(self, connection: Connection, frames: AsyncIterable[str | bytes]) -> None:
        """Consume ``frames`` until the stream ends or fails, then disconnect."""
        try:
            async for raw in frames:
                await self.receive(connection, raw)
        finally:
            await self.disconnect(connection)

    # ----------------------------
    # Dispatch
    # ----------------------------
    async def dispatch(self, connection: Connection, message: SignalingMessage) -> None:
        sender_id = connection.identity
        if message.kind == MessageKinds.MATCH_REQUEST:
            await self.matchmaker.request_match(sender_id)
        elif message.is_negotiation:
            await self.relay.relay(
                sender_id,
                message.users,
                message.kind,
                message.data,
                has_data=message.has_data,
            )
        else:
            logger.debug(f"Ignored '{message.kind}' from {sender_id}")

    def _register(self, handle: Any) -> str:
        for _ in range(self.max_identity_attempts):
            candidate = self.identity_source()
            if not candidate or candidate in self.registry:
                continue
            try:
                self.registry.register(candidate, handle)
            except DuplicateIdentity:
                # Lost a race with a concurrent registration
                continue
            return candidate
        raise IdentityExhaustion(self.max_identity_attempts)
