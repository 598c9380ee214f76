"""Signaling core: registry, matchmaking, relay, presence and lifecycle."""

from .lifecycle import Connection, ConnectionState, SignalingController
from .matchmaker import Matchmaker
from .pairings import PairingLedger
from .presence import PresenceBroadcaster
from .registry import ConnectionRegistry
from .relay import SessionRelay

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    "Matchmaker",
    "PairingLedger",
    "PresenceBroadcaster",
    "SessionRelay",
    "SignalingController",
]
