"""
pairsignal - signaling relay for peer-to-peer session setup

Clients connect over WebSocket, receive an identity, ask to be matched with
another connected client, then exchange offer/answer/ICE candidate messages
through the relay. The negotiated media never passes through the server.
"""

from .config import settings
from .core import Connection
from .core import ConnectionRegistry
from .core import ConnectionState
from .core import Matchmaker
from .core import PairingLedger
from .core import PresenceBroadcaster
from .core import SessionRelay
from .core import SignalingController
from .exceptions import DuplicateIdentity
from .exceptions import IdentityExhaustion
from .exceptions import MalformedMessage
from .exceptions import ServerStartupError
from .exceptions import SignalingError
from .exceptions import UnresolvedRecipient
from .logger import logger
from .protocol import MessageKinds
from .protocol import SignalingMessage
from .ws import SignalingServer

__version__ = "0.1.0"

__all__ = [
    # Core
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    "Matchmaker",
    "PairingLedger",
    "PresenceBroadcaster",
    "SessionRelay",
    "SignalingController",
    # Transport
    "SignalingServer",
    # Protocol
    "MessageKinds",
    "SignalingMessage",
    # Errors
    "DuplicateIdentity",
    "IdentityExhaustion",
    "MalformedMessage",
    "ServerStartupError",
    "SignalingError",
    "UnresolvedRecipient",
    # Components
    "logger",
    "settings",
]
