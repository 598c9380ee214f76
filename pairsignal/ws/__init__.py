"""WebSocket transport for pairsignal."""

from .handle import WebSocketHandle
from .outbound import OutboundChannel
from .server import SignalingServer
from .utils import close_websocket_safely
from .utils import get_websocket_info
from .utils import is_websocket_closed

__all__ = [
    "OutboundChannel",
    "SignalingServer",
    "WebSocketHandle",
    "close_websocket_safely",
    "get_websocket_info",
    "is_websocket_closed",
]
