"""Connection handle bound to one websocket."""

from typing import Any

from pairsignal.protocol import SignalingMessage
from pairsignal.protocol import encode_message
from .outbound import OutboundChannel


class WebSocketHandle:
    """What the signaling core sees of a websocket: a way to send to it."""

    def __init__(self, websocket: Any, outbound: OutboundChannel):
        self.websocket = websocket
        self.outbound = outbound

    @property
    def remote_address(self) -> Any:
        return getattr(self.websocket, "remote_address", None)

    async def send(self, message: SignalingMessage) -> None:
        """Queue ``message`` for the socket's writer.

        Raises:
            ConnectionError: the channel is closed or its queue is full.
        """
        if not self.outbound.enqueue(encode_message(message)):
            state = "closed" if self.outbound.closed else "full"
            raise ConnectionError(f"outbound queue {state}")
