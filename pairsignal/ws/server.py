"""WebSocket server for pairsignal."""

import asyncio
import contextlib
import random
from datetime import datetime
from http import HTTPStatus
from typing import Any

from websockets.asyncio.server import ServerConnection
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed
from websockets.exceptions import WebSocketException
from websockets.http11 import Request

from pairsignal.core.identity import identity_factory
from pairsignal.core.lifecycle import SignalingController
from pairsignal.exceptions import IdentityExhaustion
from pairsignal.exceptions import ServerStartupError
from pairsignal.logger import logger
from .handle import WebSocketHandle
from .outbound import OutboundChannel
from .utils import close_websocket_safely
from .utils import get_websocket_info

# "Try Again Later": the client may reconnect and draw a new identity
CLOSE_TRY_AGAIN_LATER = 1013


class SignalingServer:
    """WebSocket transport around a SignalingController.

    One handler coroutine per accepted socket feeds inbound frames to the
    controller; every send goes through that socket's outbound channel.
    """

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 3000,
        *,
        controller: SignalingController | None = None,
        identity_length: int = 11,
        max_identity_attempts: int = 8,
        enforce_pairings: bool = False,
        ping_interval: float | None = 20,
        ping_timeout: float | None = 20,
        max_message_size: int = 1024 * 1024,
        outbound_queue_size: int = 256,
        rng: random.Random | None = None,
    ):
        self.host = host
        self.port = port
        self.controller = controller or SignalingController(
            identity_source=identity_factory(identity_length),
            max_identity_attempts=max_identity_attempts,
            enforce_pairings=enforce_pairings,
            rng=rng,
        )
        self.ping_interval = ping_interval
        self.ping_timeout = ping_timeout
        self.max_message_size = max_message_size
        self.outbound_queue_size = outbound_queue_size
        self.outbounds: dict[str, OutboundChannel] = {}
        self.websockets: set[ServerConnection] = set()
        self.bound_port: int | None = None
        self.running = False
        self.started = asyncio.Event()
        self.shutdown_event = asyncio.Event()

    @property
    def registry(self):
        return self.controller.registry

    async def handle_connection(self, websocket: ServerConnection, path: str | None = None):
        """Handle one accepted WebSocket connection until it closes."""
        self.websockets.add(websocket)
        outbound = OutboundChannel(websocket, maxsize=self.outbound_queue_size)
        outbound.start()
        handle = WebSocketHandle(websocket, outbound)
        identity = None

        try:
            try:
                connection = await self.controller.connect(handle)
            except IdentityExhaustion as e:
                logger.error(f"Rejected connection from {handle.remote_address}: {e}")
                await close_websocket_safely(
                    websocket, code=CLOSE_TRY_AGAIN_LATER, reason="identity exhaustion"
                )
                return

            identity = connection.identity
            outbound.name = f"conn-{identity}"
            self.outbounds[identity] = outbound
            logger.info(
                f"New WebSocket connection: {identity} from {handle.remote_address} "
                f"| Registered: {len(self.registry)}"
            )

            await self.controller.run(connection, websocket)

        except ConnectionClosed:
            logger.info(f"WebSocket connection closed: {identity}")
        except WebSocketException as e:
            logger.error(f"WebSocket error for {identity}: {e} | {get_websocket_info(websocket)}")
        finally:
            if identity is not None:
                self.outbounds.pop(identity, None)
            with contextlib.suppress(Exception):
                await outbound.close()
            self.websockets.discard(websocket)

    def process_request(self, connection: ServerConnection, request: Request) -> Any:
        """Answer plain HTTP requests; let WebSocket upgrades through."""
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None

        path = request.path.split("?", 1)[0]
        if path == "/":
            return connection.respond(HTTPStatus.OK, "Hello, World!\n")
        if path == "/healthz":
            return connection.respond(HTTPStatus.OK, "OK\n")
        return connection.respond(HTTPStatus.NOT_FOUND, "Not Found\n")

    async def start_server(self) -> None:
        """Start WebSocket server and serve until shutdown.

        Raises:
            ServerStartupError: the listening socket could not be bound.
        """
        if self.running:
            logger.warning("Server is already running")
            return

        try:
            server = await serve(
                self.handle_connection,
                self.host,
                self.port,
                process_request=self.process_request,
                ping_interval=self.ping_interval,
                ping_timeout=self.ping_timeout,
                max_size=self.max_message_size,
            )
        except OSError as e:
            logger.error(f"Cannot listen on {self.host}:{self.port}: {e}")
            raise ServerStartupError(f"Cannot listen on {self.host}:{self.port}: {e}") from e

        self.running = True
        sockets = list(server.sockets)
        self.bound_port = sockets[0].getsockname()[1] if sockets else self.port
        logger.info(f"Signaling server started at ws://{self.host}:{self.bound_port}")
        self.started.set()

        try:
            await self.shutdown_event.wait()
        finally:
            server.close()
            with contextlib.suppress(Exception):
                await server.wait_closed()
            self.running = False
            logger.info("Server stopped")

    async def shutdown(self) -> None:
        """Close every connection and stop the listener."""
        logger.info("Shutting down server...")
        for websocket in list(self.websockets):
            await close_websocket_safely(websocket, code=1001, reason="server shutdown")
        self.shutdown_event.set()

    def get_status(self) -> dict[str, Any]:
        """Get server status"""
        return {
            "running": self.running,
            "host": self.host,
            "port": self.bound_port or self.port,
            "registered": len(self.registry),
            "identities": self.registry.snapshot(),
            "enforce_pairings": self.controller.relay.enforce_pairings,
            "outbound_queues": {cid: ch.queue.qsize() for cid, ch in self.outbounds.items()},
            "server_time": datetime.now().isoformat(),
        }
