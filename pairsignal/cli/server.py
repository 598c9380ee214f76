"""CLI for the pairsignal WebSocket server."""

import argparse
import asyncio
import signal
import sys

from pairsignal.config import settings
from pairsignal.exceptions import ServerStartupError
from pairsignal.logger import define_log_level
from pairsignal.logger import logger
from pairsignal.ws.server import SignalingServer


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pairsignal",
        description="Signaling relay that pairs WebSocket clients and forwards offer/answer/ICE messages",
    )
    parser.add_argument(
        "--host", default=settings.host, help=f"Server host address (default: {settings.host})"
    )
    parser.add_argument(
        "--port", type=int, default=settings.port, help=f"Server port (default: {settings.port}, env PORT)"
    )
    parser.add_argument(
        "--enforce-pairings",
        action="store_true",
        default=settings.enforce_pairings,
        help="Only relay between identities this server matched together",
    )
    parser.add_argument(
        "--max-message-size",
        type=int,
        default=settings.max_message_size,
        help="Maximum inbound frame size in bytes",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def build_server(args: argparse.Namespace) -> SignalingServer:
    return SignalingServer(
        host=args.host,
        port=args.port,
        identity_length=settings.identity_length,
        max_identity_attempts=settings.identity_max_attempts,
        enforce_pairings=args.enforce_pairings,
        ping_interval=settings.ping_interval,
        ping_timeout=settings.ping_timeout,
        max_message_size=args.max_message_size,
        outbound_queue_size=settings.outbound_queue_size,
    )


async def run_server(args: argparse.Namespace) -> int:
    """Run WebSocket server until SIGINT/SIGTERM."""
    server = build_server(args)

    loop = asyncio.get_running_loop()
    shutdown_requested = False

    def handle_shutdown():
        nonlocal shutdown_requested
        if not shutdown_requested:
            shutdown_requested = True
            loop.create_task(server.shutdown())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, handle_shutdown)
        except NotImplementedError:
            # Windows event loops lack add_signal_handler
            pass

    try:
        await server.start_server()
        return 0
    except ServerStartupError as e:
        logger.error(f"Startup aborted: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    define_log_level("DEBUG" if args.debug else settings.log_level)
    try:
        return asyncio.run(run_server(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
