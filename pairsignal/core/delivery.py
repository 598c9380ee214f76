"""Fire-and-forget delivery to a connection handle."""

from typing import Any

from pairsignal.logger import logger
from pairsignal.protocol import SignalingMessage


async def deliver(identity: str, handle: Any, message: SignalingMessage) -> bool:
    """Send ``message`` on ``handle``.

    Failures are logged and reported as False; they never reach the
    component that triggered the send.
    """
    try:
        await handle.send(message)
        return True
    except Exception as e:
        logger.error(f"Failed to deliver '{message.kind}' to {identity}: {e}")
        return False
