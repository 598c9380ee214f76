"""WebSocket utility functions for cross-version compatibility."""

from typing import Any, Dict

from websockets.protocol import State

from pairsignal.logger import logger


def is_websocket_closed(websocket: Any) -> bool:
    """Check if a WebSocket connection is closing or closed.

    Handles the differences between websockets library versions:
    - Older connection objects expose a 'closed' property
    - Newer ones expose 'state' and 'close_code'
    """
    if hasattr(websocket, "closed") and isinstance(websocket.closed, bool):
        return websocket.closed

    state = getattr(websocket, "state", None)
    if state in (State.CLOSING, State.CLOSED):
        return True

    return getattr(websocket, "close_code", None) is not None


async def close_websocket_safely(
    websocket: Any, code: int = 1000, reason: str = ""
) -> None:
    """Close a WebSocket connection, logging instead of raising on failure."""
    try:
        if not is_websocket_closed(websocket):
            await websocket.close(code=code, reason=reason)
    except Exception as e:
        logger.debug(f"Error closing websocket: {e}")


def get_websocket_info(websocket: Any) -> Dict[str, Any]:
    """Get information about a WebSocket connection for debugging."""
    info = {
        "closed": is_websocket_closed(websocket),
        "remote_address": getattr(websocket, "remote_address", None),
    }

    if hasattr(websocket, "close_code"):
        info["close_code"] = websocket.close_code
    if hasattr(websocket, "close_reason"):
        info["close_reason"] = websocket.close_reason
    if hasattr(websocket, "state"):
        info["state"] = str(websocket.state)

    return info
