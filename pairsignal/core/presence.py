"""Presence broadcasting."""

from pairsignal.logger import logger
from pairsignal.protocol import presence_update
from .delivery import deliver
from .registry import ConnectionRegistry


class PresenceBroadcaster:
    """Publishes the registered identity list to every registered connection."""

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def broadcast(self) -> int:
        """Send one ``user-list`` frame to each registered handle.

        Recipients and list content come from the same registry copy, so a
        handle that is mid-deregistration is neither listed nor sent to.
        Returns the number of successful sends.
        """
        bindings = self.registry.items()
        message = presence_update(identity for identity, _ in bindings)

        sent = 0
        for identity, handle in bindings:
            if await deliver(identity, handle, message):
                sent += 1

        logger.debug(f"Presence broadcast: {len(bindings)} identities, {sent} delivered")
        return sent
