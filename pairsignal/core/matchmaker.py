"""Random single-shot matchmaking."""

import random
from typing import Optional

from pairsignal.logger import logger
from pairsignal.protocol import match_found
from .delivery import deliver
from .pairings import PairingLedger
from .presence import PresenceBroadcaster
from .registry import ConnectionRegistry


class Matchmaker:
    """Pairs a requester with a uniformly random other registered identity.

    There is no waiting list: a request that finds nobody is dropped, so a
    requester may go unmatched indefinitely while others are matched.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        broadcaster: PresenceBroadcaster,
        ledger: Optional[PairingLedger] = None,
        rng: Optional[random.Random] = None,
    ):
        self.registry = registry
        self.broadcaster = broadcaster
        self.ledger = ledger
        self.rng = rng or random.Random()

    def find_match(self, requester_id: str) -> Optional[str]:
        """Draw a candidate other than ``requester_id``, or None if there is none."""
        candidates = [
            identity for identity in self.registry.snapshot() if identity != requester_id
        ]
        if not candidates:
            return None
        return self.rng.choice(candidates)

    async def request_match(self, requester_id: str) -> Optional[str]:
        """Match ``requester_id`` and notify both sides.

        On success both members receive ``match-found`` listing the pair and
        a presence broadcast follows. Without a candidate nothing is sent.
        """
        matched_id = self.find_match(requester_id)
        if matched_id is None:
            logger.debug(f"No match candidate for {requester_id}")
            return None

        pair = [requester_id, matched_id]
        if self.ledger is not None:
            self.ledger.record(requester_id, matched_id)

        message = match_found(pair)
        for identity in pair:
            # The candidate may have disconnected since the draw
            handle = self.registry.resolve(identity)
            if handle is not None:
                await deliver(identity, handle, message)

        logger.info(f"Matched {requester_id} with {matched_id}")
        await self.broadcaster.broadcast()
        return matched_id
