"""Record of which identities were matched together by this server."""

import threading
from collections import defaultdict
from typing import Dict, Set


class PairingLedger:
    """Symmetric set of matched identity pairs."""

    def __init__(self):
        self._lock = threading.Lock()
        self._partners: Dict[str, Set[str]] = defaultdict(set)

    def record(self, first: str, second: str) -> None:
        if first == second:
            return
        with self._lock:
            self._partners[first].add(second)
            self._partners[second].add(first)

    def are_paired(self, first: str, second: str) -> bool:
        with self._lock:
            return second in self._partners.get(first, ())

    def forget(self, identity: str) -> None:
        """Drop every pair ``identity`` belongs to."""
        with self._lock:
            for partner in self._partners.pop(identity, set()):
                remaining = self._partners.get(partner)
                if remaining is None:
                    continue
                remaining.discard(identity)
                if not remaining:
                    del self._partners[partner]
