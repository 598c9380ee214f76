"""Connection registry mapping identities to live connection handles."""

import threading
from typing import Any, Dict, List, Optional, Tuple

from pairsignal.logger import logger
from pairsignal.exceptions import DuplicateIdentity


class ConnectionRegistry:
    """Guarded mapping of identity -> connection handle.

    Every operation takes the internal lock only for the dictionary access
    itself; callers send on handles after the lock is released.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._handles: Dict[str, Any] = {}

    def register(self, identity: str, handle: Any) -> None:
        """Bind ``identity`` to ``handle``.

        Raises:
            DuplicateIdentity: the identity is already bound.
        """
        with self._lock:
            if identity in self._handles:
                raise DuplicateIdentity(identity)
            self._handles[identity] = handle
            total = len(self._handles)
        logger.debug(f"Registered identity {identity} | Registered: {total}")

    def deregister(self, identity: str) -> bool:
        """Remove the binding for ``identity``. Absent identities are ignored."""
        with self._lock:
            removed = self._handles.pop(identity, None) is not None
            total = len(self._handles)
        if removed:
            logger.debug(f"Deregistered identity {identity} | Registered: {total}")
        return removed

    def resolve(self, identity: Optional[str]) -> Optional[Any]:
        """Return the handle bound to ``identity`` or None."""
        if identity is None:
            return None
        with self._lock:
            return self._handles.get(identity)

    def snapshot(self) -> List[str]:
        """Return a copy of the registered identities in registration order."""
        with self._lock:
            return list(self._handles)

    def items(self) -> List[Tuple[str, Any]]:
        """Return a copy of the (identity, handle) bindings."""
        with self._lock:
            return list(self._handles.items())

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._handles

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)
