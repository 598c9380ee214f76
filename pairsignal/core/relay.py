"""Point-to-point relay of negotiation messages."""

from typing import Any, Iterable, Optional, Tuple

from pairsignal.exceptions import UnresolvedRecipient
from pairsignal.logger import logger
from pairsignal.protocol import relayed
from .delivery import deliver
from .pairings import PairingLedger
from .registry import ConnectionRegistry


class SessionRelay:
    """Forwards offer/answer/candidate frames to the other declared participant.

    The pair is taken from the sender's own ``users`` list. Unless
    ``enforce_pairings`` is set, no check is made that the matchmaker ever
    paired the two identities.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        ledger: Optional[PairingLedger] = None,
        enforce_pairings: bool = False,
    ):
        if enforce_pairings and ledger is None:
            raise ValueError("enforce_pairings requires a PairingLedger")
        self.registry = registry
        self.ledger = ledger
        self.enforce_pairings = enforce_pairings

    @staticmethod
    def other_participant(sender_id: str, participants: Iterable[str]) -> Optional[str]:
        """First declared participant that is not the sender."""
        return next((p for p in participants if p != sender_id), None)

    def resolve_recipient(
        self, sender_id: str, declared_participants: Iterable[str]
    ) -> Tuple[str, Any]:
        """Return the recipient identity and its handle.

        Raises:
            UnresolvedRecipient: no other participant was declared, the pair
                is not allowed, or the recipient is not registered.
        """
        recipient_id = self.other_participant(sender_id, declared_participants)
        if recipient_id is None:
            raise UnresolvedRecipient(None)

        if self.enforce_pairings and not self.ledger.are_paired(sender_id, recipient_id):
            raise UnresolvedRecipient(recipient_id)

        handle = self.registry.resolve(recipient_id)
        if handle is None:
            raise UnresolvedRecipient(recipient_id)
        return recipient_id, handle

    async def relay(
        self,
        sender_id: str,
        declared_participants: Iterable[str],
        kind: str,
        data: Any = None,
        *,
        has_data: bool = True,
    ) -> bool:
        """Forward ``data`` to the other participant under ``kind``.

        Returns True if a frame was handed to the recipient's handle. An
        unresolved recipient is a silent no-op: the sender gets no error and
        no acknowledgement.
        """
        try:
            recipient_id, handle = self.resolve_recipient(sender_id, declared_participants)
        except UnresolvedRecipient as e:
            logger.debug(f"Dropped '{kind}' from {sender_id}: {e}")
            return False

        return await deliver(
            recipient_id, handle, relayed(kind, sender_id, data, has_data=has_data)
        )
