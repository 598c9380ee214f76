"""Signaling message protocol definitions.

Frames are JSON objects whose ``type`` field names the message kind. The
wire names are the ones deployed browser clients already speak, so they
must not change.
"""

import json
from typing import Any, Iterable

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from pairsignal.exceptions import MalformedMessage


class MessageKinds:
    """Wire names for every message kind."""

    # server -> client
    IDENTITY_ASSIGNED = "user-id"
    MATCH_FOUND = "match-found"
    PRESENCE_UPDATE = "user-list"

    # client -> server
    MATCH_REQUEST = "match"

    # client -> server -> client
    OFFER = "offer"
    ANSWER = "answer"
    ICE_CANDIDATE = "ice-candidate"


NEGOTIATION_KINDS = frozenset(
    {MessageKinds.OFFER, MessageKinds.ANSWER, MessageKinds.ICE_CANDIDATE}
)

KNOWN_KINDS = frozenset(
    {
        MessageKinds.IDENTITY_ASSIGNED,
        MessageKinds.MATCH_REQUEST,
        MessageKinds.MATCH_FOUND,
        MessageKinds.PRESENCE_UPDATE,
    }
    | NEGOTIATION_KINDS
)


class SignalingMessage(BaseModel):
    """Signaling message envelope."""

    model_config = ConfigDict(populate_by_name=True)

    kind: str = Field(..., alias="type", description="Message kind")
    user_id: str | None = Field(None, alias="userId", description="Assigned identity")
    sender_id: str | None = Field(None, alias="senderId", description="Relaying identity")
    users: list[str] | None = Field(None, description="Pair or presence list")
    data: Any = Field(None, description="Opaque negotiation payload")

    @property
    def has_data(self) -> bool:
        """True when ``data`` was given explicitly, even as null."""
        return "data" in self.model_fields_set

    @property
    def is_negotiation(self) -> bool:
        return self.kind in NEGOTIATION_KINDS

    def to_wire(self) -> dict[str, Any]:
        """Dump only the fields that were set, under their wire names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


def parse_message(raw: str | bytes) -> SignalingMessage:
    """Decode one inbound frame.

    Raises:
        MalformedMessage: the frame is not a JSON object with a string
            ``type``, or a negotiation frame does not declare ``users`` as a
            list of strings. Fields other kinds do not use are not checked.
    """
    if isinstance(raw, (bytes, bytearray, memoryview)):
        try:
            raw = bytes(raw).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedMessage(f"Frame is not valid UTF-8: {e}") from e

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedMessage(f"Invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedMessage(f"Expected a JSON object, got {type(payload).__name__}")
    kind = payload.get("type")
    if not isinstance(kind, str):
        raise MalformedMessage("Missing or non-string 'type'")

    # Only negotiation frames carry fields the server reads
    fields: dict[str, Any] = {"type": kind}
    if kind in NEGOTIATION_KINDS:
        fields.update({k: payload[k] for k in ("users", "data") if k in payload})

    try:
        message = SignalingMessage.model_validate(fields)
    except ValidationError as e:
        raise MalformedMessage(f"Invalid message fields: {e.error_count()} error(s)") from e

    if message.is_negotiation and message.users is None:
        raise MalformedMessage(f"'{message.kind}' message without 'users'")
    return message


def encode_message(message: SignalingMessage) -> str:
    return json.dumps(message.to_wire())


def identity_assigned(identity: str) -> SignalingMessage:
    return SignalingMessage(kind=MessageKinds.IDENTITY_ASSIGNED, user_id=identity)


def match_found(users: Iterable[str]) -> SignalingMessage:
    return SignalingMessage(kind=MessageKinds.MATCH_FOUND, users=list(users))


def presence_update(users: Iterable[str]) -> SignalingMessage:
    return SignalingMessage(kind=MessageKinds.PRESENCE_UPDATE, users=list(users))


def relayed(kind: str, sender_id: str, data: Any = None, *, has_data: bool = True) -> SignalingMessage:
    """Build the frame forwarded to the other member of a pair.

    ``data`` is attached untouched; it is left off entirely when the sender
    did not include it.
    """
    if has_data:
        return SignalingMessage(kind=kind, sender_id=sender_id, data=data)
    return SignalingMessage(kind=kind, sender_id=sender_id)
