"""Error kinds raised by the signaling core."""


class SignalingError(Exception):
    """Base class for signaling errors."""


class DuplicateIdentity(SignalingError):
    """An identity is already bound in the registry."""

    def __init__(self, identity: str):
        super().__init__(f"Identity already registered: {identity}")
        self.identity = identity


class IdentityExhaustion(SignalingError):
    """No unique identity could be generated within the retry bound."""

    def __init__(self, attempts: int):
        super().__init__(f"Could not issue a unique identity after {attempts} attempts")
        self.attempts = attempts


class MalformedMessage(SignalingError):
    """An inbound frame could not be decoded into a signaling message."""


class UnresolvedRecipient(SignalingError):
    """The recipient of a relayed message is not registered."""

    def __init__(self, identity: str | None):
        super().__init__(f"Recipient not registered: {identity}")
        self.identity = identity


class ServerStartupError(SignalingError):
    """The listener could not be started (e.g. the port is already bound)."""
