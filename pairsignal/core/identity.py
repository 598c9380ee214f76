"""Identity token generation."""

import secrets
import string
from collections.abc import Callable

IDENTITY_ALPHABET = string.digits + string.ascii_lowercase

IdentityFactory = Callable[[], str]


def generate_identity(length: int = 11) -> str:
    """Return a random base36 token."""
    return "".join(secrets.choice(IDENTITY_ALPHABET) for _ in range(max(1, length)))


def identity_factory(length: int = 11) -> IdentityFactory:
    """Bind ``length`` into a zero-argument generator."""

    def factory() -> str:
        return generate_identity(length)

    return factory
