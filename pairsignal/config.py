import os
from typing import Any, ClassVar, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(".env")


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    _instance: ClassVar[Optional["Settings"]] = None

    # Listener
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(
        default_factory=lambda: int(os.getenv("PORT", "3000")),
        description="Listening port",
    )
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    # Identity issuing
    identity_length: int = Field(
        default_factory=lambda: int(os.getenv("IDENTITY_LENGTH", "11")),
        description="Number of base36 characters in a generated identity",
    )
    identity_max_attempts: int = Field(
        default_factory=lambda: int(os.getenv("IDENTITY_MAX_ATTEMPTS", "8")),
        description="Collision retries before a connection attempt is rejected",
    )

    # Transport
    ping_interval: float = Field(default_factory=lambda: float(os.getenv("PING_INTERVAL", "20")))
    ping_timeout: float = Field(default_factory=lambda: float(os.getenv("PING_TIMEOUT", "20")))
    max_message_size: int = Field(
        default_factory=lambda: int(os.getenv("MAX_MESSAGE_SIZE", str(1024 * 1024)))
    )
    outbound_queue_size: int = Field(
        default_factory=lambda: int(os.getenv("OUTBOUND_QUEUE_SIZE", "256"))
    )

    # Relay policy
    enforce_pairings: bool = Field(
        default_factory=lambda: _env_bool("ENFORCE_PAIRINGS"),
        description="Only relay between identities this server matched together",
    )

    def __new__(cls, *args: Any, **kwargs: Any) -> Any:
        if not hasattr(cls, "_instance") or cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if hasattr(self, "_initialized"):
            return
        super().__init__(*args, **kwargs)
        self._initialized = True


# Create singleton instance
settings = Settings()
