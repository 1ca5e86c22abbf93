from dataclasses import dataclass, field
from typing import List
import os

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:5174,http://localhost:5175"


@dataclass
class Settings:
    """Service settings, overridable through SKIRMISH_* environment variables."""

    seed: int = 42
    tick_ms: int = 1000  # one tick per second
    time_compression: float = 1.0
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: DEFAULT_CORS_ORIGINS.split(","))

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables with type conversion."""
        return cls(
            seed=int(os.getenv("SKIRMISH_SEED", "42")),
            tick_ms=max(1, int(os.getenv("SKIRMISH_TICK_MS", "1000"))),
            time_compression=float(os.getenv("SKIRMISH_TIME_COMPRESSION", "1.0")),
            log_level=os.getenv("SKIRMISH_LOG_LEVEL", "INFO").upper(),
            cors_origins=[o.strip() for o in os.getenv("SKIRMISH_CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
                          if o.strip()],
        )
