"""Centralized configuration loading.

Loads environment variables once and provides a typed Settings object
for the rest of the codebase. Entry points call get_settings() and pass the
result down instead of reading os.environ themselves.
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv


# Load .env once at import time
load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


@dataclass
class Settings:
    # Database (root-level data directory by default)
    database_url: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(PROJECT_ROOT, "data", "finance.db"),
    )

    # Defective tire sales: delay before the post-commit resync
    resync_delay_ms: int = int(os.getenv("TW_RESYNC_DELAY_MS", "2500"))

    # Dashboard
    default_view: str = os.getenv("TW_DEFAULT_VIEW", "cashflow")

    # Logging / observability
    log_level: str = os.getenv("TW_LOG_LEVEL", "INFO")
    event_buffer_size: int = int(os.getenv("TW_EVENT_BUFFER", "200"))

    def __post_init__(self) -> None:
        if self.resync_delay_ms < 0:
            raise ValueError("resync_delay_ms must be >= 0")
        if self.event_buffer_size <= 0:
            raise ValueError("event_buffer_size must be > 0")

    @property
    def resync_delay_seconds(self) -> float:
        return self.resync_delay_ms / 1000.0


def get_settings() -> Settings:
    """Return a new Settings instance (cheap dataclass construction)."""
    return Settings()
