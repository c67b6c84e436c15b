"""Infrastructure layer - storage, mail transport, configuration and LLM access."""

from maildraft.infrastructure.log_config import configure_logging
from maildraft.infrastructure.settings import Settings, get_settings
from maildraft.infrastructure.sqlite import SQLiteStore

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    # SQLite
    "SQLiteStore",
]
