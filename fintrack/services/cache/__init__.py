"""Local key-value cache used for theme, user and snapshot persistence."""

from fintrack.services.cache.local_cache import (
    STATE_KEY,
    THEME_KEY,
    USER_KEY,
    LocalCache,
)

__all__ = [
    "LocalCache",
    "STATE_KEY",
    "THEME_KEY",
    "USER_KEY",
]
