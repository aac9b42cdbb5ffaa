"""
Local Cache

A small string key-value store persisted as one JSON file. Used for the
theme preference, the signed-in user and the pre-remote state snapshot.

DESIGN DECISION: Nothing read from here is trusted. A malformed file is
treated as an empty cache, and callers validate the values they read
field by field (see fintrack.validation.snapshot).
"""

import json
from pathlib import Path
from typing import Any, Optional

from fintrack.audit import AuditLogger


STATE_KEY = "fintrack_state"
USER_KEY = "fintrack_user"
THEME_KEY = "fintrack_theme"


class LocalCache:
    """
    String key-value cache backed by a JSON file.

    With no path the cache lives in memory only, which is what the
    tests use.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._path = Path(path) if path else None
        self._audit_logger = audit_logger or AuditLogger()
        self._data: dict[str, str] = self._load()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._audit_logger.log_cache_corrupted(str(self._path), str(e))
            return {}

        if not isinstance(raw, dict):
            self._audit_logger.log_cache_corrupted(
                str(self._path), "Cache file is not a JSON object"
            )
            return {}

        # Only string values are kept; anything else is a foreign write
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(self._data), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        """Drop every key, including the file contents."""
        self._data = {}
        self._flush()

    def get_json(self, key: str) -> Any:
        """
        Read and decode a JSON value.

        Returns None when the key is missing or the value is not valid JSON.
        """
        value = self.get(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except ValueError as e:
            self._audit_logger.log_cache_corrupted(key, str(e))
            return None

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))
