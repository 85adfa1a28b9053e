"""
Local preferences that live outside the remote store.

Auto-print flag and passcode are persisted as JSON when a path is configured.
The authenticated flag belongs to the running session and is never written.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from ordersync.config import Settings, is_valid_passcode

logger = logging.getLogger(__name__)


class Preferences:
    """
    Small key/value store for one client. Without a path it is in-memory only.
    A missing or unreadable file falls back to the configured defaults.
    """

    def __init__(self, path: str | Path | None = None, *, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.path = Path(path) if path is not None else self.settings.preferences_path
        self._values: dict[str, Any] = self._load()
        self.session_authenticated = False

    @classmethod
    def from_settings(cls, settings: Settings) -> Preferences:
        return cls(settings=settings)

    def _load(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: not a JSON object", self.path)
            return {}
        return data

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")

    @property
    def auto_print_enabled(self) -> bool:
        return bool(self._values.get("autoPrint", self.settings.auto_print_default))

    @auto_print_enabled.setter
    def auto_print_enabled(self, value: bool) -> None:
        self._values["autoPrint"] = bool(value)
        self._save()

    @property
    def passcode(self) -> str:
        stored = self._values.get("passcode")
        if stored is None:
            return self.settings.default_passcode
        if not is_valid_passcode(stored):
            logger.warning("Stored passcode is not 8 digits; using the default passcode.")
            return self.settings.default_passcode
        return stored

    @passcode.setter
    def passcode(self, value: str) -> None:
        self._values["passcode"] = value
        self._save()
