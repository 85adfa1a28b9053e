"""
Runtime configuration from environment variables.

ORDERSYNC_PREFERENCES_PATH: JSON file for local preferences (unset: in-memory only).
ORDERSYNC_DEFAULT_PASSCODE: initial 8-digit passcode when none is stored.
ORDERSYNC_AUTO_PRINT: initial auto-print flag when none is stored ("true"/"false").
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PREFERENCES_PATH_ENV = "ORDERSYNC_PREFERENCES_PATH"
DEFAULT_PASSCODE_ENV = "ORDERSYNC_DEFAULT_PASSCODE"
AUTO_PRINT_ENV = "ORDERSYNC_AUTO_PRINT"

DEFAULT_PASSCODE = "88888888"
PASSCODE_LENGTH = 8


def is_valid_passcode(code: str) -> bool:
    """Exactly 8 ASCII digits."""
    return (
        isinstance(code, str)
        and len(code) == PASSCODE_LENGTH
        and all(c in "0123456789" for c in code)
    )


@dataclass(frozen=True)
class Settings:
    preferences_path: Path | None = None
    default_passcode: str = DEFAULT_PASSCODE
    auto_print_default: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        path = os.environ.get(PREFERENCES_PATH_ENV, "").strip()
        passcode = os.environ.get(DEFAULT_PASSCODE_ENV, DEFAULT_PASSCODE)
        if not is_valid_passcode(passcode):
            logger.warning(
                "%s must be 8 digits; using the built-in default passcode.",
                DEFAULT_PASSCODE_ENV,
            )
            passcode = DEFAULT_PASSCODE
        return cls(
            preferences_path=Path(path) if path else None,
            default_passcode=passcode,
            auto_print_default=os.environ.get(AUTO_PRINT_ENV, "").lower() == "true",
        )
