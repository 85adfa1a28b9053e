"""
PasscodeGate: 8-digit staff passcode and the session login flag.

Plain string comparison, no hashing, no rate limiting.
"""

from __future__ import annotations

import logging

from ordersync.config import is_valid_passcode
from ordersync.errors import InvalidPasscode
from ordersync.preferences import Preferences

logger = logging.getLogger(__name__)


class PasscodeGate:
    def __init__(self, preferences: Preferences | None = None) -> None:
        self.preferences = preferences or Preferences()

    def verify(self, code: str) -> bool:
        """Exact match against the current passcode."""
        return code == self.preferences.passcode

    def set(self, code: str) -> bool:
        """Replace the passcode. Returns False, changing nothing, unless code is 8 ASCII digits."""
        try:
            self._require_valid(code)
        except InvalidPasscode as e:
            logger.info("Passcode not changed: %s", e)
            return False
        self.preferences.passcode = code
        logger.info("Passcode changed")
        return True

    @staticmethod
    def _require_valid(code: str) -> None:
        if not is_valid_passcode(code):
            raise InvalidPasscode("passcode must be exactly 8 digits")

    @property
    def is_authenticated(self) -> bool:
        return self.preferences.session_authenticated

    def login(self, code: str) -> bool:
        if not self.verify(code):
            logger.warning("Staff login rejected")
            return False
        self.preferences.session_authenticated = True
        return True

    def logout(self) -> None:
        self.preferences.session_authenticated = False
