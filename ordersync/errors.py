"""
Error taxonomy for the sync engine.

Every failure is raised by the operation that caused it and handled by its
caller; nothing here is retried automatically.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ordersync.order import OrderStatus


class OrderSyncError(Exception):
    """Base class for all engine errors."""


class WriteFailure(OrderSyncError):
    """A store write did not durably apply."""

    def __init__(self, message: str, *, operation: str, remote_key: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation
        self.remote_key = remote_key


class SubscriptionError(OrderSyncError):
    """The snapshot stream disconnected."""


class InvalidTransition(OrderSyncError):
    """A status change outside the allowed edge set. Raised before any write."""

    def __init__(self, current: "OrderStatus", target: "OrderStatus", reason: str) -> None:
        super().__init__(f"{reason} transition {current.value} -> {target.value} is not allowed")
        self.current = current
        self.target = target
        self.reason = reason


class InvalidPasscode(OrderSyncError, ValueError):
    """Passcode is not exactly 8 ASCII digits."""


class InvalidOrder(OrderSyncError, ValueError):
    """Order creation input is malformed (no items, bad price or quantity)."""
