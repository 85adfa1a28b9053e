"""
Event types published by a SyncClient.

Events are immutable data carriers. Subscribers react to them; they do not
contain business logic.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from ordersync.order import OrderRecord


@dataclass(frozen=True)
class Event:
    """Base type for all events. Subclass to define event kinds."""

    timestamp: datetime
    payload: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.timestamp, datetime):
            object.__setattr__(self, "timestamp", datetime.fromisoformat(str(self.timestamp)))


@dataclass(frozen=True)
class SnapshotChanged(Event):
    """The local snapshot was replaced. ``orders`` is the whole new snapshot."""

    orders: tuple[OrderRecord, ...] = ()


@dataclass(frozen=True)
class ConnectivityChanged(Event):
    """The snapshot stream went up or down."""

    connected: bool = True
    error: Exception | None = None
