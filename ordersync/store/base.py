"""
Remote order store abstraction.

RemoteOrderStore ABC: append, patch_status, subscribe. Replication is
full-snapshot: every change delivers the whole collection to every
subscriber. A delta-based backend implements the same interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from ordersync.errors import SubscriptionError
from ordersync.order import OrderRecord, OrderStatus

# remote_key -> wire payload (see OrderRecord.to_wire)
Collection = dict[str, dict[str, Any]]
SnapshotCallback = Callable[[Collection], None]
ErrorCallback = Callable[[SubscriptionError], None]


class Subscription:
    """
    Handle returned by subscribe(). Call unsubscribe() exactly when the
    owner is torn down; repeated calls are harmless.
    """

    def __init__(self, release: Callable[[], None]) -> None:
        self._release: Callable[[], None] | None = release

    @property
    def active(self) -> bool:
        return self._release is not None

    def unsubscribe(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()


class RemoteOrderStore(ABC):
    """
    Abstract store adapter. Same interface for the in-process paper store
    and any networked backend.
    """

    @abstractmethod
    def append(self, record: OrderRecord) -> str:
        """
        Durably store a new order and return the store-assigned remote key.
        Raises WriteFailure on transport error. Never retries.
        """
        ...

    @abstractmethod
    def patch_status(self, remote_key: str, status: OrderStatus) -> None:
        """
        Update the status field of one record, leaving every other field alone.
        Raises WriteFailure if the key is unknown or the transport is down.
        """
        ...

    @abstractmethod
    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        """
        Register for full-collection snapshots. on_snapshot is called once
        immediately with the current state, then after every change by any
        client. on_error is called on disconnect; there is no silent recovery,
        the caller must resubscribe.
        """
        ...
