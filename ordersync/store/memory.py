"""
Paper store: an in-process RemoteOrderStore.

No network. Keeps the collection in memory and fans out deep copies of it to
every subscriber. Supports deferred delivery, injected write failures and
simulated disconnects so multi-client behavior can be exercised locally.
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from ordersync.errors import SubscriptionError, WriteFailure
from ordersync.order import OrderRecord, OrderStatus
from ordersync.store.base import Collection, ErrorCallback, RemoteOrderStore, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)

# (operation, remote_key) -> True to fail that write. operation is "append" or "patch_status".
WriteFault = Callable[[str, str | None], bool]


@dataclass
class _Listener:
    on_snapshot: SnapshotCallback
    on_error: ErrorCallback


class InMemoryOrderStore(RemoteOrderStore):
    """
    In-memory store shared by every client in the process.

    auto_deliver=True: subscribers are notified synchronously after each write.
    auto_deliver=False: notifications queue until deliver_pending(), which
    models the window between a write and its broadcast.
    """

    def __init__(
        self,
        *,
        auto_deliver: bool = True,
        write_fault: WriteFault | None = None,
    ) -> None:
        self._collection: Collection = {}
        self._listeners: dict[int, _Listener] = {}
        self._next_listener_id = 0
        self._auto_deliver = auto_deliver
        self._pending_broadcasts = 0
        self._connected = True
        self.write_fault = write_fault

    @property
    def connected(self) -> bool:
        return self._connected

    def _check_write(self, operation: str, remote_key: str | None) -> None:
        if not self._connected:
            raise WriteFailure("Store transport unavailable", operation=operation, remote_key=remote_key)
        if self.write_fault is not None and self.write_fault(operation, remote_key):
            raise WriteFailure("Injected write failure", operation=operation, remote_key=remote_key)

    def append(self, record: OrderRecord) -> str:
        self._check_write("append", None)
        remote_key = f"rk-{uuid.uuid4().hex[:12]}"
        self._collection[remote_key] = record.to_wire()
        logger.info("Appended order %s for table %s as %s", record.id, record.table_number, remote_key)
        self._changed()
        return remote_key

    def patch_status(self, remote_key: str, status: OrderStatus) -> None:
        self._check_write("patch_status", remote_key)
        if remote_key not in self._collection:
            raise WriteFailure(f"Unknown remote key {remote_key}", operation="patch_status", remote_key=remote_key)
        self._collection[remote_key]["status"] = status.value
        logger.info("Patched %s status=%s", remote_key, status.value)
        self._changed()

    def subscribe(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        if not self._connected:
            on_error(SubscriptionError("Store transport unavailable"))
            return Subscription(lambda: None)
        listener_id = self._next_listener_id
        self._next_listener_id += 1
        self._listeners[listener_id] = _Listener(on_snapshot, on_error)
        on_snapshot(self.snapshot())
        return Subscription(lambda: self._listeners.pop(listener_id, None))

    def snapshot(self) -> Collection:
        """Deep copy of the current collection."""
        return copy.deepcopy(self._collection)

    @property
    def subscriber_count(self) -> int:
        return len(self._listeners)

    def _changed(self) -> None:
        if self._auto_deliver:
            self._broadcast()
        else:
            self._pending_broadcasts += 1

    def _broadcast(self) -> None:
        for listener in list(self._listeners.values()):
            listener.on_snapshot(self.snapshot())

    def deliver_pending(self) -> int:
        """Deliver queued notifications. Each delivery carries the current full collection."""
        count, self._pending_broadcasts = self._pending_broadcasts, 0
        for _ in range(count):
            self._broadcast()
        return count

    def disconnect(self) -> None:
        """Drop the transport: notify and forget every subscriber; writes fail until reconnect()."""
        self._connected = False
        self._pending_broadcasts = 0
        listeners = list(self._listeners.values())
        self._listeners.clear()
        logger.warning("Store disconnected; dropping %d subscriber(s)", len(listeners))
        for listener in listeners:
            listener.on_error(SubscriptionError("Snapshot stream disconnected"))

    def reconnect(self) -> None:
        """Restore the transport. Existing clients must resubscribe."""
        self._connected = True
        logger.info("Store reconnected")
