"""
SyncClient: one client's materialized view of the remote order collection.

Subscribes to the store, wholly replaces the local snapshot on every
broadcast and republishes it on an EventLoop. Writes go straight to the
store; the snapshot changes only when the authoritative echo arrives.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from types import TracebackType

from ordersync.errors import SubscriptionError, WriteFailure
from ordersync.event_loop import EventLoop
from ordersync.events import ConnectivityChanged, SnapshotChanged
from ordersync.order import OrderItem, OrderRecord, create_order
from ordersync.store.base import Collection, RemoteOrderStore, Subscription

logger = logging.getLogger(__name__)


def decode_collection(collection: Collection) -> tuple[OrderRecord, ...]:
    """
    Decode a full collection into records ordered by created_at. Ties keep
    the collection order, which is the order the store received them.
    Malformed entries are logged and skipped.
    """
    records: list[OrderRecord] = []
    for remote_key, payload in collection.items():
        try:
            records.append(OrderRecord.from_wire(remote_key, payload))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("Skipping malformed order %s: %s", remote_key, e)
    records.sort(key=lambda r: r.created_at)
    return tuple(records)


class SyncClient:
    """
    Process-scoped client state with an explicit lifecycle.

    start() acquires the store subscription, teardown() releases it. Use as a
    context manager to guarantee release. Subscribers (state machine, table
    aggregator, auto-print) register on ``event_loop`` and receive
    SnapshotChanged / ConnectivityChanged events.
    """

    def __init__(
        self,
        store: RemoteOrderStore,
        event_loop: EventLoop | None = None,
        *,
        name: str = "client",
    ) -> None:
        self.store = store
        self.event_loop = event_loop or EventLoop()
        self.name = name
        self._orders: tuple[OrderRecord, ...] = ()
        self._subscription: Subscription | None = None
        self._connected = False
        self._last_error: SubscriptionError | None = None

    # --- lifecycle ---

    def start(self) -> SyncClient:
        """Subscribe to the store. No-op if already subscribed."""
        if self._subscription is not None and self._subscription.active:
            return self
        self._last_error = None
        subscription = self.store.subscribe(self._on_snapshot, self._on_error)
        if self._last_error is not None:
            # failed during subscribe; nothing to hold on to
            subscription.unsubscribe()
            return self
        self._subscription = subscription
        logger.info("%s: subscribed to order store", self.name)
        return self

    def teardown(self) -> None:
        """Release the subscription. Safe to call more than once."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
            logger.info("%s: unsubscribed from order store", self.name)
        if self._connected:
            self._set_connected(False, None)

    def resubscribe(self) -> None:
        """Drop any stale subscription and subscribe again (e.g. after a disconnect)."""
        self.teardown()
        self.start()

    def __enter__(self) -> SyncClient:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.teardown()

    # --- read model ---

    @property
    def orders(self) -> tuple[OrderRecord, ...]:
        """Current snapshot, oldest first."""
        return self._orders

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def last_error(self) -> SubscriptionError | None:
        return self._last_error

    def get(self, order_id: str) -> OrderRecord | None:
        """Order by client id, or None if not in the snapshot."""
        for record in self._orders:
            if record.id == order_id:
                return record
        return None

    # --- writes ---

    def submit_order(self, table_number: str, items: Iterable[OrderItem]) -> OrderRecord:
        """
        Create and append a new pending order. Returns the record with its
        remote key. The local snapshot is not touched; the order shows up with
        the store's next broadcast. Raises InvalidOrder or WriteFailure.
        """
        record = create_order(table_number, items)
        try:
            remote_key = self.store.append(record)
        except WriteFailure:
            logger.warning("%s: failed to submit order %s for table %s", self.name, record.id, table_number)
            raise
        logger.info("%s: submitted order %s (table %s, total %s)", self.name, record.id, table_number, record.total_price)
        return record.with_remote_key(remote_key)

    # --- store callbacks ---

    def _on_snapshot(self, collection: Collection) -> None:
        self._orders = decode_collection(collection)
        if not self._connected:
            self._set_connected(True, None)
        self.event_loop.dispatch(SnapshotChanged(timestamp=datetime.now(), orders=self._orders))

    def _on_error(self, error: SubscriptionError) -> None:
        logger.warning("%s: snapshot stream error: %s", self.name, error)
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._set_connected(False, error)

    def _set_connected(self, connected: bool, error: SubscriptionError | None) -> None:
        self._connected = connected
        self._last_error = error
        self.event_loop.dispatch(ConnectivityChanged(timestamp=datetime.now(), connected=connected, error=error))
