"""
OrderStateMachine: the only authority on legal status transitions.

Two families of edges. Kitchen transitions move an order forward through
preparation or cancel it; billing transitions settle any not-yet-terminal,
non-cancelled order as paid when its table is cleared. Anything else raises
InvalidTransition before a write is issued.
"""

from __future__ import annotations

import logging
from enum import Enum

from ordersync.errors import InvalidTransition, WriteFailure
from ordersync.events import Event, SnapshotChanged
from ordersync.order import OrderRecord, OrderStatus
from ordersync.store.base import RemoteOrderStore

logger = logging.getLogger(__name__)


class TransitionReason(Enum):
    KITCHEN = "kitchen"
    BILLING = "billing"


KITCHEN_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.PAID}),
    OrderStatus.PAID: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

BILLING_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID}),
    OrderStatus.PREPARING: frozenset({OrderStatus.PAID}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.PAID}),
    OrderStatus.PAID: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

_EDGES = {
    TransitionReason.KITCHEN: KITCHEN_TRANSITIONS,
    TransitionReason.BILLING: BILLING_TRANSITIONS,
}


class OrderStateMachine:
    """
    Validates and applies status transitions.

    Applying a transition is a single patch_status call. The in-memory record
    is not updated; the new status is visible only once the store broadcasts
    the next snapshot. Concurrent patches to the same order from different
    clients are last-write-wins at the store.
    """

    def __init__(self, store: RemoteOrderStore) -> None:
        self.store = store
        self._orders: dict[str, OrderRecord] = {}

    def on_event(self, event: Event) -> None:
        """Snapshot subscriber: keep an id -> record index of the latest snapshot."""
        if isinstance(event, SnapshotChanged):
            self._orders = {o.id: o for o in event.orders}

    @staticmethod
    def allowed_targets(
        current: OrderStatus,
        reason: TransitionReason = TransitionReason.KITCHEN,
    ) -> frozenset[OrderStatus]:
        return _EDGES[reason][current]

    @staticmethod
    def can_transition(
        current: OrderStatus,
        target: OrderStatus,
        reason: TransitionReason = TransitionReason.KITCHEN,
    ) -> bool:
        return target in _EDGES[reason][current]

    def check(
        self,
        current: OrderStatus,
        target: OrderStatus,
        reason: TransitionReason = TransitionReason.KITCHEN,
    ) -> None:
        """Raise InvalidTransition unless current -> target is allowed for reason."""
        if not self.can_transition(current, target, reason):
            logger.warning("Rejected %s transition %s -> %s", reason.value, current.value, target.value)
            raise InvalidTransition(current, target, reason.value)

    def apply(
        self,
        order: OrderRecord,
        target: OrderStatus,
        reason: TransitionReason = TransitionReason.KITCHEN,
    ) -> None:
        """
        Validate against the order's status as last seen, then patch the store.
        Raises InvalidTransition (no write issued) or WriteFailure.
        """
        self.check(order.status, target, reason)
        if order.remote_key is None:
            raise WriteFailure(
                f"Order {order.id} has no remote key yet",
                operation="patch_status",
            )
        self.store.patch_status(order.remote_key, target)
        logger.info("Order %s: %s -> %s (%s)", order.id, order.status.value, target.value, reason.value)

    def request(
        self,
        order_id: str,
        target: OrderStatus,
        reason: TransitionReason = TransitionReason.KITCHEN,
    ) -> None:
        """Apply a transition to an order from the latest snapshot. Raises KeyError for unknown ids."""
        try:
            order = self._orders[order_id]
        except KeyError:
            raise KeyError(f"Order {order_id} is not in the current snapshot") from None
        self.apply(order, target, reason)
