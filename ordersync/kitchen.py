"""
Kitchen board: the pending and preparing queues the staff work from.
"""

from __future__ import annotations

from ordersync.events import Event, SnapshotChanged
from ordersync.order import OrderRecord, OrderStatus


class KitchenBoard:
    """Snapshot subscriber. Pending is oldest first; other queues keep snapshot order."""

    def __init__(self) -> None:
        self._orders: tuple[OrderRecord, ...] = ()

    def on_event(self, event: Event) -> None:
        if isinstance(event, SnapshotChanged):
            self._orders = event.orders

    def _with_status(self, status: OrderStatus) -> list[OrderRecord]:
        return [o for o in self._orders if o.status == status]

    def pending(self) -> list[OrderRecord]:
        return sorted(self._with_status(OrderStatus.PENDING), key=lambda o: o.created_at)

    def preparing(self) -> list[OrderRecord]:
        return self._with_status(OrderStatus.PREPARING)

    def completed(self) -> list[OrderRecord]:
        return self._with_status(OrderStatus.COMPLETED)
