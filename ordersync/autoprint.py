"""
AutoPrintTrigger: print each new pending order once.

The printed-id set lives for the process only; a restart re-prints every
order that is still pending.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ordersync.events import Event, SnapshotChanged
from ordersync.order import OrderRecord, OrderStatus
from ordersync.preferences import Preferences

logger = logging.getLogger(__name__)

Printer = Callable[[OrderRecord], None]


def format_ticket(order: OrderRecord) -> str:
    """Kitchen ticket text for one order."""
    lines = [
        f"Table {order.table_number}",
        f"#{order.short_id}  {order.created_at:%H:%M}",
        "-" * 24,
    ]
    lines.extend(f"{item.name} x {item.quantity}" for item in order.items)
    lines.append("-" * 24)
    lines.append(f"Total {order.total_price:g}")
    return "\n".join(lines)


class LoggingPrinter:
    """Default print sink: writes the ticket to the log and keeps it."""

    def __init__(self) -> None:
        self.tickets: list[str] = []

    def __call__(self, order: OrderRecord) -> None:
        ticket = format_ticket(order)
        self.tickets.append(ticket)
        logger.info("Kitchen ticket for order %s:\n%s", order.id, ticket)


class AutoPrintTrigger:
    """
    Snapshot subscriber. When enabled, every pending order not printed yet is
    marked printed and then handed to the printer, in that order, so a
    printer that re-enters dispatch cannot print it twice.
    """

    def __init__(
        self,
        printer: Printer | None = None,
        *,
        preferences: Preferences | None = None,
        enabled: bool | None = None,
    ) -> None:
        self.printer: Printer = printer or LoggingPrinter()
        self.preferences = preferences
        if enabled is None:
            enabled = preferences.auto_print_enabled if preferences is not None else False
        self._enabled = enabled
        self._printed: set[str] = set()
        self._last_orders: tuple[OrderRecord, ...] = ()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def printed_ids(self) -> frozenset[str]:
        return frozenset(self._printed)

    def set_enabled(self, value: bool) -> None:
        """Toggle and persist. Turning it on scans the last snapshot right away."""
        self._enabled = bool(value)
        if self.preferences is not None:
            self.preferences.auto_print_enabled = self._enabled
        logger.info("Auto-print %s", "enabled" if self._enabled else "disabled")
        if self._enabled:
            self._scan(self._last_orders)

    def on_event(self, event: Event) -> None:
        if isinstance(event, SnapshotChanged):
            self._last_orders = event.orders
            if self._enabled:
                self._scan(event.orders)

    def _scan(self, orders: tuple[OrderRecord, ...]) -> None:
        for order in orders:
            if order.status != OrderStatus.PENDING or order.id in self._printed:
                continue
            self._printed.add(order.id)
            try:
                self.printer(order)
            except Exception:  # noqa: BLE001
                logger.exception("Auto-print failed for order %s", order.id)
