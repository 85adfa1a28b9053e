"""
TableAggregator: per-table open balances derived from the snapshot.

Tables are not stored; they are a grouping of open orders by table_number.
Clearing a table settles each of its open orders as paid, one write per
order, and reports the outcome of every write.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ordersync.errors import OrderSyncError
from ordersync.events import Event, SnapshotChanged
from ordersync.order import OrderRecord, OrderStatus
from ordersync.state_machine import OrderStateMachine, TransitionReason

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TableTotal:
    """Open balance of one table."""

    table_number: str
    total_amount: float
    order_ids: tuple[str, ...]


@dataclass(frozen=True)
class ClearOutcome:
    """Result of settling one order while clearing a table."""

    order_id: str
    succeeded: bool
    error: Exception | None = None
    attempted: bool = True


@dataclass
class ClearTableResult:
    """Per-order results of a clear. Not atomic: some orders may be paid, others not."""

    table_number: str
    outcomes: list[ClearOutcome] = field(default_factory=list)

    @property
    def succeeded_ids(self) -> list[str]:
        return [o.order_id for o in self.outcomes if o.succeeded]

    @property
    def failed_ids(self) -> list[str]:
        """Orders still open after the clear: the failed write and everything after it."""
        return [o.order_id for o in self.outcomes if not o.succeeded]

    @property
    def skipped_ids(self) -> list[str]:
        return [o.order_id for o in self.outcomes if not o.attempted]

    @property
    def ok(self) -> bool:
        return all(o.succeeded for o in self.outcomes)


def aggregate(orders: Iterable[OrderRecord]) -> list[TableTotal]:
    """
    Group open orders (not paid, not cancelled) by table. Pure.

    Order ids keep snapshot order; tables are sorted by label.
    """
    amounts: dict[str, float] = {}
    ids: dict[str, list[str]] = {}
    for order in orders:
        if not order.is_open:
            continue
        amounts[order.table_number] = amounts.get(order.table_number, 0.0) + order.total_price
        ids.setdefault(order.table_number, []).append(order.id)
    return [
        TableTotal(table_number=t, total_amount=amounts[t], order_ids=tuple(ids[t]))
        for t in sorted(amounts)
    ]


class TableAggregator:
    """
    Snapshot subscriber holding the current per-table view, plus the
    clear-table workflow (which goes through the state machine).
    """

    def __init__(self, state_machine: OrderStateMachine) -> None:
        self.state_machine = state_machine
        self._orders: tuple[OrderRecord, ...] = ()
        self._tables: list[TableTotal] = []

    def on_event(self, event: Event) -> None:
        if isinstance(event, SnapshotChanged):
            self._orders = event.orders
            self._tables = aggregate(event.orders)

    @property
    def tables(self) -> list[TableTotal]:
        return list(self._tables)

    def _table(self, table_number: str) -> TableTotal | None:
        for t in self._tables:
            if t.table_number == table_number:
                return t
        return None

    def total_amount(self, table_number: str) -> float:
        """Open balance of a table; 0 when the table has no open orders."""
        t = self._table(table_number)
        return t.total_amount if t is not None else 0.0

    def order_ids(self, table_number: str) -> list[str]:
        t = self._table(table_number)
        return list(t.order_ids) if t is not None else []

    def outstanding_total(self) -> float:
        """Sum of open balances across every table."""
        return sum(t.total_amount for t in self._tables)

    def open_orders(self, table_number: str) -> list[OrderRecord]:
        return [o for o in self._orders if o.table_number == table_number and o.is_open]

    def clear_table(self, table_number: str) -> ClearTableResult:
        """
        Settle every open order of the table as paid, one patch per order,
        in snapshot order.

        Stops at the first failed write: earlier orders stay paid, the failed
        order and the rest stay open and are reported as failed (the rest as
        not attempted), so the caller can retry exactly that subset.
        """
        return self._settle(table_number, self.open_orders(table_number))

    def retry_failed(self, result: ClearTableResult) -> ClearTableResult:
        """Retry only the orders that failed in a previous clear and are still open."""
        failed = set(result.failed_ids)
        return self._settle(
            result.table_number,
            [o for o in self.open_orders(result.table_number) if o.id in failed],
        )

    def _settle(self, table_number: str, orders: Sequence[OrderRecord]) -> ClearTableResult:
        result = ClearTableResult(table_number=table_number)
        failed = False
        for order in orders:
            if failed:
                result.outcomes.append(ClearOutcome(order_id=order.id, succeeded=False, attempted=False))
                continue
            try:
                self.state_machine.apply(order, OrderStatus.PAID, TransitionReason.BILLING)
            except OrderSyncError as e:
                logger.warning("Clear table %s: order %s not settled: %s", table_number, order.id, e)
                result.outcomes.append(ClearOutcome(order_id=order.id, succeeded=False, error=e))
                failed = True
            else:
                result.outcomes.append(ClearOutcome(order_id=order.id, succeeded=True))
        if result.outcomes:
            logger.info(
                "Clear table %s: %d settled, %d failed",
                table_number,
                len(result.succeeded_ids),
                len(result.failed_ids),
            )
        return result
