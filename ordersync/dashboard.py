"""
Staff dashboard session: one SyncClient plus every snapshot subscriber.

Wires the state machine, table aggregator, kitchen board and auto-print
trigger onto the client's event loop and owns their shared lifecycle.
Flow: staff action → state machine → store → broadcast → subscribers.
"""

from __future__ import annotations

import logging
from types import TracebackType

from ordersync.autoprint import AutoPrintTrigger, Printer
from ordersync.kitchen import KitchenBoard
from ordersync.order import OrderStatus
from ordersync.passcode import PasscodeGate
from ordersync.preferences import Preferences
from ordersync.state_machine import OrderStateMachine, TransitionReason
from ordersync.store.base import RemoteOrderStore
from ordersync.sync import SyncClient
from ordersync.tables import ClearTableResult, TableAggregator

logger = logging.getLogger(__name__)


class StaffDashboard:
    """
    Everything a staff client needs, wired through one event loop.
    Subscribers are registered in a fixed order: state machine, tables,
    kitchen board, auto-print.
    """

    def __init__(
        self,
        store: RemoteOrderStore,
        *,
        preferences: Preferences | None = None,
        printer: Printer | None = None,
        name: str = "dashboard",
    ) -> None:
        self.preferences = preferences or Preferences()
        self.client = SyncClient(store, name=name)
        self.state_machine = OrderStateMachine(store)
        self.tables = TableAggregator(self.state_machine)
        self.kitchen = KitchenBoard()
        self.auto_print = AutoPrintTrigger(printer, preferences=self.preferences)
        self.passcode = PasscodeGate(self.preferences)
        loop = self.client.event_loop
        loop.subscribe(self.state_machine.on_event)
        loop.subscribe(self.tables.on_event)
        loop.subscribe(self.kitchen.on_event)
        loop.subscribe(self.auto_print.on_event)

    def start(self) -> StaffDashboard:
        self.client.start()
        return self

    def teardown(self) -> None:
        self.client.teardown()

    def __enter__(self) -> StaffDashboard:
        return self.start()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.teardown()

    @property
    def connected(self) -> bool:
        return self.client.connected

    # --- kitchen actions ---

    def start_preparing(self, order_id: str) -> None:
        self.state_machine.request(order_id, OrderStatus.PREPARING, TransitionReason.KITCHEN)

    def mark_completed(self, order_id: str) -> None:
        self.state_machine.request(order_id, OrderStatus.COMPLETED, TransitionReason.KITCHEN)

    def cancel(self, order_id: str) -> None:
        self.state_machine.request(order_id, OrderStatus.CANCELLED, TransitionReason.KITCHEN)

    # --- billing ---

    def clear_table(self, table_number: str) -> ClearTableResult:
        return self.tables.clear_table(table_number)
