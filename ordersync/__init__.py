"""
ordersync: order lifecycle and multi-client synchronization engine.

Clients share nothing but a remote, full-snapshot order store. Each client
keeps a replaced-on-every-broadcast snapshot and derives kitchen, billing and
printing views from it. No UI, no rendering.
"""

__version__ = "0.1.0"

from ordersync.autoprint import AutoPrintTrigger, LoggingPrinter, format_ticket
from ordersync.errors import (
    InvalidOrder,
    InvalidPasscode,
    InvalidTransition,
    OrderSyncError,
    SubscriptionError,
    WriteFailure,
)
from ordersync.event_loop import EventLoop
from ordersync.events import ConnectivityChanged, Event, SnapshotChanged
from ordersync.kitchen import KitchenBoard
from ordersync.order import OrderItem, OrderRecord, OrderStatus, create_order
from ordersync.passcode import PasscodeGate
from ordersync.preferences import Preferences
from ordersync.state_machine import OrderStateMachine, TransitionReason
from ordersync.sync import SyncClient
from ordersync.tables import ClearTableResult, TableAggregator, TableTotal, aggregate

__all__ = [
    "AutoPrintTrigger",
    "LoggingPrinter",
    "format_ticket",
    "InvalidOrder",
    "InvalidPasscode",
    "InvalidTransition",
    "OrderSyncError",
    "SubscriptionError",
    "WriteFailure",
    "EventLoop",
    "ConnectivityChanged",
    "Event",
    "SnapshotChanged",
    "KitchenBoard",
    "OrderItem",
    "OrderRecord",
    "OrderStatus",
    "create_order",
    "PasscodeGate",
    "Preferences",
    "OrderStateMachine",
    "TransitionReason",
    "SyncClient",
    "ClearTableResult",
    "TableAggregator",
    "TableTotal",
    "aggregate",
]
