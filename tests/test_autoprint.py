"""
Tests for AutoPrintTrigger and ticket formatting.
"""

from dataclasses import replace
from datetime import datetime

from ordersync import (
    AutoPrintTrigger,
    EventLoop,
    OrderItem,
    OrderStatus,
    Preferences,
    SnapshotChanged,
    create_order,
    format_ticket,
)
from ordersync.dashboard import StaffDashboard
from ordersync.store import InMemoryOrderStore


def _order(order_id: str, table: str = "5"):
    return create_order(
        table,
        [OrderItem(name="Tea", unit_price=30, quantity=2)],
        now=datetime(2024, 5, 1, 18, 5),
        order_id=order_id,
    )


def _snap(*orders):
    return SnapshotChanged(timestamp=datetime.now(), orders=tuple(orders))


# --- AutoPrintTrigger ---


def test_prints_once_per_order():
    printed = []
    trigger = AutoPrintTrigger(printed.append, enabled=True)
    a, x = _order("a"), _order("x")
    trigger.on_event(_snap(a))
    trigger.on_event(_snap(a, x))
    trigger.on_event(_snap(a, x))
    assert [o.id for o in printed] == ["a", "x"]


def test_disabled_by_default():
    printed = []
    trigger = AutoPrintTrigger(printed.append)
    assert not trigger.enabled
    trigger.on_event(_snap(_order("a")))
    assert printed == []


def test_only_pending_orders_print():
    printed = []
    trigger = AutoPrintTrigger(printed.append, enabled=True)
    trigger.on_event(_snap(replace(_order("a"), status=OrderStatus.PREPARING)))
    assert printed == []


def test_enabling_scans_last_snapshot():
    printed = []
    prefs = Preferences()
    trigger = AutoPrintTrigger(printed.append, preferences=prefs)
    trigger.on_event(_snap(_order("a")))
    trigger.set_enabled(True)
    assert prefs.auto_print_enabled
    assert [o.id for o in printed] == ["a"]


def test_marked_before_side_effect_runs():
    loop = EventLoop()
    seen = []

    def reentrant_printer(order):
        seen.append(order.id)
        # re-dispatch the same snapshot from inside the side effect
        loop.dispatch(_snap(order))

    trigger = AutoPrintTrigger(reentrant_printer, enabled=True)
    loop.subscribe(trigger.on_event)
    loop.dispatch(_snap(_order("a")))
    assert seen == ["a"]


def test_printer_failure_does_not_reprint():
    calls = []

    def broken(order):
        calls.append(order.id)
        raise OSError("paper jam")

    trigger = AutoPrintTrigger(broken, enabled=True)
    trigger.on_event(_snap(_order("a")))
    trigger.on_event(_snap(_order("a")))
    assert calls == ["a"]
    assert trigger.printed_ids == frozenset({"a"})


def test_new_trigger_reprints_pending_orders():
    # printed set is process-lifetime only
    a = _order("a")
    first, second = [], []
    AutoPrintTrigger(first.append, enabled=True).on_event(_snap(a))
    AutoPrintTrigger(second.append, enabled=True).on_event(_snap(a))
    assert first == second == [a]


def test_dashboard_prints_new_orders_from_other_clients():
    store = InMemoryOrderStore()
    printed = []
    prefs = Preferences()
    prefs.auto_print_enabled = True
    with StaffDashboard(store, preferences=prefs, printer=printed.append) as dash:
        order = dash.client.submit_order("5", [OrderItem(name="Tea", unit_price=30, quantity=1)])
        dash.start_preparing(order.id)
        assert [o.id for o in printed] == [order.id]


# --- format_ticket ---


def test_format_ticket():
    ticket = format_ticket(_order("order0042", table="7"))
    lines = ticket.splitlines()
    assert lines[0] == "Table 7"
    assert lines[1] == "#0042  18:05"
    assert "Tea x 2" in lines
    assert lines[-1] == "Total 60"
