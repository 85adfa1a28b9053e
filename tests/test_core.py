"""
Tests for ordersync core: OrderItem, OrderRecord, create_order, Event, EventLoop,
OrderStateMachine.
"""

from dataclasses import replace
from datetime import datetime

import pytest

from ordersync import (
    Event,
    EventLoop,
    InvalidOrder,
    InvalidTransition,
    OrderItem,
    OrderRecord,
    OrderStateMachine,
    OrderStatus,
    SnapshotChanged,
    TransitionReason,
    WriteFailure,
    create_order,
)
from ordersync.store import InMemoryOrderStore


def _tea_and_bun() -> list[OrderItem]:
    return [
        OrderItem(name="Tea", unit_price=30, quantity=2),
        OrderItem(name="Bun", unit_price=45, quantity=1),
    ]


# --- OrderRecord ---


def test_create_order_computes_total():
    order = create_order("5", _tea_and_bun())
    assert order.total_price == 105
    assert order.status == OrderStatus.PENDING
    assert order.table_number == "5"
    assert order.remote_key is None
    assert len(order.items) == 2


def test_create_order_assigns_unique_ids():
    a = create_order("1", _tea_and_bun())
    b = create_order("1", _tea_and_bun())
    assert a.id != b.id
    assert a.short_id == a.id[-4:]


def test_create_order_uses_given_clock_and_id():
    ts = datetime(2024, 3, 1, 12, 30)
    order = create_order("A", _tea_and_bun(), now=ts, order_id="abc123")
    assert order.created_at == ts
    assert order.id == "abc123"
    assert order.short_id == "c123"


@pytest.mark.parametrize(
    "table,items",
    [
        ("5", []),
        ("  ", [OrderItem("Tea", 30, 1)]),
        ("5", [OrderItem("Tea", -1, 1)]),
        ("5", [OrderItem("Tea", 30, 0)]),
        ("5", [OrderItem("Tea", 30, 1.5)]),
    ],
)
def test_create_order_rejects_bad_input(table, items):
    with pytest.raises(InvalidOrder):
        create_order(table, items)


def test_order_record_immutable():
    order = create_order("5", _tea_and_bun())
    with pytest.raises(AttributeError):
        order.status = OrderStatus.PAID


def test_wire_payload_shape():
    ts = datetime(2024, 3, 1, 12, 30)
    order = create_order("5", _tea_and_bun(), now=ts, order_id="o1")
    wire = order.to_wire()
    assert wire == {
        "id": "o1",
        "tableNumber": "5",
        "items": [
            {"name": "Tea", "price": 30, "quantity": 2},
            {"name": "Bun", "price": 45, "quantity": 1},
        ],
        "totalPrice": 105,
        "status": "pending",
        "createdAt": "2024-03-01T12:30:00",
    }


def test_from_wire_keeps_stored_total():
    # Stored total wins over item arithmetic: historical orders are not repriced.
    payload = {
        "id": "o1",
        "tableNumber": "5",
        "items": [{"name": "Tea", "price": 35, "quantity": 2}],
        "totalPrice": 60,
        "status": "preparing",
        "createdAt": "2024-03-01T12:30:00",
    }
    order = OrderRecord.from_wire("rk-1", payload)
    assert order.total_price == 60
    assert order.remote_key == "rk-1"
    assert order.status == OrderStatus.PREPARING
    assert order.items[0].unit_price == 35


def test_from_wire_accepts_utc_suffix():
    payload = {
        "id": "o1",
        "tableNumber": "5",
        "items": [{"name": "Tea", "price": 30, "quantity": 1}],
        "totalPrice": 30,
        "status": "pending",
        "createdAt": "2024-03-01T12:30:00.000Z",
    }
    order = OrderRecord.from_wire("rk-1", payload)
    assert order.created_at.tzinfo is None


def test_is_open():
    order = create_order("5", _tea_and_bun())
    assert order.is_open
    assert not replace(order, status=OrderStatus.PAID).is_open
    assert not replace(order, status=OrderStatus.CANCELLED).is_open
    assert replace(order, status=OrderStatus.COMPLETED).is_open


# --- Event ---


def test_event_immutable():
    e = Event(timestamp=datetime.now(), payload=None)
    with pytest.raises(AttributeError):
        e.timestamp = datetime(2024, 1, 1)


def test_snapshot_event_carries_orders():
    order = create_order("5", _tea_and_bun())
    ev = SnapshotChanged(timestamp=datetime.now(), orders=(order,))
    assert ev.orders == (order,)


# --- EventLoop ---


def test_event_loop_dispatch_order():
    log = []
    loop = EventLoop()
    loop.subscribe(lambda ev: log.append(("a", ev)))
    loop.subscribe(lambda ev: log.append(("b", ev)))
    ev = Event(timestamp=datetime.now(), payload=1)
    loop.dispatch(ev)
    assert log == [("a", ev), ("b", ev)]


def test_event_loop_unsubscribe():
    log = []
    loop = EventLoop()
    handler = lambda ev: log.append(ev.payload)  # noqa: E731
    loop.subscribe(handler)
    loop.dispatch(Event(timestamp=datetime.now(), payload=1))
    loop.unsubscribe(handler)
    loop.dispatch(Event(timestamp=datetime.now(), payload=2))
    assert log == [1]


def test_event_loop_isolates_failing_handler():
    log = []

    def boom(ev):
        raise RuntimeError("handler bug")

    loop = EventLoop()
    loop.subscribe(boom)
    loop.subscribe(lambda ev: log.append(ev.payload))
    loop.run([Event(timestamp=datetime.now(), payload=1), Event(timestamp=datetime.now(), payload=2)])
    assert log == [1, 2]


# --- OrderStateMachine ---


KITCHEN = TransitionReason.KITCHEN
BILLING = TransitionReason.BILLING


@pytest.mark.parametrize(
    "current,target",
    [
        (OrderStatus.PENDING, OrderStatus.PREPARING),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.PREPARING, OrderStatus.COMPLETED),
        (OrderStatus.PREPARING, OrderStatus.CANCELLED),
        (OrderStatus.COMPLETED, OrderStatus.PAID),
    ],
)
def test_kitchen_transitions_allowed(current, target):
    assert OrderStateMachine.can_transition(current, target, KITCHEN)


def test_every_kitchen_transition_outside_table_rejected():
    allowed = {
        (OrderStatus.PENDING, OrderStatus.PREPARING),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.PREPARING, OrderStatus.COMPLETED),
        (OrderStatus.PREPARING, OrderStatus.CANCELLED),
        (OrderStatus.COMPLETED, OrderStatus.PAID),
    }
    sm = OrderStateMachine(InMemoryOrderStore())
    for current in OrderStatus:
        for target in OrderStatus:
            if (current, target) in allowed:
                sm.check(current, target, KITCHEN)
            else:
                with pytest.raises(InvalidTransition):
                    sm.check(current, target, KITCHEN)


def test_billing_transitions():
    for current in (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.COMPLETED):
        assert OrderStateMachine.can_transition(current, OrderStatus.PAID, BILLING)
    assert not OrderStateMachine.can_transition(OrderStatus.CANCELLED, OrderStatus.PAID, BILLING)
    assert not OrderStateMachine.can_transition(OrderStatus.PENDING, OrderStatus.PREPARING, BILLING)


def test_kitchen_cannot_pay_unfinished_order():
    assert not OrderStateMachine.can_transition(OrderStatus.PENDING, OrderStatus.PAID, KITCHEN)
    assert not OrderStateMachine.can_transition(OrderStatus.PREPARING, OrderStatus.PAID, KITCHEN)


def test_terminal_states_have_no_exits():
    for reason in TransitionReason:
        assert OrderStateMachine.allowed_targets(OrderStatus.PAID, reason) == frozenset()
        assert OrderStateMachine.allowed_targets(OrderStatus.CANCELLED, reason) == frozenset()


def test_invalid_transition_issues_no_write():
    store = InMemoryOrderStore()
    order = create_order("5", _tea_and_bun())
    key = store.append(order)
    sm = OrderStateMachine(store)
    with pytest.raises(InvalidTransition) as exc:
        sm.apply(order.with_remote_key(key), OrderStatus.COMPLETED)
    assert exc.value.current == OrderStatus.PENDING
    assert exc.value.target == OrderStatus.COMPLETED
    assert store.snapshot()[key]["status"] == "pending"


def test_apply_without_remote_key_fails():
    sm = OrderStateMachine(InMemoryOrderStore())
    with pytest.raises(WriteFailure):
        sm.apply(create_order("5", _tea_and_bun()), OrderStatus.PREPARING)


def test_request_unknown_order():
    sm = OrderStateMachine(InMemoryOrderStore())
    with pytest.raises(KeyError):
        sm.request("missing", OrderStatus.PREPARING)


def test_full_lifecycle_through_store():
    store = InMemoryOrderStore()
    sm = OrderStateMachine(store)
    store.subscribe(
        lambda coll: sm.on_event(
            SnapshotChanged(
                timestamp=datetime.now(),
                orders=tuple(OrderRecord.from_wire(k, v) for k, v in coll.items()),
            )
        ),
        lambda err: None,
    )
    order = create_order("5", _tea_and_bun())
    key = store.append(order)
    for target in (OrderStatus.PREPARING, OrderStatus.COMPLETED, OrderStatus.PAID):
        sm.request(order.id, target)
        assert store.snapshot()[key]["status"] == target.value
    for target in OrderStatus:
        with pytest.raises(InvalidTransition):
            sm.request(order.id, target)


# --- OrderRecord.from_wire validation ---


def _wire(**overrides):
    payload = {
        "id": "o1",
        "tableNumber": "5",
        "items": [{"name": "Tea", "price": 30, "quantity": 2}],
        "totalPrice": 60,
        "status": "pending",
        "createdAt": "2024-03-01T12:30:00",
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize(
    "items",
    [
        [],
        [{"name": "Tea", "price": 30, "quantity": 1.5}],
        [{"name": "Tea", "price": 30, "quantity": 0}],
        [{"name": "Tea", "price": -1, "quantity": 1}],
        [{"name": "Tea", "price": float("nan"), "quantity": 1}],
    ],
)
def test_from_wire_rejects_items_breaking_creation_rules(items):
    with pytest.raises(ValueError):
        OrderRecord.from_wire("rk-1", _wire(items=items))


def test_from_wire_accepts_whole_float_quantity():
    order = OrderRecord.from_wire("rk-1", _wire(items=[{"name": "Tea", "price": 30, "quantity": 2.0}]))
    assert order.items[0].quantity == 2
    assert isinstance(order.items[0].quantity, int)


@pytest.mark.parametrize("price", [float("nan"), float("inf"), "30", None])
def test_create_order_rejects_non_finite_or_non_numeric_price(price):
    with pytest.raises(InvalidOrder):
        create_order("5", [OrderItem(name="Tea", unit_price=price, quantity=1)])
