"""
Order: the canonical entity shared by every client.

Immutable. Only ``status`` ever changes, and only through the store; a new
record arrives with the next snapshot.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from ordersync.errors import InvalidOrder


class OrderStatus(Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    COMPLETED = "completed"
    PAID = "paid"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({OrderStatus.PAID, OrderStatus.CANCELLED})


@dataclass(frozen=True)
class OrderItem:
    """One line of an order: what, at which unit price, how many."""

    name: str
    unit_price: float
    quantity: int

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity

    def to_wire(self) -> dict[str, Any]:
        return {"name": self.name, "price": self.unit_price, "quantity": self.quantity}

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> OrderItem:
        quantity = payload["quantity"]
        # JSON stores may hand back whole numbers as floats
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        return cls(
            name=str(payload["name"]),
            unit_price=float(payload["price"]),
            quantity=quantity,
        )


@dataclass(frozen=True)
class OrderRecord:
    """
    An order as held in a client's snapshot.

    total_price is fixed at creation; records decoded from the store keep
    the stored value even if item prices would now sum differently.
    """

    id: str
    table_number: str
    items: tuple[OrderItem, ...]
    total_price: float
    status: OrderStatus
    created_at: datetime
    remote_key: str | None = None

    @property
    def short_id(self) -> str:
        """Last four characters of the id, as shown on tickets and the billing view."""
        return self.id[-4:]

    @property
    def is_open(self) -> bool:
        return self.status not in TERMINAL_STATUSES

    def with_remote_key(self, remote_key: str) -> OrderRecord:
        return replace(self, remote_key=remote_key)

    def to_wire(self) -> dict[str, Any]:
        """Payload stored under orders/<remoteKey>."""
        return {
            "id": self.id,
            "tableNumber": self.table_number,
            "items": [item.to_wire() for item in self.items],
            "totalPrice": self.total_price,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_wire(cls, remote_key: str, payload: dict[str, Any]) -> OrderRecord:
        """
        Decode a stored payload. Raises KeyError/ValueError/TypeError on
        malformed input, including items that break the creation rules
        (InvalidOrder is a ValueError).
        """
        items = tuple(OrderItem.from_wire(i) for i in payload["items"])
        check_items(items)
        return cls(
            id=str(payload["id"]),
            table_number=str(payload["tableNumber"]),
            items=items,
            total_price=float(payload["totalPrice"]),
            status=OrderStatus(payload["status"]),
            created_at=_parse_timestamp(payload["createdAt"]),
            remote_key=remote_key,
        )


def _parse_timestamp(value: str) -> datetime:
    """ISO-8601 to naive local time. Accepts a trailing 'Z' as written by browsers."""
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


def compute_total(items: Iterable[OrderItem]) -> float:
    """Sum of unit_price * quantity over the items."""
    return sum(item.line_total for item in items)


def check_items(items: tuple[OrderItem, ...]) -> None:
    """
    Raise InvalidOrder unless there is at least one item and every item has
    a finite non-negative price and a positive integer quantity.
    """
    if not items:
        raise InvalidOrder("an order needs at least one item")
    for item in items:
        price = item.unit_price
        if isinstance(price, bool) or not isinstance(price, (int, float)) or not math.isfinite(price):
            raise InvalidOrder(f"price for {item.name!r} must be a finite number")
        if price < 0:
            raise InvalidOrder(f"negative price for {item.name!r}")
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity <= 0:
            raise InvalidOrder(f"quantity for {item.name!r} must be a positive integer")


def create_order(
    table_number: str,
    items: Iterable[OrderItem],
    *,
    now: datetime | None = None,
    order_id: str | None = None,
) -> OrderRecord:
    """
    Build a new pending order. The total is computed here, once.

    Raises InvalidOrder when the table label is blank, there are no items,
    or an item has a non-finite or negative price or a non-positive/non-integer
    quantity.
    """
    items = tuple(items)
    if not str(table_number).strip():
        raise InvalidOrder("table number must not be blank")
    check_items(items)
    return OrderRecord(
        id=order_id or uuid.uuid4().hex,
        table_number=str(table_number),
        items=items,
        total_price=compute_total(items),
        status=OrderStatus.PENDING,
        created_at=now or datetime.now(),
    )
