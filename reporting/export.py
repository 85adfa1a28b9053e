"""
CSV export of paid orders for a date range.

Read-only sink over a snapshot. The range is inclusive of both whole days
in local time: [start 00:00:00, end 23:59:59].
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, time
from pathlib import Path

import pandas as pd

from ordersync.order import OrderRecord, OrderStatus

COLUMNS = ("Datetime", "Table", "Order ID", "Items", "Total")


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def day_bounds(start: date | datetime, end: date | datetime) -> tuple[datetime, datetime]:
    """Inclusive bounds: start of the first day, last second of the last day."""
    return (
        datetime.combine(_as_date(start), time(0, 0, 0)),
        datetime.combine(_as_date(end), time(23, 59, 59)),
    )


def paid_in_range(
    orders: Iterable[OrderRecord],
    start: date | datetime,
    end: date | datetime,
) -> list[OrderRecord]:
    """Paid orders created within the inclusive day range, oldest first."""
    lo, hi = day_bounds(start, end)
    selected = [
        o for o in orders
        if o.status == OrderStatus.PAID and lo <= o.created_at <= hi
    ]
    return sorted(selected, key=lambda o: o.created_at)


def item_summary(order: OrderRecord) -> str:
    """'name×quantity' pairs joined by '; '."""
    return "; ".join(f"{item.name}×{item.quantity}" for item in order.items)


def paid_orders_frame(
    orders: Iterable[OrderRecord],
    start: date | datetime,
    end: date | datetime,
) -> pd.DataFrame:
    """
    One row per paid order in range.

    Returns
    -------
    pd.DataFrame
        Columns Datetime, Table, Order ID, Items, Total. Empty (with the same
        columns) when no order matches.
    """
    rows = [
        {
            "Datetime": o.created_at,
            "Table": o.table_number,
            "Order ID": o.id,
            "Items": item_summary(o),
            "Total": o.total_price,
        }
        for o in paid_in_range(orders, start, end)
    ]
    if not rows:
        return pd.DataFrame(columns=list(COLUMNS))
    return pd.DataFrame(rows, columns=list(COLUMNS))


def export_csv(
    orders: Iterable[OrderRecord],
    start: date | datetime,
    end: date | datetime,
    path: str | Path | None = None,
) -> str:
    """
    Render the paid-orders report as CSV. Writes it to path when given
    (UTF-8 with BOM so spreadsheet apps pick up non-ASCII item names) and
    always returns the CSV text.
    """
    df = paid_orders_frame(orders, start, end)
    text = df.to_csv(index=False, date_format="%Y-%m-%d %H:%M:%S")
    if path is not None:
        Path(path).write_text(text, encoding="utf-8-sig")
    return text
