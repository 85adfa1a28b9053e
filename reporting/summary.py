"""
Sales summary over paid orders: count, revenue, average and largest ticket,
revenue per table.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime

import numpy as np

from ordersync.order import OrderRecord
from reporting.export import paid_in_range


@dataclass
class SalesSummary:
    """Paid-order totals for a date range."""

    start: date
    end: date
    order_count: int
    revenue: float
    average_ticket: float
    largest_ticket: float
    revenue_by_table: dict[str, float] = field(default_factory=dict)


def compute_sales_summary(
    orders: Iterable[OrderRecord],
    start: date | datetime,
    end: date | datetime,
) -> SalesSummary:
    """
    Summarize paid orders created within [start, end] (whole days, inclusive).

    Parameters
    ----------
    orders : iterable of OrderRecord
        Usually a SyncClient snapshot.
    start, end : date or datetime
        First and last day of the range; any time part is ignored.

    Returns
    -------
    SalesSummary
        All amounts are 0 when no paid order falls in the range.
    """
    start_day = start.date() if isinstance(start, datetime) else start
    end_day = end.date() if isinstance(end, datetime) else end
    paid = paid_in_range(orders, start_day, end_day)
    if not paid:
        return SalesSummary(
            start=start_day,
            end=end_day,
            order_count=0,
            revenue=0.0,
            average_ticket=0.0,
            largest_ticket=0.0,
        )

    totals = np.array([o.total_price for o in paid], dtype=float)
    tables = np.array([o.table_number for o in paid])
    by_table = {
        str(t): float(totals[tables == t].sum())
        for t in sorted(set(tables.tolist()))
    }
    return SalesSummary(
        start=start_day,
        end=end_day,
        order_count=len(paid),
        revenue=float(totals.sum()),
        average_ticket=float(totals.mean()),
        largest_ticket=float(totals.max()),
        revenue_by_table=by_table,
    )


def print_summary(summary: SalesSummary) -> SalesSummary:
    """Print a sales summary and return it."""
    print("--- Sales Summary ---")
    print(f"Period:          {summary.start} .. {summary.end}")
    print(f"Paid orders:     {summary.order_count}")
    print(f"Revenue:         {summary.revenue:,.2f}")
    print(f"Average ticket:  {summary.average_ticket:,.2f}")
    print(f"Largest ticket:  {summary.largest_ticket:,.2f}")
    for table, amount in summary.revenue_by_table.items():
        print(f"  Table {table:<10} {amount:,.2f}")
    print("---------------------")
    return summary
