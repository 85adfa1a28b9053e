"""
Reporting on top of ordersync snapshots.

Read-only: paid-order CSV export, loading exports back, sales summaries.
"""

from reporting.export import export_csv, paid_orders_frame
from reporting.loader import load_report_csv
from reporting.summary import SalesSummary, compute_sales_summary, print_summary

__all__ = [
    "export_csv",
    "paid_orders_frame",
    "load_report_csv",
    "SalesSummary",
    "compute_sales_summary",
    "print_summary",
]
