"""
Report export demo: settle a few orders, export the paid ones to CSV,
load the file back and print a sales summary.
"""

from datetime import date
from pathlib import Path

from ordersync import OrderItem
from ordersync.dashboard import StaffDashboard
from ordersync.store import InMemoryOrderStore
from reporting import compute_sales_summary, export_csv, load_report_csv, print_summary


def main() -> None:
    store = InMemoryOrderStore()
    with StaffDashboard(store) as dash:
        dash.client.submit_order("5", [OrderItem(name="Tea", unit_price=30, quantity=2)])
        dash.client.submit_order("5", [OrderItem(name="Bun", unit_price=45, quantity=1)])
        dash.client.submit_order("Takeout", [OrderItem(name="Soup", unit_price=60, quantity=3)])
        dash.clear_table("5")
        dash.clear_table("Takeout")
        orders = dash.client.orders

    today = date.today()
    out = Path(__file__).resolve().parent / "paid_orders.csv"
    export_csv(orders, today, today, out)
    print(f"Wrote {out}")
    print(load_report_csv(out))
    print_summary(compute_sales_summary(orders, today, today))


if __name__ == "__main__":
    main()
