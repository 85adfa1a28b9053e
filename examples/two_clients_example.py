"""
Two-client session over the in-process paper store.

Shows: a customer terminal submitting orders, a staff dashboard moving them
through the kitchen, auto-print, clearing a table, and a dropped connection.
"""

from __future__ import annotations

import logging

from ordersync import OrderItem, Preferences, SyncClient, WriteFailure
from ordersync.dashboard import StaffDashboard
from ordersync.store import InMemoryOrderStore


def print_tables(dash: StaffDashboard) -> None:
    for table in dash.tables.tables:
        ids = ", ".join(f"#{i[-4:]}" for i in table.order_ids)
        print(f"  Table {table.table_number}: {table.total_amount:g} ({ids})")
    print(f"  Outstanding: {dash.tables.outstanding_total():g}")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    store = InMemoryOrderStore()
    prefs = Preferences()

    with SyncClient(store, name="customer") as customer, StaffDashboard(store, preferences=prefs) as dash:
        if not dash.passcode.login("88888888"):
            print("Staff login failed")
            return
        dash.auto_print.set_enabled(True)

        print("--- Customer orders ---")
        tea = customer.submit_order(
            "5",
            [OrderItem(name="Tea", unit_price=30, quantity=2), OrderItem(name="Bun", unit_price=45, quantity=1)],
        )
        soup = customer.submit_order("3", [OrderItem(name="Soup", unit_price=60, quantity=1)])
        print(f"  #{tea.short_id} table 5 total {tea.total_price:g}")
        print(f"  #{soup.short_id} table 3 total {soup.total_price:g}")

        print("\n--- Kitchen ---")
        dash.start_preparing(tea.id)
        dash.mark_completed(tea.id)
        print(f"  Pending: {[o.short_id for o in dash.kitchen.pending()]}")
        print(f"  Completed: {[o.short_id for o in dash.kitchen.completed()]}")

        print("\n--- Billing ---")
        print_tables(dash)
        result = dash.clear_table("5")
        print(f"  Cleared table 5: settled={result.succeeded_ids}, failed={result.failed_ids}")
        print_tables(dash)

        print("\n--- Connection drop ---")
        store.disconnect()
        print(f"  Dashboard connected: {dash.connected}")
        try:
            customer.submit_order("3", [OrderItem(name="Tea", unit_price=30, quantity=1)])
        except WriteFailure as e:
            print(f"  Submit failed: {e}")
        store.reconnect()
        dash.client.resubscribe()
        customer.resubscribe()
        print(f"  Dashboard connected after resubscribe: {dash.connected}")


if __name__ == "__main__":
    main()
