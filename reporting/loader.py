"""
Load a previously exported paid-orders CSV back into a DataFrame.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from reporting.export import COLUMNS

_ALIASES = {
    "datetime": "Datetime",
    "table": "Table",
    "table number": "Table",
    "order id": "Order ID",
    "items": "Items",
    "total": "Total",
    "total price": "Total",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Map case/spacing variants of the export headers to the canonical names."""
    out = df.copy()
    out = out.rename(columns={c: _ALIASES.get(str(c).strip().lower(), c) for c in out.columns})
    return out


def load_report_csv(path: str | Path) -> pd.DataFrame:
    """
    Read an export written by export_csv.

    Returns
    -------
    pd.DataFrame
        DatetimeIndex named 'datetime'; columns Table, Order ID, Items, Total.
        Table and Order ID stay strings.
    """
    df = pd.read_csv(path, encoding="utf-8-sig", dtype=str)
    df = _normalize_columns(df)
    missing = [c for c in COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Not a paid-orders report, missing columns: {missing}")
    df["datetime"] = pd.to_datetime(df["Datetime"])
    df = df.drop(columns=["Datetime"]).set_index("datetime").sort_index()
    df["Total"] = df["Total"].astype(float)
    return df
