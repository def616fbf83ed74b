from __future__ import annotations

from datetime import date
from typing import Mapping, Protocol

import pandas as pd


class LedgerQuery(Protocol):
    """Read-only view of realized ledger totals used to validate forecasts.

    Date ranges are inclusive on both ends.
    """

    def revenue_total(self, start: date, end: date) -> float: ...

    def expense_total(self, start: date, end: date) -> float: ...

    def first_transaction_dates(self) -> Mapping[str, date]: ...


def _prepare(frame: pd.DataFrame | None, with_customer: bool) -> pd.DataFrame:
    columns = ["date", "amount"] + (["customer_id"] if with_customer else [])
    if frame is None or frame.empty:
        return pd.DataFrame(columns=columns).astype({"date": "datetime64[ns]", "amount": float})

    missing = [c for c in ("date", "amount") if c not in frame.columns]
    if missing:
        raise ValueError(f"Transaction frame is missing required columns: {missing}")

    work = frame.copy()
    work["date"] = pd.to_datetime(work["date"], errors="coerce").dt.normalize()
    work["amount"] = pd.to_numeric(work["amount"], errors="coerce").fillna(0.0)
    work = work.dropna(subset=["date"])
    if with_customer and "customer_id" not in work.columns:
        work["customer_id"] = pd.NA
    return work[columns].sort_values("date").reset_index(drop=True)


def _in_range(frame: pd.DataFrame, start: date, end: date) -> pd.Series:
    return (frame["date"] >= pd.Timestamp(start)) & (frame["date"] <= pd.Timestamp(end))


def _monthly(series: pd.Series) -> list[float]:
    if series.empty:
        return []
    return [float(v) for v in series.resample("MS").sum()]


class FrameLedger:
    """Ledger backed by revenue and expense transaction frames.

    Both frames need ``date`` and ``amount`` columns; revenue rows may carry a
    ``customer_id`` used to detect new customers.
    """

    def __init__(self, revenue: pd.DataFrame | None = None, expenses: pd.DataFrame | None = None):
        self.revenue = _prepare(revenue, with_customer=True)
        self.expenses = _prepare(expenses, with_customer=False)

    def revenue_total(self, start: date, end: date) -> float:
        return float(self.revenue.loc[_in_range(self.revenue, start, end), "amount"].sum())

    def expense_total(self, start: date, end: date) -> float:
        return float(self.expenses.loc[_in_range(self.expenses, start, end), "amount"].sum())

    def first_transaction_dates(self) -> dict[str, date]:
        known = self.revenue.dropna(subset=["customer_id"])
        if known.empty:
            return {}
        firsts = known.groupby("customer_id")["date"].min()
        return {str(customer): ts.date() for customer, ts in firsts.items()}

    def monthly_revenue(self) -> list[float]:
        return _monthly(self.revenue.set_index("date")["amount"])

    def monthly_expenses(self) -> list[float]:
        return _monthly(self.expenses.set_index("date")["amount"])

    def monthly_new_customers(self) -> list[float]:
        firsts = pd.Series(1.0, index=pd.to_datetime(list(self.first_transaction_dates().values())))
        return _monthly(firsts.sort_index())


def count_new_customers(ledger: LedgerQuery, start: date, end: date) -> int:
    return sum(1 for first in ledger.first_transaction_dates().values() if start <= first <= end)
