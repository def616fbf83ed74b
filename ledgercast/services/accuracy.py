from __future__ import annotations

import dataclasses
from typing import Iterable

import numpy as np
import pandas as pd

from ledgercast.core.config import AccuracyThresholds
from ledgercast.core.types import AccuracyTrend, ForecastAccuracyData, ForecastAccuracyRecord

NO_VALIDATED_MESSAGE = "No validated forecasts yet. Check back after the current forecast period ends."


def mape_percent(forecasted: float, actual: float | None) -> float | None:
    if actual is None or actual == 0:
        return None
    return float(abs(forecasted - actual) / abs(actual) * 100)


def accuracy_percent(forecasted: float, actual: float | None) -> float | None:
    """100 minus the absolute percentage error, clipped to [0, 100].

    ``None`` when the actual is unknown or zero.
    """
    error = mape_percent(forecasted, actual)
    if error is None:
        return None
    return float(np.clip(100 - error, 0.0, 100.0))


def revenue_mape(record: ForecastAccuracyRecord) -> float | None:
    return mape_percent(record.forecasted_revenue, record.actual_revenue)


def validate_record(
    record: ForecastAccuracyRecord,
    actual_revenue: float,
    actual_expenses: float,
    actual_new_customers: int,
) -> ForecastAccuracyRecord:
    """Return a validated copy of ``record`` carrying actuals and frozen accuracy figures.

    An already validated record is returned unchanged.
    """
    if record.is_validated:
        return record
    return dataclasses.replace(
        record,
        is_validated=True,
        actual_revenue=float(actual_revenue),
        actual_expenses=float(actual_expenses),
        actual_profit=float(actual_revenue - actual_expenses),
        actual_new_customers=int(actual_new_customers),
        revenue_accuracy_percent=accuracy_percent(record.forecasted_revenue, actual_revenue),
        expense_accuracy_percent=accuracy_percent(record.forecasted_expenses, actual_expenses),
    )


def _chronological(records: Iterable[ForecastAccuracyRecord]) -> list[ForecastAccuracyRecord]:
    return sorted(records, key=lambda r: (r.period_end, r.period_start))


def _accuracy_frame(records: list[ForecastAccuracyRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "revenue_accuracy": [r.revenue_accuracy_percent for r in records],
            "expense_accuracy": [r.expense_accuracy_percent for r in records],
            "revenue_mape": [revenue_mape(r) for r in records],
        },
        dtype=float,
    )


def _mean_or_zero(column: pd.Series) -> float:
    value = column.mean(skipna=True)
    return 0.0 if pd.isna(value) else float(value)


def accuracy_trend(revenue_accuracies: list[float], thresholds: AccuracyThresholds | None = None) -> AccuracyTrend:
    thresholds = thresholds or AccuracyThresholds()
    if len(revenue_accuracies) < thresholds.min_records_for_trend:
        return AccuracyTrend.STABLE
    half = len(revenue_accuracies) // 2
    first_half = float(np.mean(revenue_accuracies[:half]))
    second_half = float(np.mean(revenue_accuracies[half:]))
    if second_half > first_half + thresholds.trend_delta:
        return AccuracyTrend.IMPROVING
    if second_half < first_half - thresholds.trend_delta:
        return AccuracyTrend.DECLINING
    return AccuracyTrend.STABLE


def describe_accuracy(overall: float, thresholds: AccuracyThresholds | None = None) -> str:
    thresholds = thresholds or AccuracyThresholds()
    margin = 100 - overall
    if overall >= thresholds.excellent:
        return f"Excellent accuracy! Forecasts are within ±{margin:.0f}% of actual values on average."
    if overall >= thresholds.good:
        return f"Good accuracy. Forecasts average ±{margin:.0f}% deviation from actual values."
    if overall >= thresholds.moderate:
        return f"Moderate accuracy. Forecasts average ±{margin:.0f}% deviation. Consider reviewing data patterns."
    return f"Low accuracy (±{margin:.0f}% average error). More historical data may improve predictions."


def summarize_accuracy(
    records: list[ForecastAccuracyRecord],
    thresholds: AccuracyThresholds | None = None,
) -> ForecastAccuracyData:
    """Aggregate accuracy statistics over ``records``.

    Only validated records contribute to the averages. ``historical_records``
    keeps the order it was given.
    """
    thresholds = thresholds or AccuracyThresholds()
    data = ForecastAccuracyData(historical_records=list(records), total_count=len(records))
    validated = _chronological(r for r in records if r.is_validated)
    data.validated_count = len(validated)
    if not validated:
        data.accuracy_description = NO_VALIDATED_MESSAGE
        return data

    frame = _accuracy_frame(validated)
    data.average_revenue_accuracy = _mean_or_zero(frame["revenue_accuracy"])
    data.average_expense_accuracy = _mean_or_zero(frame["expense_accuracy"])
    data.overall_revenue_mape = _mean_or_zero(frame["revenue_mape"])
    data.accuracy_trend = accuracy_trend(frame["revenue_accuracy"].dropna().tolist(), thresholds)

    overall = (data.average_revenue_accuracy + data.average_expense_accuracy) / 2
    data.accuracy_description = describe_accuracy(overall, thresholds)
    return data


def recent_accuracy(records: list[ForecastAccuracyRecord], recent_count: int) -> tuple[float, float] | None:
    """Mean (revenue, expense) accuracy over the latest ``recent_count`` validated records."""
    validated = [r for r in records if r.is_validated]
    recent = sorted(validated, key=lambda r: r.period_end, reverse=True)[: max(recent_count, 0)]
    if not recent:
        return None
    frame = _accuracy_frame(recent)
    if frame["revenue_accuracy"].isna().all() and frame["expense_accuracy"].isna().all():
        return None
    return _mean_or_zero(frame["revenue_accuracy"]), _mean_or_zero(frame["expense_accuracy"])
