from __future__ import annotations

from datetime import datetime, timezone

import pandas as pd

from ledgercast.core.types import ForecastAccuracyData
from ledgercast.services.accuracy import revenue_mape


def build_accuracy_table(data: ForecastAccuracyData) -> pd.DataFrame:
    columns = [
        "period_start",
        "period_end",
        "forecast_date",
        "method",
        "confidence_score",
        "is_validated",
        "forecasted_revenue",
        "actual_revenue",
        "revenue_accuracy_percent",
        "revenue_mape",
        "forecasted_expenses",
        "actual_expenses",
        "expense_accuracy_percent",
        "forecasted_profit",
        "actual_profit",
        "forecasted_new_customers",
        "actual_new_customers",
    ]
    rows = [
        {
            "period_start": r.period_start,
            "period_end": r.period_end,
            "forecast_date": r.forecast_date,
            "method": r.method,
            "confidence_score": r.confidence_score,
            "is_validated": r.is_validated,
            "forecasted_revenue": r.forecasted_revenue,
            "actual_revenue": r.actual_revenue,
            "revenue_accuracy_percent": r.revenue_accuracy_percent,
            "revenue_mape": revenue_mape(r),
            "forecasted_expenses": r.forecasted_expenses,
            "actual_expenses": r.actual_expenses,
            "expense_accuracy_percent": r.expense_accuracy_percent,
            "forecasted_profit": r.forecasted_profit,
            "actual_profit": r.actual_profit,
            "forecasted_new_customers": r.forecasted_new_customers,
            "actual_new_customers": r.actual_new_customers,
        }
        for r in data.historical_records
    ]
    return pd.DataFrame(rows, columns=columns)


def build_accuracy_summary(data: ForecastAccuracyData) -> pd.DataFrame:
    summary = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "total_forecasts": data.total_count,
        "validated_forecasts": data.validated_count,
        "average_revenue_accuracy": data.average_revenue_accuracy,
        "average_expense_accuracy": data.average_expense_accuracy,
        "overall_revenue_mape": data.overall_revenue_mape,
        "accuracy_trend": data.accuracy_trend.value,
        "description": data.accuracy_description,
    }
    return pd.DataFrame([summary])
