from __future__ import annotations

import calendar
from datetime import date
from typing import Protocol, Sequence

from ledgercast.core.config import DEFAULT_CANDIDATE_LENGTHS, MIN_POINTS_FOR_SEASONAL_PROJECTION, ConfidenceWeights
from ledgercast.core.types import AnalysisPeriod, ForecastResult, PeriodForecast, SeasonalPattern
from ledgercast.services.holt_winters import auto_forecast, detect_season_length
from ledgercast.services.stats import as_array, population_cv


class MonthlyLedger(Protocol):
    def monthly_revenue(self) -> list[float]: ...

    def monthly_expenses(self) -> list[float]: ...

    def monthly_new_customers(self) -> list[float]: ...


def confidence_score(
    history: Sequence[float],
    seasonal_pattern: SeasonalPattern | None = None,
    historical_accuracy: float | None = None,
    weights: ConfidenceWeights | None = None,
) -> float:
    """Score 0-100 for how much a forecast built on ``history`` can be trusted.

    Points come from data quantity, stability (coefficient of variation),
    seasonal regularity and, when known, past forecast accuracy.
    """
    weights = weights or ConfidenceWeights()
    values = as_array(history)
    score = min(weights.max_quantity_points, len(values) * weights.points_per_observation)

    if len(values) >= 3:
        cv = population_cv(values)
        score += next((points for limit, points in weights.stability_bands if cv < limit), weights.min_stability_points)

    if seasonal_pattern is not None and seasonal_pattern.seasonal_strength > 0.1:
        score += seasonal_pattern.seasonal_strength * weights.seasonal_points
    elif len(values) >= MIN_POINTS_FOR_SEASONAL_PROJECTION:
        score += weights.weak_seasonal_points

    if historical_accuracy is not None and historical_accuracy > 0:
        score += historical_accuracy / 100 * weights.accuracy_points

    return float(min(100.0, max(0.0, score)))


def confidence_level(score: float, weights: ConfidenceWeights | None = None) -> str:
    weights = weights or ConfidenceWeights()
    if score >= weights.high_level:
        return "High"
    if score >= weights.medium_level:
        return "Medium"
    return "Low"


def forecast_series(history: Sequence[float], periods_to_forecast: int = 1) -> ForecastResult:
    values = as_array(history)
    if len(values) >= MIN_POINTS_FOR_SEASONAL_PROJECTION:
        season_length = detect_season_length(values, DEFAULT_CANDIDATE_LENGTHS)
    else:
        season_length = min(4, len(values) // 2)
    return auto_forecast(values, max(2, season_length), periods_to_forecast)


def _next_value(history: list[float]) -> tuple[float, ForecastResult | None]:
    if len(history) < 2:
        return 0.0, None
    result = forecast_series(history)
    return max(0.0, result.forecasted_value), result


def project_period(ledger: MonthlyLedger, historical_accuracy: float | None = None) -> PeriodForecast:
    """Forecast next month's revenue, expenses and new customers from the ledger."""
    revenue_history = ledger.monthly_revenue()
    revenue, revenue_result = _next_value(revenue_history)
    expenses, _ = _next_value(ledger.monthly_expenses())
    customers, _ = _next_value(ledger.monthly_new_customers())

    pattern = revenue_result.seasonal_pattern if revenue_result is not None else None
    return PeriodForecast(
        revenue=revenue,
        expenses=expenses,
        profit=revenue - expenses,
        new_customers=int(round(customers)),
        confidence_score=confidence_score(revenue_history, pattern, historical_accuracy),
        method=revenue_result.method.value if revenue_result is not None else "Insufficient Data",
    )


def next_month(after: date) -> AnalysisPeriod:
    year, month = (after.year + 1, 1) if after.month == 12 else (after.year, after.month + 1)
    return AnalysisPeriod(date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1]))
