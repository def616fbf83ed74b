from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from ledgercast.core.config import DEFAULT_FORECAST_METHOD


class TrendDirection(str, Enum):
    INCREASING = "Increasing"
    STABLE = "Stable"
    DECREASING = "Decreasing"


class ForecastMethod(str, Enum):
    ADDITIVE_HW = "Holt-Winters Additive"
    MULTIPLICATIVE_HW = "Holt-Winters Multiplicative"
    SIMPLE_EXPONENTIAL = "Simple Exponential Smoothing"
    NO_DATA = "No Data"


class AccuracyTrend(str, Enum):
    IMPROVING = "Improving"
    STABLE = "Stable"
    DECLINING = "Declining"


@dataclass
class SeasonalPattern:
    season_length: int
    seasonal_factors: list[float]
    seasonal_strength: float = 0.0
    trend_direction: TrendDirection = TrendDirection.STABLE
    trend_slope: float = 0.0
    description: str = ""


@dataclass
class ForecastResult:
    forecasted_values: list[float]
    seasonal_pattern: SeasonalPattern
    final_level: float
    final_trend: float
    method: ForecastMethod

    @property
    def forecasted_value(self) -> float:
        return self.forecasted_values[0] if self.forecasted_values else 0.0


@dataclass(frozen=True)
class AnalysisPeriod:
    start: date
    end: date


@dataclass
class PeriodForecast:
    revenue: float
    expenses: float
    profit: float
    new_customers: int
    confidence_score: float
    method: str = DEFAULT_FORECAST_METHOD


@dataclass(frozen=True)
class ForecastAccuracyRecord:
    forecast_date: datetime
    period_start: date
    period_end: date
    forecasted_revenue: float
    forecasted_expenses: float
    forecasted_profit: float
    forecasted_new_customers: int
    confidence_score: float
    method: str = DEFAULT_FORECAST_METHOD
    is_validated: bool = False
    actual_revenue: float | None = None
    actual_expenses: float | None = None
    actual_profit: float | None = None
    actual_new_customers: int | None = None
    revenue_accuracy_percent: float | None = None
    expense_accuracy_percent: float | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def period(self) -> AnalysisPeriod:
        return AnalysisPeriod(self.period_start, self.period_end)


@dataclass
class ForecastAccuracyData:
    historical_records: list[ForecastAccuracyRecord]
    validated_count: int = 0
    total_count: int = 0
    average_revenue_accuracy: float = 0.0
    average_expense_accuracy: float = 0.0
    overall_revenue_mape: float = 0.0
    accuracy_trend: AccuracyTrend = AccuracyTrend.STABLE
    accuracy_description: str = ""
