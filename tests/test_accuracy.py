from __future__ import annotations

from datetime import date, datetime

import pytest

from ledgercast.core.types import AccuracyTrend, ForecastAccuracyRecord
from ledgercast.services.accuracy import (
    accuracy_percent,
    mape_percent,
    revenue_mape,
    summarize_accuracy,
    validate_record,
)


def _record(month: int = 1, revenue: float = 1000.0, expenses: float = 500.0) -> ForecastAccuracyRecord:
    return ForecastAccuracyRecord(
        forecast_date=datetime(2025, 1, 1),
        period_start=date(2025, month, 1),
        period_end=date(2025, month, 28),
        forecasted_revenue=revenue,
        forecasted_expenses=expenses,
        forecasted_profit=revenue - expenses,
        forecasted_new_customers=3,
        confidence_score=70.0,
    )


def _validated(month: int, forecast: tuple[float, float], actual: tuple[float, float]) -> ForecastAccuracyRecord:
    record = _record(month, revenue=forecast[0], expenses=forecast[1])
    return validate_record(record, actual_revenue=actual[0], actual_expenses=actual[1], actual_new_customers=2)


@pytest.mark.parametrize(
    "forecasted,actual,expected",
    [
        (1000, 1000, 100),
        (950, 1000, 95),
        (1050, 1000, 95),
        (800, 1000, 80),
        (1200, 1000, 80),
        (500, 1000, 50),
        (5000, 1000, 0),
    ],
)
def test_accuracy_percent(forecasted, actual, expected):
    assert accuracy_percent(forecasted, actual) == pytest.approx(expected)


def test_accuracy_percent_missing_or_zero_actual():
    assert accuracy_percent(1000, None) is None
    assert accuracy_percent(1000, 0) is None


def test_accuracy_percent_decimal_precision():
    assert accuracy_percent(999.99, 1000.0) > 99.9


@pytest.mark.parametrize("forecasted,actual,expected", [(1000, 1000, 0), (1100, 1000, 10), (900, 1000, 10), (2000, 1000, 100)])
def test_mape_percent(forecasted, actual, expected):
    assert mape_percent(forecasted, actual) == pytest.approx(expected)


def test_validate_record_freezes_actuals():
    record = _record(revenue=1100.0, expenses=450.0)
    done = validate_record(record, actual_revenue=1000.0, actual_expenses=500.0, actual_new_customers=4)
    assert done.is_validated
    assert done.id == record.id
    assert done.actual_profit == pytest.approx(500.0)
    assert done.actual_new_customers == 4
    assert done.revenue_accuracy_percent == pytest.approx(90.0)
    assert done.expense_accuracy_percent == pytest.approx(90.0)
    assert revenue_mape(done) == pytest.approx(10.0)
    assert not record.is_validated


def test_validate_record_is_noop_on_validated_record():
    done = _validated(1, (1000, 500), (1000, 500))
    again = validate_record(done, actual_revenue=1.0, actual_expenses=1.0, actual_new_customers=99)
    assert again is done
    assert again.actual_revenue == 1000.0


def test_summary_without_records():
    data = summarize_accuracy([])
    assert data.validated_count == 0
    assert data.total_count == 0
    assert "No validated forecasts" in data.accuracy_description


def test_summary_without_validated_records():
    data = summarize_accuracy([_record(1), _record(2, revenue=2000.0)])
    assert data.validated_count == 0
    assert data.total_count == 2
    assert "No validated forecasts" in data.accuracy_description


def test_summary_averages():
    data = summarize_accuracy(
        [
            _validated(1, (1000, 500), (1000, 500)),
            _validated(2, (900, 550), (1000, 500)),
        ]
    )
    assert data.validated_count == 2
    assert data.average_revenue_accuracy == pytest.approx(95.0)
    assert data.average_expense_accuracy == pytest.approx(95.0)
    assert data.overall_revenue_mape == pytest.approx(5.0)


def test_summary_only_counts_validated_records():
    pending = ForecastAccuracyRecord(
        forecast_date=datetime(2025, 1, 1),
        period_start=date(2025, 2, 1),
        period_end=date(2025, 2, 28),
        forecasted_revenue=500.0,
        forecasted_expenses=250.0,
        forecasted_profit=250.0,
        forecasted_new_customers=0,
        confidence_score=50.0,
        actual_revenue=1000.0,
        actual_expenses=500.0,
    )
    data = summarize_accuracy(
        [
            _validated(1, (1000, 500), (1000, 500)),
            pending,
            _validated(3, (1000, 500), (1000, 500)),
        ]
    )
    assert data.validated_count == 2
    assert data.total_count == 3
    assert data.average_revenue_accuracy == pytest.approx(100.0)


@pytest.mark.parametrize(
    "forecast,label",
    [
        ((1000, 500), "Excellent"),
        ((850, 425), "Good"),
        ((750, 375), "Moderate"),
        ((500, 250), "Low"),
    ],
)
def test_summary_description_bands(forecast, label):
    data = summarize_accuracy([_validated(1, forecast, (1000, 500))])
    assert label in data.accuracy_description


@pytest.mark.parametrize(
    "revenues,expected",
    [
        ([700, 700, 950, 950], AccuracyTrend.IMPROVING),
        ([950, 950, 700, 700], AccuracyTrend.DECLINING),
        ([900, 900, 900, 900], AccuracyTrend.STABLE),
        ([700, 1000], AccuracyTrend.STABLE),
    ],
)
def test_summary_trend(revenues, expected):
    records = [_validated(month, (rev, 500), (1000, 500)) for month, rev in enumerate(revenues, start=1)]
    assert summarize_accuracy(records).accuracy_trend == expected


def test_trend_follows_period_order_not_list_order():
    records = [_validated(month, (rev, 500), (1000, 500)) for month, rev in enumerate([700, 700, 950, 950], start=1)]
    newest_first = list(reversed(records))
    data = summarize_accuracy(newest_first)
    assert data.accuracy_trend == AccuracyTrend.IMPROVING
    assert data.historical_records == newest_first
