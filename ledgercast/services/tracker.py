from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable

from ledgercast.core.config import DEFAULT_MAX_RECORDS, DEFAULT_RECENT_COUNT, LOGGER_NAME
from ledgercast.core.types import AnalysisPeriod, ForecastAccuracyData, ForecastAccuracyRecord, PeriodForecast
from ledgercast.services.accuracy import NO_VALIDATED_MESSAGE, recent_accuracy, summarize_accuracy, validate_record
from ledgercast.services.ledger import LedgerQuery, count_new_customers
from ledgercast.services.record_store import ForecastRecordStore

logger = logging.getLogger(LOGGER_NAME)


class AccuracyTracker:
    """Tracks saved forecasts and compares them with realized ledger totals.

    ``records`` is the host's list of forecast records (or a store wrapping
    it); it is mutated in place and persisting it is left to the host. Calls
    are assumed to be serialized by the host.
    """

    def __init__(
        self,
        records: list[ForecastAccuracyRecord] | ForecastRecordStore | None,
        ledger: LedgerQuery,
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.store = records if isinstance(records, ForecastRecordStore) else ForecastRecordStore(records)
        self.ledger = ledger
        self._today = today
        self._now = now

    @property
    def records(self) -> list[ForecastAccuracyRecord]:
        return self.store.records

    def save_forecast(self, forecast: PeriodForecast, period: AnalysisPeriod) -> ForecastAccuracyRecord:
        record = ForecastAccuracyRecord(
            forecast_date=self._now(),
            period_start=period.start,
            period_end=period.end,
            forecasted_revenue=float(forecast.revenue),
            forecasted_expenses=float(forecast.expenses),
            forecasted_profit=float(forecast.profit),
            forecasted_new_customers=int(forecast.new_customers),
            confidence_score=float(forecast.confidence_score),
            method=forecast.method,
        )
        stored = self.store.upsert_pending(record)
        logger.debug("Saved forecast %s for %s..%s", stored.id, period.start, period.end)
        return stored

    def validate_past_forecasts(self) -> list[ForecastAccuracyRecord]:
        """Validate every pending record whose period ended before today.

        Returns the newly validated records; an empty list means nothing changed.
        """
        today = self._today()
        due = [r for r in self.store.pending() if r.period_end < today]
        validated: list[ForecastAccuracyRecord] = []
        for record in due:
            done = validate_record(
                record,
                actual_revenue=self.ledger.revenue_total(record.period_start, record.period_end),
                actual_expenses=self.ledger.expense_total(record.period_start, record.period_end),
                actual_new_customers=count_new_customers(self.ledger, record.period_start, record.period_end),
            )
            self.store.replace(done)
            validated.append(done)
        if validated:
            logger.info("Validated %d past forecast(s)", len(validated))
        return validated

    def get_accuracy_data(self) -> ForecastAccuracyData:
        self.validate_past_forecasts()
        ordered = sorted(self.store.records, key=lambda r: r.period_start, reverse=True)
        return summarize_accuracy(ordered)

    def get_recent_accuracy(self, recent_count: int = DEFAULT_RECENT_COUNT) -> tuple[float, float] | None:
        return recent_accuracy(self.store.records, recent_count)

    def get_accuracy_summary(self) -> str:
        recent = self.get_recent_accuracy()
        if recent is None:
            return NO_VALIDATED_MESSAGE
        validated_count = len(self.store.validated())
        revenue_accuracy, expense_accuracy = recent
        error_margin = 100 - (revenue_accuracy + expense_accuracy) / 2
        return (
            f"Based on {validated_count} validated forecast(s), predictions were within "
            f"±{error_margin:.0f}% of actual values on average."
        )

    def cleanup_old_records(self, max_records: int = DEFAULT_MAX_RECORDS) -> int:
        """Keep at most ``max_records`` records, validated first, then newest period.

        Returns the number of records removed. A negative limit keeps nothing.
        """
        max_records = max(max_records, 0)
        if len(self.store) <= max_records:
            return 0
        ranked = sorted(self.store.records, key=lambda r: (r.is_validated, r.period_start), reverse=True)
        removed = self.store.retain(ranked[:max_records])
        logger.info("Removed %d old forecast record(s), kept %d", removed, max_records)
        return removed
