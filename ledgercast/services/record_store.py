from __future__ import annotations

import dataclasses

from ledgercast.core.types import AnalysisPeriod, ForecastAccuracyRecord


class ForecastRecordStore:
    """Keyed access over the host's list of forecast records.

    The list is mutated in place so the host can persist it as-is. Unvalidated
    records are addressed by their exact period; every record is addressed by
    its ``id``.
    """

    def __init__(self, records: list[ForecastAccuracyRecord] | None = None):
        self._records = records if records is not None else []

    @property
    def records(self) -> list[ForecastAccuracyRecord]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def _index_of(self, record_id: str) -> int | None:
        return next((i for i, r in enumerate(self._records) if r.id == record_id), None)

    def find_pending(self, period: AnalysisPeriod) -> ForecastAccuracyRecord | None:
        return next((r for r in self._records if not r.is_validated and r.period == period), None)

    def pending(self) -> list[ForecastAccuracyRecord]:
        return [r for r in self._records if not r.is_validated]

    def validated(self) -> list[ForecastAccuracyRecord]:
        return [r for r in self._records if r.is_validated]

    def upsert_pending(self, record: ForecastAccuracyRecord) -> ForecastAccuracyRecord:
        """Store an unvalidated record, replacing any pending one for the same period.

        A replacement keeps the existing record's ``id`` and list position.
        """
        if record.is_validated:
            raise ValueError("upsert_pending only accepts unvalidated records")
        existing = self.find_pending(record.period)
        if existing is None:
            self._records.append(record)
            return record
        stored = dataclasses.replace(record, id=existing.id)
        self._records[self._index_of(existing.id)] = stored
        return stored

    def replace(self, record: ForecastAccuracyRecord) -> None:
        index = self._index_of(record.id)
        if index is None:
            raise KeyError(record.id)
        self._records[index] = record

    def retain(self, keep: list[ForecastAccuracyRecord]) -> int:
        removed = len(self._records) - len(keep)
        self._records[:] = keep
        return removed
