from __future__ import annotations

from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord, BatchResult, RecordFilters


class AttendanceRepository(Protocol):
    def submit_batch(self, records: Sequence[AttendanceRecord]) -> BatchResult:
        """Persist all records as one all-or-nothing write.

        Store failures are reported in the returned result, not raised.
        """

        raise NotImplementedError

    def list_records(self, filters: RecordFilters) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def update_record(self, record_id: int, updates: Mapping[str, object]) -> bool:
        raise NotImplementedError

    def delete_record(self, record_id: int) -> bool:
        raise NotImplementedError

    def delete_all(self) -> int:
        raise NotImplementedError
