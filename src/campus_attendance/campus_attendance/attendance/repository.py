from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceQuery, AttendanceRecord, NewClassRecord, NewTeacherCheckIn


class AttendanceRepository(Protocol):
    """Storage primitives for the ledger.

    Writes are conditional so that the ledger stays race-safe without
    holding a lock across a read and a write:
    - inserts raise DuplicateRecordError when the natural key is taken,
    - check-out only applies while the record has no check-out yet.
    """

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_class_record(self, session_id: str, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_teacher_record(self, teacher_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def insert_class_record(self, new: NewClassRecord) -> AttendanceRecord:
        raise NotImplementedError

    def insert_teacher_check_in(self, new: NewTeacherCheckIn) -> AttendanceRecord:
        raise NotImplementedError

    def close_teacher_check_out(
        self,
        *,
        record_id: int,
        check_out: datetime,
        work_hours: float,
        remarks: Optional[str] = None,
    ) -> bool:
        """Set check-out iff it is still empty. Returns False when another scan won."""
        raise NotImplementedError

    def find(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
