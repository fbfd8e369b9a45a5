from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, AttendanceType, TeacherAction


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record owned by the ledger.

    Class records have ``student_id`` and the class fields set; teacher self
    records have ``student_id=None`` and carry check-in/check-out.
    """

    record_id: int
    attendance_type: AttendanceType
    session_id: str
    teacher_id: int
    institution_code: str
    status: AttendanceStatus
    scan_time: datetime
    attendance_date: date
    student_id: Optional[int] = None
    subject: Optional[str] = None
    class_name: Optional[str] = None
    section: Optional[str] = None
    period: Optional[int] = None
    late_minutes: int = 0
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    work_hours: Optional[float] = None
    remarks: Optional[str] = None
    marked_by: Optional[str] = None

    @property
    def is_teacher_record(self) -> bool:
        return self.attendance_type is AttendanceType.TEACHER


@dataclass(frozen=True)
class NewClassRecord:
    """Insert payload for a student class-session scan."""

    session_id: str
    teacher_id: int
    student_id: int
    institution_code: str
    subject: str
    class_name: str
    section: str
    period: int
    status: AttendanceStatus
    late_minutes: int
    scan_time: datetime
    attendance_date: date
    remarks: Optional[str] = None
    marked_by: Optional[str] = None


@dataclass(frozen=True)
class NewTeacherCheckIn:
    """Insert payload for the first teacher self scan of a day."""

    session_id: str
    teacher_id: int
    institution_code: str
    check_in: datetime
    attendance_date: date
    status: AttendanceStatus = AttendanceStatus.PRESENT
    remarks: Optional[str] = None
    marked_by: Optional[str] = None


@dataclass(frozen=True)
class AttendanceQuery:
    """Read-model filter used by reporting; every field is optional."""

    institution_code: Optional[str] = None
    teacher_id: Optional[int] = None
    student_id: Optional[int] = None
    subject: Optional[str] = None
    class_name: Optional[str] = None
    attendance_type: Optional[AttendanceType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class TeacherScan:
    """Outcome of a teacher self-attendance transition."""

    action: TeacherAction
    record: AttendanceRecord
