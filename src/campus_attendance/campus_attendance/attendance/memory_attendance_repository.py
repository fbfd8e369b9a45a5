from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceType
from ..core.exceptions import DuplicateRecordError
from .model import AttendanceQuery, AttendanceRecord, NewClassRecord, NewTeacherCheckIn
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Lock-guarded store with the same natural keys as the MySQL unique indexes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: dict[int, AttendanceRecord] = {}
        self._by_session_student: dict[tuple[str, int], int] = {}
        self._by_teacher_day: dict[tuple[int, date], int] = {}
        self._seq = 0

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._records.get(int(record_id))

    def get_class_record(self, session_id: str, student_id: int) -> Optional[AttendanceRecord]:
        record_id = self._by_session_student.get((session_id, int(student_id)))
        return self._records.get(record_id) if record_id else None

    def get_teacher_record(self, teacher_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        record_id = self._by_teacher_day.get((int(teacher_id), attendance_date))
        return self._records.get(record_id) if record_id else None

    def insert_class_record(self, new: NewClassRecord) -> AttendanceRecord:
        key = (new.session_id, int(new.student_id))
        with self._lock:
            if key in self._by_session_student:
                raise DuplicateRecordError(f"session {new.session_id} already has student {new.student_id}")
            self._seq += 1
            record = AttendanceRecord(
                record_id=self._seq,
                attendance_type=AttendanceType.STUDENT,
                session_id=new.session_id,
                teacher_id=new.teacher_id,
                student_id=new.student_id,
                institution_code=new.institution_code,
                subject=new.subject,
                class_name=new.class_name,
                section=new.section,
                period=new.period,
                status=new.status,
                late_minutes=new.late_minutes,
                scan_time=new.scan_time,
                attendance_date=new.attendance_date,
                remarks=new.remarks,
                marked_by=new.marked_by,
            )
            self._records[record.record_id] = record
            self._by_session_student[key] = record.record_id
            return record

    def insert_teacher_check_in(self, new: NewTeacherCheckIn) -> AttendanceRecord:
        key = (int(new.teacher_id), new.attendance_date)
        with self._lock:
            if key in self._by_teacher_day:
                raise DuplicateRecordError(f"teacher {new.teacher_id} already checked in on {new.attendance_date}")
            self._seq += 1
            record = AttendanceRecord(
                record_id=self._seq,
                attendance_type=AttendanceType.TEACHER,
                session_id=new.session_id,
                teacher_id=new.teacher_id,
                institution_code=new.institution_code,
                status=new.status,
                scan_time=new.check_in,
                check_in=new.check_in,
                attendance_date=new.attendance_date,
                remarks=new.remarks,
                marked_by=new.marked_by,
            )
            self._records[record.record_id] = record
            self._by_teacher_day[key] = record.record_id
            return record

    def close_teacher_check_out(
        self,
        *,
        record_id: int,
        check_out: datetime,
        work_hours: float,
        remarks: Optional[str] = None,
    ) -> bool:
        with self._lock:
            current = self._records.get(int(record_id))
            if current is None or not current.is_teacher_record or current.check_out is not None:
                return False
            self._records[current.record_id] = replace(
                current,
                check_out=check_out,
                scan_time=check_out,
                work_hours=work_hours,
                remarks=remarks,
            )
            return True

    def find(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        def matches(r: AttendanceRecord) -> bool:
            if query.institution_code is not None and r.institution_code != query.institution_code:
                return False
            if query.teacher_id is not None and r.teacher_id != int(query.teacher_id):
                return False
            if query.student_id is not None and r.student_id != int(query.student_id):
                return False
            if query.subject is not None and r.subject != query.subject:
                return False
            if query.class_name is not None and r.class_name != query.class_name:
                return False
            if query.attendance_type is not None and r.attendance_type is not query.attendance_type:
                return False
            if query.start_date is not None and r.attendance_date < query.start_date:
                return False
            if query.end_date is not None and r.attendance_date > query.end_date:
                return False
            return True

        with self._lock:
            items = [r for r in self._records.values() if matches(r)]
        items.sort(key=lambda r: (r.scan_time, r.record_id))
        items.sort(key=lambda r: r.attendance_date, reverse=True)
        return items
