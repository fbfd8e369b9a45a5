from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceStatus, AttendanceType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, unique_insert
from .model import AttendanceQuery, AttendanceRecord, NewClassRecord, NewTeacherCheckIn
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, attendance_type, session_id, teacher_id, student_id, institution_code,
    subject, class_name, section, period, status, late_minutes, scan_time,
    check_in, check_out, work_hours, attendance_date, remarks, marked_by
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        attendance_type=AttendanceType(r["attendance_type"]),
        session_id=r["session_id"],
        teacher_id=int(r["teacher_id"]),
        student_id=int(r["student_id"]) if r.get("student_id") is not None else None,
        institution_code=r["institution_code"],
        subject=r.get("subject"),
        class_name=r.get("class_name"),
        section=r.get("section"),
        period=int(r["period"]) if r.get("period") is not None else None,
        status=AttendanceStatus(r["status"]),
        late_minutes=int(r.get("late_minutes") or 0),
        scan_time=r["scan_time"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        work_hours=float(r["work_hours"]) if r.get("work_hours") is not None else None,
        attendance_date=r["attendance_date"],
        remarks=r.get("remarks"),
        marked_by=r.get("marked_by"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, record_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE record_id=%s", (int(record_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_class_record(self, session_id: str, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE session_id=%s AND student_id=%s
                """,
                (session_id, int(student_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_teacher_record(self, teacher_id: int, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE self_teacher_id=%s AND attendance_date=%s
                """,
                (int(teacher_id), attendance_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_class_record(self, new: NewClassRecord) -> AttendanceRecord:
        with unique_insert(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    attendance_type, session_id, teacher_id, student_id, institution_code,
                    subject, class_name, section, period, status, late_minutes,
                    scan_time, attendance_date, remarks, marked_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    AttendanceType.STUDENT.value,
                    new.session_id,
                    new.teacher_id,
                    new.student_id,
                    new.institution_code,
                    new.subject,
                    new.class_name,
                    new.section,
                    new.period,
                    new.status.value,
                    new.late_minutes,
                    new.scan_time,
                    new.attendance_date,
                    new.remarks,
                    new.marked_by,
                ),
            )
            record_id = int(cur.lastrowid)

        return AttendanceRecord(
            record_id=record_id,
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

    def insert_teacher_check_in(self, new: NewTeacherCheckIn) -> AttendanceRecord:
        with unique_insert(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    attendance_type, session_id, teacher_id, self_teacher_id, institution_code,
                    status, late_minutes, scan_time, check_in, attendance_date, remarks, marked_by
                )
                VALUES(%s,%s,%s,%s,%s,%s,0,%s,%s,%s,%s,%s)
                """,
                (
                    AttendanceType.TEACHER.value,
                    new.session_id,
                    new.teacher_id,
                    new.teacher_id,
                    new.institution_code,
                    new.status.value,
                    new.check_in,
                    new.check_in,
                    new.attendance_date,
                    new.remarks,
                    new.marked_by,
                ),
            )
            record_id = int(cur.lastrowid)

        return AttendanceRecord(
            record_id=record_id,
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

    def close_teacher_check_out(
        self,
        *,
        record_id: int,
        check_out: datetime,
        work_hours: float,
        remarks: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out=%s, scan_time=%s, work_hours=%s, remarks=%s
                WHERE record_id=%s AND attendance_type=%s AND check_out IS NULL
                """,
                (check_out, check_out, work_hours, remarks, int(record_id), AttendanceType.TEACHER.value),
            )
            return cur.rowcount > 0

    def find(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if query.institution_code is not None:
            clauses.append("institution_code=%s")
            params.append(query.institution_code)
        if query.teacher_id is not None:
            clauses.append("teacher_id=%s")
            params.append(int(query.teacher_id))
        if query.student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(query.student_id))
        if query.subject is not None:
            clauses.append("subject=%s")
            params.append(query.subject)
        if query.class_name is not None:
            clauses.append("class_name=%s")
            params.append(query.class_name)
        if query.attendance_type is not None:
            clauses.append("attendance_type=%s")
            params.append(query.attendance_type.value)
        if query.start_date is not None:
            clauses.append("attendance_date >= %s")
            params.append(query.start_date)
        if query.end_date is not None:
            clauses.append("attendance_date <= %s")
            params.append(query.end_date)

        where = " AND ".join(clauses) if clauses else "1=1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date DESC, scan_time ASC, record_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
