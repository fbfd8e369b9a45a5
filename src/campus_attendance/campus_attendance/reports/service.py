from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Sequence

from ..attendance.ledger import AttendanceLedger
from ..attendance.model import AttendanceRecord
from ..core.enums import AttendanceStatus, AttendanceType
from .calculator.base import WorkHoursCalculator
from .calculator.standard_calculator import StandardWorkHoursCalculator

EXPORT_FIELDS = [
    "date",
    "attendance_type",
    "session_id",
    "teacher_id",
    "student_id",
    "subject",
    "class",
    "section",
    "period",
    "status",
    "late_minutes",
    "scan_time",
    "check_in",
    "check_out",
    "work_hours",
    "remarks",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: dict


def attendance_percentage(attended: int, total: int) -> int:
    """round(attended / total * 100); 0 when there is nothing to count."""
    if total <= 0:
        return 0
    return round(attended / total * 100)


def status_counts(records: Iterable[AttendanceRecord]) -> dict:
    counts = {s.value: 0 for s in AttendanceStatus}
    total = 0
    for r in records:
        counts[r.status.value] += 1
        total += 1
    attended = counts[AttendanceStatus.PRESENT.value] + counts[AttendanceStatus.LATE.value]
    return {
        "total": total,
        **counts,
        "percentage": attendance_percentage(attended, total),
    }


def _fmt_dt(value, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
    return value.strftime(fmt) if value else ""


def to_row(r: AttendanceRecord) -> dict:
    return {
        "date": r.attendance_date.strftime("%Y-%m-%d"),
        "attendance_type": r.attendance_type.value,
        "session_id": r.session_id,
        "teacher_id": r.teacher_id,
        "student_id": r.student_id if r.student_id is not None else "",
        "subject": r.subject or "",
        "class": r.class_name or "",
        "section": r.section or "",
        "period": r.period if r.period is not None else "",
        "status": r.status.value,
        "late_minutes": r.late_minutes,
        "scan_time": _fmt_dt(r.scan_time),
        "check_in": _fmt_dt(r.check_in),
        "check_out": _fmt_dt(r.check_out),
        "work_hours": f"{r.work_hours:.2f}" if r.work_hours is not None else "",
        "remarks": r.remarks or "",
    }


def _grouped_stats(records: Sequence[AttendanceRecord], key) -> list[tuple]:
    groups: dict = {}
    for r in records:
        groups.setdefault(key(r), []).append(r)
    return [(k, status_counts(items)) for k, items in groups.items()]


class AttendanceReportService:
    """Read-only aggregation over ledger queries (reports never write)."""

    def __init__(
        self,
        ledger: AttendanceLedger,
        *,
        calculator: Optional[WorkHoursCalculator] = None,
    ):
        self._ledger = ledger
        self._calculator = calculator or StandardWorkHoursCalculator()

    def student_report(self, *, student_id: int, start: date, end: date) -> ReportData:
        records = self._ledger.records_for_student(student_id, start, end)

        subjects = [
            {"subject": subject, **stats}
            for subject, stats in _grouped_stats(records, lambda r: r.subject or "-")
        ]
        subjects.sort(key=lambda s: s["subject"])
        return ReportData(
            rows=[to_row(r) for r in records],
            summary={**status_counts(records), "subjects": subjects},
        )

    def class_attendance(
        self,
        *,
        teacher_id: int,
        day: Optional[date] = None,
        subject: Optional[str] = None,
        class_name: Optional[str] = None,
    ) -> ReportData:
        records = self._ledger.records_for_teacher(
            teacher_id,
            day,
            day,
            subject=subject,
            class_name=class_name,
            attendance_type=AttendanceType.STUDENT,
        )
        stats = status_counts(records)
        stats["students"] = len({r.student_id for r in records})
        return ReportData(rows=[to_row(r) for r in records], summary=stats)

    def subject_report(
        self,
        *,
        institution_code: str,
        subject: str,
        teacher_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> ReportData:
        records = self._ledger.records_for_subject(
            institution_code, subject, teacher_id=teacher_id, start=start, end=end
        )
        students = [
            {"student_id": student_id, **stats}
            for student_id, stats in _grouped_stats(records, lambda r: r.student_id)
        ]
        students.sort(key=lambda s: (-s["percentage"], s["student_id"]))
        return ReportData(
            rows=students,
            summary={"subject": subject, "sessions": len({r.session_id for r in records}), **status_counts(records)},
        )

    def daily_summary(self, *, teacher_id: int, day: date) -> ReportData:
        records = self._ledger.records_for_teacher(
            teacher_id, day, day, attendance_type=AttendanceType.STUDENT
        )
        groups = [
            {"subject": k[0], "class": k[1], "section": k[2], "period": k[3], **stats}
            for k, stats in _grouped_stats(
                records, lambda r: (r.subject or "", r.class_name or "", r.section or "", r.period or 0)
            )
        ]
        groups.sort(key=lambda g: (g["period"], g["subject"], g["class"], g["section"]))
        return ReportData(rows=groups, summary={"date": day.strftime("%Y-%m-%d"), **status_counts(records)})

    def institution_report(self, *, institution_code: str, start: date, end: date) -> ReportData:
        students = self._ledger.records_for_institution(
            institution_code, start, end, attendance_type=AttendanceType.STUDENT
        )
        teachers = self._ledger.records_for_institution(
            institution_code, start, end, attendance_type=AttendanceType.TEACHER
        )
        classes = [
            {"class": k[0], "section": k[1], **stats}
            for k, stats in _grouped_stats(students, lambda r: (r.class_name or "", r.section or ""))
        ]
        classes.sort(key=lambda c: (c["class"], c["section"]))
        return ReportData(
            rows=classes,
            summary={
                "institution_code": institution_code,
                "start": start.strftime("%Y-%m-%d"),
                "end": end.strftime("%Y-%m-%d"),
                "students": status_counts(students),
                "teacher_days": len(teachers),
                "teachers_checked_out": sum(1 for t in teachers if t.check_out is not None),
            },
        )

    def teacher_work_summary(self, *, teacher_id: int, start: date, end: date) -> ReportData:
        records = self._ledger.records_for_teacher(
            teacher_id, start, end, attendance_type=AttendanceType.TEACHER
        )

        rows: list[dict] = []
        total_minutes = 0
        for r in records:
            minutes = self._calculator.worked_minutes(r)
            total_minutes += minutes
            rows.append(
                {
                    "date": r.attendance_date.strftime("%Y-%m-%d"),
                    "check_in": _fmt_dt(r.check_in, "%H:%M:%S") or "-",
                    "check_out": _fmt_dt(r.check_out, "%H:%M:%S") or "-",
                    "worked_hours": f"{minutes // 60:02d}:{minutes % 60:02d}",
                    "work_hours": r.work_hours if r.work_hours is not None else 0.0,
                    "status": r.status.value,
                }
            )

        return ReportData(
            rows=rows,
            summary={
                "teacher_id": teacher_id,
                "days": len(rows),
                "total_minutes": total_minutes,
                "total_hours": f"{total_minutes // 60:02d}:{total_minutes % 60:02d}",
            },
        )

    def export_rows(self, *, institution_code: str, start: date, end: date) -> list[dict]:
        records = self._ledger.records_for_institution(institution_code, start, end)
        return [to_row(r) for r in records]
