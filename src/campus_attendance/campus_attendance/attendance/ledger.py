from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import work_hours_between
from ..core.app_logger import get_logger
from ..core.enums import AttendanceType, TeacherAction
from ..core.exceptions import AlreadyCompleted, DuplicateRecordError, DuplicateSession
from ..sessions.claims import ClassSessionClaim
from ..sessions.policy import SessionPolicy
from .model import AttendanceQuery, AttendanceRecord, NewClassRecord, NewTeacherCheckIn, TeacherScan
from .repository import AttendanceRepository

logger = get_logger(__name__)


class AttendanceLedger:
    """Sole writer of attendance records.

    Class records: at most one per (session_id, student_id).
    Teacher self records: one per (teacher_id, day), moving
    NONE -> CHECKED_IN -> CHECKED_OUT. Each transition is a conditional
    write; a writer that loses a race re-reads and continues from the state
    the winner left behind.
    """

    # NONE -> CHECKED_IN -> CHECKED_OUT: three reads always reach a terminal answer.
    _MAX_TRANSITION_ATTEMPTS = 3

    def __init__(self, attendance: AttendanceRepository, policy: SessionPolicy):
        self._attendance = attendance
        self._policy = policy

    def record_class_scan(
        self,
        claim: ClassSessionClaim,
        student_id: int,
        *,
        now: datetime,
        marked_by: Optional[str] = None,
    ) -> AttendanceRecord:
        decision = self._policy.decide_status(claim.kind, issued_at=claim.issued_at, now=now)

        new = NewClassRecord(
            session_id=claim.session_id,
            teacher_id=claim.issuer_id,
            student_id=int(student_id),
            institution_code=claim.institution_code,
            subject=claim.subject,
            class_name=claim.class_name,
            section=claim.section,
            period=claim.period,
            status=decision.status,
            late_minutes=decision.late_minutes,
            scan_time=now,
            attendance_date=now.date(),
            remarks=decision.note,
            marked_by=marked_by,
        )
        try:
            return self._attendance.insert_class_record(new)
        except DuplicateRecordError:
            existing = self._attendance.get_class_record(claim.session_id, int(student_id))
            raise DuplicateSession("Attendance already marked for this session", existing) from None

    def record_teacher_scan(
        self,
        teacher_id: int,
        institution_code: str,
        *,
        session_id: str,
        now: datetime,
        marked_by: Optional[str] = None,
    ) -> TeacherScan:
        day = now.date()

        for _ in range(self._MAX_TRANSITION_ATTEMPTS):
            existing = self._attendance.get_teacher_record(teacher_id, day)

            if existing is None:
                try:
                    record = self._attendance.insert_teacher_check_in(
                        NewTeacherCheckIn(
                            session_id=session_id,
                            teacher_id=int(teacher_id),
                            institution_code=institution_code,
                            check_in=now,
                            attendance_date=day,
                            remarks=f"Checked in at {now:%H:%M:%S}",
                            marked_by=marked_by,
                        )
                    )
                except DuplicateRecordError:
                    logger.debug("check-in race lost for teacher=%s day=%s, re-reading", teacher_id, day)
                    continue
                return TeacherScan(action=TeacherAction.CHECK_IN, record=record)

            if existing.check_out is not None:
                raise AlreadyCompleted("Attendance already completed for today", existing)

            check_in = existing.check_in or existing.scan_time
            hours = max(work_hours_between(check_in, now), 0.0)
            closed = self._attendance.close_teacher_check_out(
                record_id=existing.record_id,
                check_out=now,
                work_hours=hours,
                remarks=f"Checked out at {now:%H:%M:%S} | Worked: {hours} hours",
            )
            if closed:
                record = self._attendance.get_by_id(existing.record_id)
                return TeacherScan(action=TeacherAction.CHECK_OUT, record=record)
            logger.debug("check-out race lost for teacher=%s day=%s, re-reading", teacher_id, day)

        raise AlreadyCompleted("Attendance already completed for today", self._attendance.get_teacher_record(teacher_id, day))

    def teacher_record_for_day(self, teacher_id: int, day: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_teacher_record(teacher_id, day)

    def records_for_teacher(
        self,
        teacher_id: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
        **filters,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.find(AttendanceQuery(teacher_id=teacher_id, start_date=start, end_date=end, **filters))

    def records_for_student(self, student_id: int, start: date, end: date) -> Sequence[AttendanceRecord]:
        return self._attendance.find(AttendanceQuery(student_id=student_id, start_date=start, end_date=end))

    def records_for_institution(
        self,
        institution_code: str,
        start: date,
        end: date,
        *,
        attendance_type: Optional[AttendanceType] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.find(
            AttendanceQuery(
                institution_code=institution_code,
                start_date=start,
                end_date=end,
                attendance_type=attendance_type,
            )
        )

    def records_for_subject(
        self,
        institution_code: str,
        subject: str,
        *,
        teacher_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        return self._attendance.find(
            AttendanceQuery(
                institution_code=institution_code,
                subject=subject,
                teacher_id=teacher_id,
                start_date=start,
                end_date=end,
                attendance_type=AttendanceType.STUDENT,
            )
        )
