from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

import pytest

from campus_attendance.attendance.ledger import AttendanceLedger
from campus_attendance.attendance.memory_attendance_repository import InMemoryAttendanceRepository
from campus_attendance.core.enums import AttendanceStatus, AttendanceType, TeacherAction
from campus_attendance.core.exceptions import AlreadyCompleted, DuplicateSession
from campus_attendance.sessions.claims import ClassSessionClaim, new_session_id
from campus_attendance.sessions.policy import SessionPolicy

ISSUED = datetime(2025, 3, 3, 9, 0, 0)


@pytest.fixture
def repo():
    return InMemoryAttendanceRepository()


@pytest.fixture
def ledger(repo):
    return AttendanceLedger(repo, SessionPolicy())


def _claim(session_id=None):
    return ClassSessionClaim(
        session_id=session_id or new_session_id(),
        issuer_id=1,
        issued_at=ISSUED,
        institution_code="GCC",
        subject="Physics",
        class_name="10",
        section="A",
        period=2,
    )


def test_class_scan_records_status_and_remarks(ledger):
    record = ledger.record_class_scan(_claim(), 11, now=ISSUED + timedelta(seconds=30), marked_by="11")

    assert record.attendance_type is AttendanceType.STUDENT
    assert record.status is AttendanceStatus.PRESENT
    assert record.late_minutes == 0
    assert record.remarks == "On time"
    assert record.marked_by == "11"
    assert record.attendance_date == ISSUED.date()


def test_second_scan_of_same_session_is_duplicate(ledger):
    claim = _claim()
    first = ledger.record_class_scan(claim, 11, now=ISSUED + timedelta(seconds=10))

    with pytest.raises(DuplicateSession) as exc:
        ledger.record_class_scan(claim, 11, now=ISSUED + timedelta(seconds=200))

    assert exc.value.existing == first
    assert len(ledger.records_for_student(11, ISSUED.date(), ISSUED.date())) == 1


def test_same_student_different_sessions_are_both_recorded(ledger):
    ledger.record_class_scan(_claim(), 11, now=ISSUED)
    ledger.record_class_scan(_claim(), 11, now=ISSUED)

    assert len(ledger.records_for_student(11, ISSUED.date(), ISSUED.date())) == 2


def test_late_class_scan(ledger):
    record = ledger.record_class_scan(_claim(), 11, now=ISSUED + timedelta(seconds=150))

    assert record.status is AttendanceStatus.LATE
    assert record.late_minutes == 2
    assert record.remarks == "Late by 2 minutes"


def test_teacher_state_machine_and_work_hours(ledger):
    check_in_at = datetime(2025, 3, 3, 8, 0, 0)
    check_out_at = datetime(2025, 3, 3, 16, 30, 0)

    first = ledger.record_teacher_scan(1, "GCC", session_id="s1", now=check_in_at)
    assert first.action is TeacherAction.CHECK_IN
    assert first.record.check_in == check_in_at
    assert first.record.check_out is None
    assert first.record.remarks == "Checked in at 08:00:00"

    second = ledger.record_teacher_scan(1, "GCC", session_id="s2", now=check_out_at)
    assert second.action is TeacherAction.CHECK_OUT
    assert second.record.record_id == first.record.record_id
    assert second.record.check_out == check_out_at
    assert second.record.work_hours == 8.5
    assert second.record.remarks == "Checked out at 16:30:00 | Worked: 8.5 hours"

    with pytest.raises(AlreadyCompleted) as exc:
        ledger.record_teacher_scan(1, "GCC", session_id="s3", now=check_out_at + timedelta(minutes=1))
    assert exc.value.record.check_out == check_out_at


def test_work_hours_are_rounded_to_two_decimals(ledger):
    start = datetime(2025, 3, 3, 8, 0, 0)
    ledger.record_teacher_scan(1, "GCC", session_id="s1", now=start)
    scan = ledger.record_teacher_scan(1, "GCC", session_id="s2", now=start + timedelta(minutes=20))

    assert scan.record.work_hours == 0.33


def test_teacher_days_are_independent(ledger):
    day1 = datetime(2025, 3, 3, 8, 0, 0)
    ledger.record_teacher_scan(1, "GCC", session_id="s1", now=day1)
    ledger.record_teacher_scan(1, "GCC", session_id="s2", now=day1 + timedelta(hours=8))

    nxt = ledger.record_teacher_scan(1, "GCC", session_id="s3", now=day1 + timedelta(days=1))
    assert nxt.action is TeacherAction.CHECK_IN


def test_concurrent_class_scans_record_exactly_once(ledger):
    claim = _claim()
    workers = 100
    barrier = threading.Barrier(workers)

    def scan(_):
        barrier.wait()
        try:
            ledger.record_class_scan(claim, 42, now=ISSUED + timedelta(seconds=5))
            return "marked"
        except DuplicateSession:
            return "duplicate"

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(scan, range(workers)))

    assert results.count("marked") == 1
    assert results.count("duplicate") == workers - 1
    assert len(ledger.records_for_student(42, ISSUED.date(), ISSUED.date())) == 1


def test_concurrent_teacher_scans_never_create_two_records(ledger, repo):
    workers = 100
    barrier = threading.Barrier(workers)
    now = datetime(2025, 3, 3, 8, 0, 0)

    def scan(n):
        barrier.wait()
        try:
            return ledger.record_teacher_scan(1, "GCC", session_id=f"s{n}", now=now).action.value
        except AlreadyCompleted:
            return "completed"

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(scan, range(workers)))

    assert results.count("check_in") == 1
    assert results.count("check_out") == 1
    assert results.count("completed") == workers - 2
    records = ledger.records_for_teacher(1, attendance_type=AttendanceType.TEACHER)
    assert len(records) == 1
    assert records[0].check_out is not None


def test_half_hour_shift_is_half_an_hour(ledger):
    ledger.record_teacher_scan(1, "GCC", session_id="s1", now=datetime(2025, 3, 3, 9, 0, 0))
    scan = ledger.record_teacher_scan(1, "GCC", session_id="s2", now=datetime(2025, 3, 3, 9, 30, 0))

    assert scan.record.work_hours == 0.5
