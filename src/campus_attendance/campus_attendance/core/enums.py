from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Who is calling: drives route guards."""

    INSTITUTION = "institution"
    TEACHER = "teacher"
    STUDENT = "student"


class SessionKind(str, Enum):
    """Closed set of token kinds a teacher can issue."""

    CLASS_SESSION = "class_session"
    TEACHER_SELF = "teacher_self"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    LATE = "late"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    ON_LEAVE = "on_leave"


class AttendanceType(str, Enum):
    """Partition of the ledger: student class records vs teacher self records."""

    STUDENT = "student"
    TEACHER = "teacher"


class TeacherAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class RedemptionOutcome(str, Enum):
    """Typed result of a redemption attempt, mapped to HTTP by controllers."""

    MARKED = "marked"
    ALREADY_MARKED = "already_marked"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    INVALID_TOKEN = "invalid_token"
    WRONG_TOKEN_KIND = "wrong_token_kind"
    ALREADY_COMPLETED = "already_completed"
    NOT_FOUND = "not_found"
