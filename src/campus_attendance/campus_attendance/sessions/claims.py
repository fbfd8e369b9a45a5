from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from ..core.constants import DEFAULT_PERIOD, SESSION_ID_BYTES
from ..core.enums import SessionKind, TeacherAction


def new_session_id() -> str:
    """Fresh opaque id per issued token (32 hex chars)."""
    return secrets.token_hex(SESSION_ID_BYTES)


@dataclass(frozen=True)
class ClassSessionClaim:
    """What a class QR authorizes: one student scan per session id."""

    session_id: str
    issuer_id: int
    issued_at: datetime
    institution_code: str
    subject: str
    class_name: str
    section: str = ""
    period: int = DEFAULT_PERIOD
    kind: SessionKind = field(default=SessionKind.CLASS_SESSION, init=False)


@dataclass(frozen=True)
class TeacherSelfClaim:
    """What a teacher self-attendance QR authorizes: the issuer's own check-in/out."""

    session_id: str
    issuer_id: int
    issued_at: datetime
    institution_code: str
    purpose: TeacherAction = TeacherAction.CHECK_IN
    kind: SessionKind = field(default=SessionKind.TEACHER_SELF, init=False)


SessionClaim = Union[ClassSessionClaim, TeacherSelfClaim]
