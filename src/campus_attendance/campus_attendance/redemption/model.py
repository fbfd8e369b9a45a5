from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import RedemptionOutcome, TeacherAction
from ..sessions.claims import SessionClaim

SUCCESS_OUTCOMES = frozenset(
    {
        RedemptionOutcome.MARKED,
        RedemptionOutcome.ALREADY_MARKED,
        RedemptionOutcome.CHECKED_IN,
        RedemptionOutcome.CHECKED_OUT,
    }
)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    claim: SessionClaim
    expires_at: datetime
    ttl_seconds: int

    @property
    def session_id(self) -> str:
        return self.claim.session_id


@dataclass(frozen=True)
class RedemptionResult:
    """Typed outcome of a scan; ``reason`` is set for token rejections."""

    outcome: RedemptionOutcome
    message: str
    record: Optional[AttendanceRecord] = None
    claim: Optional[SessionClaim] = None
    action: Optional[TeacherAction] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome in SUCCESS_OUTCOMES
