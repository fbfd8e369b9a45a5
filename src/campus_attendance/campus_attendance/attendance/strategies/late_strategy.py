from __future__ import annotations

import math
from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late scan: whole minutes elapsed since the token was issued."""

    def decide(self, *, issued_at: datetime, now: datetime) -> StatusDecision:
        minutes = math.floor((now - issued_at).total_seconds() / 60)
        minutes = max(minutes, 0)
        return StatusDecision(status=AttendanceStatus.LATE, late_minutes=minutes, note=f"Late by {minutes} minutes")
