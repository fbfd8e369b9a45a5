from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, StatusDecision


class OnTimeStrategy(AttendanceStrategy):
    """Scan within the lateness threshold (or a kind without lateness)."""

    def decide(self, *, issued_at: datetime, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, late_minutes=0, note="On time")
