from __future__ import annotations

from .base import WorkHoursCalculator
from ...attendance.model import AttendanceRecord


class StandardWorkHoursCalculator(WorkHoursCalculator):
    """Standard rule: check_out - check_in, not below 0; open days count as 0."""

    def worked_minutes(self, record: AttendanceRecord) -> int:
        if not record.check_in or not record.check_out:
            return 0
        minutes = int((record.check_out - record.check_in).total_seconds() // 60)
        return max(minutes, 0)
