from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_scan(self, *, issued_at: datetime, now: datetime, threshold: Optional[timedelta]) -> AttendanceStrategy:
        if threshold is None:
            return OnTimeStrategy()

        # Strictly greater: a scan exactly at the threshold is still on time.
        if now - issued_at > threshold:
            return LateStrategy()
        return OnTimeStrategy()
