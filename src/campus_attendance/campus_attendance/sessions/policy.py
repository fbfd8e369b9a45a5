from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..attendance.factory import AttendanceStrategyFactory
from ..attendance.strategies.base import StatusDecision
from ..core.constants import (
    CLASS_SESSION_TTL_SECONDS,
    LATE_THRESHOLD_SECONDS,
    TEACHER_SELF_TTL_SECONDS,
)
from ..core.enums import SessionKind


class SessionPolicy:
    """Lifetime and lateness rules per session kind.

    Lateness and expiry are separate axes: a class token can be redeemed
    late-but-valid until its TTL, after which the codec rejects it.
    """

    def __init__(
        self,
        *,
        class_ttl_seconds: int = CLASS_SESSION_TTL_SECONDS,
        teacher_self_ttl_seconds: int = TEACHER_SELF_TTL_SECONDS,
        late_threshold_seconds: int = LATE_THRESHOLD_SECONDS,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._ttl = {
            SessionKind.CLASS_SESSION: timedelta(seconds=int(class_ttl_seconds)),
            SessionKind.TEACHER_SELF: timedelta(seconds=int(teacher_self_ttl_seconds)),
        }
        self._late_threshold = timedelta(seconds=int(late_threshold_seconds))
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def ttl_for(self, kind: SessionKind) -> timedelta:
        try:
            return self._ttl[SessionKind(kind)]
        except (KeyError, ValueError):
            raise ValueError(f"No TTL defined for session kind {kind!r}") from None

    def lateness_threshold(self, kind: SessionKind) -> Optional[timedelta]:
        """Cutoff after issuance beyond which a scan is late; None when the kind has no lateness."""
        kind = SessionKind(kind)
        if kind is SessionKind.CLASS_SESSION:
            return self._late_threshold
        if kind is SessionKind.TEACHER_SELF:
            return None
        raise ValueError(f"No lateness policy defined for session kind {kind!r}")

    def decide_status(self, kind: SessionKind, *, issued_at: datetime, now: datetime) -> StatusDecision:
        threshold = self.lateness_threshold(kind)
        strategy = self._factory.for_scan(issued_at=issued_at, now=now, threshold=threshold)
        return strategy.decide(issued_at=issued_at, now=now)
