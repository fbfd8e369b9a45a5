from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..attendance.ledger import AttendanceLedger
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_positive_int
from ..core.app_logger import get_logger
from ..core.constants import DEFAULT_PERIOD
from ..core.enums import RedemptionOutcome, TeacherAction
from ..core.exceptions import AlreadyCompleted, DuplicateSession, NotFoundError, TokenError
from ..directory.service import DirectoryService
from ..sessions.claims import ClassSessionClaim, TeacherSelfClaim, new_session_id
from ..sessions.codec import TokenCodec
from .model import IssuedToken, RedemptionResult

logger = get_logger(__name__)


class RedemptionService:
    """Use case: issue QR session tokens and redeem them into attendance.

    The only entry point controllers call for the QR protocol. Redemption
    never raises for expected outcomes; storage failures propagate.
    """

    def __init__(
        self,
        codec: TokenCodec,
        ledger: AttendanceLedger,
        directory: DirectoryService,
    ):
        self._codec = codec
        self._ledger = ledger
        self._directory = directory

    def issue_class_token(
        self,
        issuer_id: int,
        subject: str,
        class_name: str,
        section: Optional[str] = None,
        period: Optional[int] = None,
        institution_code: Optional[str] = None,
        *,
        ttl_seconds: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        subject = require_non_empty(subject, "Subject")
        class_name = require_non_empty(class_name, "Class")
        period = require_positive_int(period if period not in (None, "") else DEFAULT_PERIOD, "Period")

        teacher = self._directory.require_active_teacher(issuer_id, institution_code)

        claim = ClassSessionClaim(
            session_id=new_session_id(),
            issuer_id=teacher.teacher_id,
            issued_at=now or now_local(),
            institution_code=teacher.institution_code,
            subject=subject,
            class_name=class_name,
            section=(section or "").strip(),
            period=period,
        )
        return self._issue(claim, ttl_seconds)

    def issue_teacher_self_token(
        self,
        issuer_id: int,
        institution_code: Optional[str] = None,
        *,
        ttl_seconds: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> IssuedToken:
        teacher = self._directory.require_active_teacher(issuer_id, institution_code)

        claim = TeacherSelfClaim(
            session_id=new_session_id(),
            issuer_id=teacher.teacher_id,
            issued_at=now or now_local(),
            institution_code=teacher.institution_code,
        )
        return self._issue(claim, ttl_seconds)

    def _issue(self, claim, ttl_seconds: Optional[int]) -> IssuedToken:
        token = self._codec.issue(claim, ttl_seconds)
        expires_at = self._codec.expires_at(claim, ttl_seconds)
        logger.info(
            "issued %s token session=%s issuer=%s institution=%s",
            claim.kind.value,
            claim.session_id,
            claim.issuer_id,
            claim.institution_code,
        )
        return IssuedToken(
            token=token,
            claim=claim,
            expires_at=expires_at,
            ttl_seconds=int((expires_at - claim.issued_at).total_seconds()),
        )

    def redeem_class_token(
        self,
        token: str,
        student_id: int,
        now: Optional[datetime] = None,
        *,
        marked_by: Optional[str] = None,
    ) -> RedemptionResult:
        now = now or now_local()

        try:
            claim = self._codec.decode(token, now=now)
        except TokenError as exc:
            logger.warning("class token rejected for student=%s: %s", student_id, exc.reason)
            return RedemptionResult(
                outcome=RedemptionOutcome.INVALID_TOKEN,
                message="QR code expired or invalid. Please ask teacher for a new one.",
                reason=exc.reason,
            )

        if not isinstance(claim, ClassSessionClaim):
            return RedemptionResult(
                outcome=RedemptionOutcome.WRONG_TOKEN_KIND,
                message="This QR is not for class attendance",
                claim=claim,
            )

        try:
            self._directory.require_active_teacher(claim.issuer_id, claim.institution_code)
            self._directory.require_active_student(student_id, claim.institution_code)
        except NotFoundError as exc:
            return RedemptionResult(outcome=RedemptionOutcome.NOT_FOUND, message=str(exc), claim=claim)

        try:
            record = self._ledger.record_class_scan(
                claim,
                student_id,
                now=now,
                marked_by=marked_by or str(student_id),
            )
        except DuplicateSession as exc:
            logger.info("session=%s student=%s already marked", claim.session_id, student_id)
            return RedemptionResult(
                outcome=RedemptionOutcome.ALREADY_MARKED,
                message="Attendance already marked for this class",
                record=exc.existing,
                claim=claim,
            )

        if record.late_minutes:
            message = f"Attendance marked (Late by {record.late_minutes} minutes)"
        else:
            message = "Attendance marked successfully"
        logger.info(
            "session=%s student=%s marked %s late_minutes=%s",
            claim.session_id,
            student_id,
            record.status.value,
            record.late_minutes,
        )
        return RedemptionResult(outcome=RedemptionOutcome.MARKED, message=message, record=record, claim=claim)

    def redeem_teacher_self_token(
        self,
        token: str,
        now: Optional[datetime] = None,
        *,
        scanned_by: Optional[str] = None,
        scanner_institution: Optional[str] = None,
    ) -> RedemptionResult:
        now = now or now_local()

        try:
            claim = self._codec.decode(token, now=now)
        except TokenError as exc:
            logger.warning("teacher token rejected: %s", exc.reason)
            return RedemptionResult(
                outcome=RedemptionOutcome.INVALID_TOKEN,
                message="Invalid or expired QR code",
                reason=exc.reason,
            )

        if not isinstance(claim, TeacherSelfClaim):
            return RedemptionResult(
                outcome=RedemptionOutcome.WRONG_TOKEN_KIND,
                message="This QR is not for teacher attendance",
                claim=claim,
            )

        try:
            if scanner_institution is not None and scanner_institution != claim.institution_code:
                raise NotFoundError("Teacher not found")
            self._directory.require_active_teacher(claim.issuer_id, claim.institution_code)
        except NotFoundError as exc:
            return RedemptionResult(outcome=RedemptionOutcome.NOT_FOUND, message=str(exc), claim=claim)

        try:
            scan = self._ledger.record_teacher_scan(
                claim.issuer_id,
                claim.institution_code,
                session_id=claim.session_id,
                now=now,
                marked_by=scanned_by or "qr_scanner",
            )
        except AlreadyCompleted as exc:
            return RedemptionResult(
                outcome=RedemptionOutcome.ALREADY_COMPLETED,
                message="Attendance already completed for today",
                record=exc.record,
                claim=claim,
            )

        logger.info("teacher=%s %s on %s", claim.issuer_id, scan.action.value, now.date())
        if scan.action is TeacherAction.CHECK_IN:
            return RedemptionResult(
                outcome=RedemptionOutcome.CHECKED_IN,
                message="Teacher check-in successful!",
                record=scan.record,
                claim=claim,
                action=scan.action,
            )
        return RedemptionResult(
            outcome=RedemptionOutcome.CHECKED_OUT,
            message="Teacher check-out successful!",
            record=scan.record,
            claim=claim,
            action=scan.action,
        )
