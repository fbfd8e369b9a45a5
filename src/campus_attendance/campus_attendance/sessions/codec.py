from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Optional

import jwt

from ..common.datetime_utils import now_local
from ..core.constants import TOKEN_ALGORITHM
from ..core.enums import SessionKind, TeacherAction
from ..core.exceptions import InvalidSignature, MalformedToken, TokenExpired
from .claims import ClassSessionClaim, SessionClaim, TeacherSelfClaim
from .policy import SessionPolicy

# Expiry is checked against the injected clock below, not by PyJWT.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
}


def claim_to_payload(claim: SessionClaim, ttl_seconds: int) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "kind": claim.kind.value,
        "sid": claim.session_id,
        "issuer_id": int(claim.issuer_id),
        "issued_at": claim.issued_at.isoformat(timespec="microseconds"),
        "institution_code": claim.institution_code,
        "ttl": int(ttl_seconds),
    }
    if isinstance(claim, ClassSessionClaim):
        payload.update(
            subject=claim.subject,
            class_name=claim.class_name,
            section=claim.section,
            period=int(claim.period),
        )
    elif isinstance(claim, TeacherSelfClaim):
        payload["purpose"] = claim.purpose.value
    else:
        raise TypeError(f"Unsupported claim type: {type(claim)!r}")
    return payload


def claim_from_payload(payload: Any) -> SessionClaim:
    if not isinstance(payload, dict):
        raise MalformedToken("Token payload is not an object")
    try:
        kind = SessionKind(payload["kind"])
        common = dict(
            session_id=str(payload["sid"]),
            issuer_id=int(payload["issuer_id"]),
            issued_at=datetime.fromisoformat(payload["issued_at"]),
            institution_code=str(payload["institution_code"]),
        )
        if kind is SessionKind.CLASS_SESSION:
            return ClassSessionClaim(
                subject=str(payload["subject"]),
                class_name=str(payload["class_name"]),
                section=str(payload.get("section") or ""),
                period=int(payload["period"]),
                **common,
            )
        if kind is SessionKind.TEACHER_SELF:
            return TeacherSelfClaim(purpose=TeacherAction(payload.get("purpose", "check_in")), **common)
    except (KeyError, TypeError, ValueError) as exc:
        raise MalformedToken(f"Token payload is incomplete: {exc}") from None
    raise MalformedToken(f"Unsupported session kind {kind!r}")


class TokenCodec:
    """Signs session claims into opaque QR tokens and verifies them back.

    The secret is injected once at container build time.
    """

    def __init__(self, secret_key: str, policy: SessionPolicy, *, algorithm: str = TOKEN_ALGORITHM):
        if not secret_key:
            raise ValueError("Token signing key must not be empty")
        self._secret_key = secret_key
        self._policy = policy
        self._algorithm = algorithm

    def issue(self, claim: SessionClaim, ttl_seconds: Optional[int] = None) -> str:
        max_ttl = int(self._policy.ttl_for(claim.kind).total_seconds())
        ttl = max_ttl if ttl_seconds is None else int(ttl_seconds)
        if ttl <= 0 or ttl > max_ttl:
            raise ValueError(f"TTL for {claim.kind.value} must be within 1..{max_ttl} seconds")
        return jwt.encode(claim_to_payload(claim, ttl), self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str, *, now: Optional[datetime] = None) -> SessionClaim:
        """Verify signature first, then age against the kind's TTL.

        Raises MalformedToken, InvalidSignature or TokenExpired.
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedToken("Token is not a signed session token")

        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options=_DECODE_OPTIONS,
            )
        except jwt.InvalidSignatureError:
            raise InvalidSignature("Token signature does not match") from None
        except jwt.InvalidTokenError as exc:
            raise MalformedToken(f"Token could not be decoded: {exc}") from None

        claim = claim_from_payload(payload)

        ttl = self._policy.ttl_for(claim.kind).total_seconds()
        try:
            ttl = min(ttl, int(payload.get("ttl", ttl)))
        except (TypeError, ValueError):
            raise MalformedToken("Token TTL is not a number") from None

        now = now or now_local()
        if (now - claim.issued_at).total_seconds() > ttl:
            raise TokenExpired("Token has expired")
        return claim

    def expires_at(self, claim: SessionClaim, ttl_seconds: Optional[int] = None) -> datetime:
        ttl = self._policy.ttl_for(claim.kind)
        if ttl_seconds is not None:
            ttl = min(ttl, timedelta(seconds=int(ttl_seconds)))
        return claim.issued_at + ttl
