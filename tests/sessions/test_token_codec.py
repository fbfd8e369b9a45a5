from __future__ import annotations

from datetime import datetime, timedelta

import jwt
import pytest

from campus_attendance.core.enums import SessionKind
from campus_attendance.core.exceptions import InvalidSignature, MalformedToken, TokenExpired
from campus_attendance.sessions.claims import ClassSessionClaim, TeacherSelfClaim, new_session_id
from campus_attendance.sessions.codec import TokenCodec
from campus_attendance.sessions.policy import SessionPolicy

ISSUED = datetime(2025, 3, 3, 9, 0, 0, 250000)


def _codec(secret: str = "k1") -> TokenCodec:
    return TokenCodec(secret, SessionPolicy())


def _class_claim() -> ClassSessionClaim:
    return ClassSessionClaim(
        session_id=new_session_id(),
        issuer_id=7,
        issued_at=ISSUED,
        institution_code="GCC",
        subject="Physics",
        class_name="10",
        section="A",
        period=3,
    )


def _tamper(token: str, segment: int) -> str:
    parts = token.split(".")
    target = parts[segment]
    i = len(target) // 2 if segment == 1 else 0
    replacement = "A" if target[i] != "A" else "B"
    parts[segment] = target[:i] + replacement + target[i + 1 :]
    return ".".join(parts)


def test_session_ids_are_32_hex_chars_and_unique():
    ids = {new_session_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(s) == 32 and int(s, 16) >= 0 for s in ids)


def test_class_claim_round_trips_with_microseconds():
    codec = _codec()
    claim = _class_claim()

    decoded = codec.decode(codec.issue(claim), now=ISSUED + timedelta(seconds=30))

    assert decoded == claim
    assert decoded.kind is SessionKind.CLASS_SESSION
    assert decoded.issued_at.microsecond == 250000


def test_teacher_claim_round_trips():
    codec = _codec()
    claim = TeacherSelfClaim(session_id=new_session_id(), issuer_id=7, issued_at=ISSUED, institution_code="GCC")

    decoded = codec.decode(codec.issue(claim), now=ISSUED)

    assert decoded == claim
    assert decoded.kind is SessionKind.TEACHER_SELF


def test_tampered_signature_is_rejected():
    codec = _codec()
    token = codec.issue(_class_claim())

    with pytest.raises(InvalidSignature):
        codec.decode(_tamper(token, 2), now=ISSUED)


def test_tampered_payload_is_rejected():
    codec = _codec()
    token = codec.issue(_class_claim())

    with pytest.raises((InvalidSignature, MalformedToken)):
        codec.decode(_tamper(token, 1), now=ISSUED)


def test_forged_payload_with_wrong_secret_is_rejected():
    claim = _class_claim()
    forged = _codec("attacker").issue(claim)

    with pytest.raises(InvalidSignature):
        _codec("k1").decode(forged, now=ISSUED)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b", "a.b.c.d", "x.y.z"])
def test_garbage_is_malformed(token):
    with pytest.raises(MalformedToken):
        _codec().decode(token, now=ISSUED)


def test_signed_but_unrecognised_payload_is_malformed():
    token = jwt.encode({"kind": "something_else", "sid": "x"}, "k1", algorithm="HS256")

    with pytest.raises(MalformedToken):
        _codec().decode(token, now=ISSUED)


def test_class_token_expiry_boundary():
    codec = _codec()
    claim = _class_claim()
    token = codec.issue(claim)

    assert codec.decode(token, now=ISSUED + timedelta(seconds=300)) == claim
    with pytest.raises(TokenExpired):
        codec.decode(token, now=ISSUED + timedelta(seconds=300, microseconds=1))


def test_teacher_token_expires_after_two_minutes():
    codec = _codec()
    claim = TeacherSelfClaim(session_id=new_session_id(), issuer_id=7, issued_at=ISSUED, institution_code="GCC")
    token = codec.issue(claim)

    assert codec.decode(token, now=ISSUED + timedelta(seconds=120)) == claim
    with pytest.raises(TokenExpired):
        codec.decode(token, now=ISSUED + timedelta(seconds=121))


def test_shorter_ttl_is_honoured_but_longer_is_refused():
    codec = _codec()
    claim = _class_claim()
    token = codec.issue(claim, ttl_seconds=30)

    assert codec.expires_at(claim, 30) == ISSUED + timedelta(seconds=30)
    with pytest.raises(TokenExpired):
        codec.decode(token, now=ISSUED + timedelta(seconds=31))

    with pytest.raises(ValueError):
        codec.issue(claim, ttl_seconds=301)
    with pytest.raises(ValueError):
        codec.issue(claim, ttl_seconds=0)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenCodec("", SessionPolicy())
