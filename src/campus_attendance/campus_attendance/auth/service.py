from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional

import jwt
from werkzeug.security import check_password_hash

from ..core.constants import DEFAULT_ACCESS_TOKEN_TTL_SECONDS, TOKEN_ALGORITHM
from ..core.enums import Role
from ..core.exceptions import AuthenticationError
from ..directory.repository import DirectoryRepository

_ACCESS_TOKEN_TYPE = "access"


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, decoded from a bearer token."""

    role: Role
    institution_code: str
    name: str
    user_id: Optional[int] = None

    @property
    def subject(self) -> str:
        return str(self.user_id) if self.user_id is not None else self.institution_code


class AuthService:
    """Use case: login with email/roll number and password, and bearer token checks."""

    def __init__(
        self,
        directory: DirectoryRepository,
        secret_key: str,
        *,
        ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    ):
        self._directory = directory
        self._secret_key = secret_key
        self._ttl_seconds = int(ttl_seconds)

    def authenticate(
        self, role: Role, login: str, password: str, *, institution_code: Optional[str] = None
    ) -> Principal:
        """Check credentials; students are looked up within ``institution_code`` when given."""
        login = (login or "").strip()
        if not login or not password:
            raise AuthenticationError("Invalid credentials")

        role = Role(role)
        if role is Role.INSTITUTION:
            inst = self._directory.get_institution_by_email(login)
            if inst and inst.is_active and self._password_ok(inst.password_hash, password):
                return Principal(role=role, institution_code=inst.institution_code, name=inst.name)
        elif role is Role.TEACHER:
            teacher = self._directory.get_teacher_by_email(login)
            if teacher and teacher.is_active and self._password_ok(teacher.password_hash, password):
                return Principal(
                    role=role,
                    institution_code=teacher.institution_code,
                    name=teacher.full_name,
                    user_id=teacher.teacher_id,
                )
        elif role is Role.STUDENT:
            code = institution_code.strip().upper() if institution_code else None
            student = self._directory.get_student_by_login(login, code)
            if student and student.is_active and self._password_ok(student.password_hash, password):
                return Principal(
                    role=role,
                    institution_code=student.institution_code,
                    name=student.full_name,
                    user_id=student.student_id,
                )

        raise AuthenticationError("Invalid credentials")

    @staticmethod
    def _password_ok(password_hash: str, password: str) -> bool:
        try:
            return check_password_hash(password_hash, password)
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            return False

    def issue_access_token(self, principal: Principal) -> str:
        now = int(time.time())
        payload = {
            "typ": _ACCESS_TOKEN_TYPE,
            "sub": principal.subject,
            "role": principal.role.value,
            "inst": principal.institution_code,
            "name": principal.name,
            "iat": now,
            "exp": now + self._ttl_seconds,
        }
        return jwt.encode(payload, self._secret_key, algorithm=TOKEN_ALGORITHM)

    def login(
        self, role: Role, login: str, password: str, *, institution_code: Optional[str] = None
    ) -> tuple[str, Principal]:
        principal = self.authenticate(role, login, password, institution_code=institution_code)
        return self.issue_access_token(principal), principal

    def verify(self, token: str) -> Principal:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["exp", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired. Please login again.") from None
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid token.") from None

        if payload.get("typ") != _ACCESS_TOKEN_TYPE:
            raise AuthenticationError("Invalid token.")
        try:
            role = Role(payload["role"])
            user_id = None if role is Role.INSTITUTION else int(payload["sub"])
            return Principal(role=role, institution_code=str(payload["inst"]), name=str(payload.get("name", "")), user_id=user_id)
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid token.") from None
