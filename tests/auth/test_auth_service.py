from __future__ import annotations

import jwt
import pytest

from campus_attendance.core.enums import Role
from campus_attendance.core.exceptions import AuthenticationError

PASSWORD = "secret123"


def test_teacher_login_issues_verifiable_token(container, seed):
    token, principal = container.auth_service.login(Role.TEACHER, "MEHTA@gcc.edu", PASSWORD)

    assert principal.user_id == seed.teacher_id
    verified = container.auth_service.verify(token)
    assert verified == principal


def test_student_can_login_with_roll_number(container, seed):
    _, principal = container.auth_service.login(Role.STUDENT, "cs-002", PASSWORD)

    assert principal.user_id == seed.student_ids[1]
    assert principal.institution_code == "GCC"


def test_institution_login_has_no_user_id(container, seed):
    token, principal = container.auth_service.login(Role.INSTITUTION, "admin@gcc.edu", PASSWORD)

    assert principal.user_id is None
    assert container.auth_service.verify(token).institution_code == "GCC"


@pytest.mark.parametrize(
    "role,login,password",
    [
        (Role.TEACHER, "mehta@gcc.edu", "wrong-pass"),
        (Role.STUDENT, "mehta@gcc.edu", PASSWORD),
        (Role.TEACHER, "", PASSWORD),
        (Role.INSTITUTION, "nobody@gcc.edu", PASSWORD),
    ],
)
def test_bad_credentials(container, seed, role, login, password):
    with pytest.raises(AuthenticationError):
        container.auth_service.login(role, login, password)


def test_inactive_student_cannot_login(container, seed):
    container.directory_repo.set_active(student_id=seed.student_ids[0], is_active=False)

    with pytest.raises(AuthenticationError):
        container.auth_service.login(Role.STUDENT, "cs-001", PASSWORD)


def test_qr_token_is_not_an_access_token(container, seed, fixed_now):
    issued = container.redemption_service.issue_teacher_self_token(seed.teacher_id, now=fixed_now)

    with pytest.raises(AuthenticationError):
        container.auth_service.verify(issued.token)


def test_access_token_without_type_is_rejected(container):
    forged = jwt.encode({"sub": "1", "role": "teacher", "inst": "GCC", "exp": 4102444800}, "test-secret", algorithm="HS256")

    with pytest.raises(AuthenticationError):
        container.auth_service.verify(forged)


def test_student_login_is_scoped_to_institution(container, seed):
    directory = container.directory_service
    directory.enroll_student(
        institution_code=seed.other_institution_code, roll_no="CS-001", full_name="Bravo", password="bravo-pass"
    )

    _, principal = container.auth_service.login(
        Role.STUDENT, "CS-001", "bravo-pass", institution_code=seed.other_institution_code.lower()
    )
    _, home = container.auth_service.login(Role.STUDENT, "CS-001", PASSWORD, institution_code=seed.institution_code)

    assert principal.institution_code == seed.other_institution_code
    assert principal.name == "Bravo"
    assert home.user_id == seed.student_ids[0]
    with pytest.raises(AuthenticationError):
        container.auth_service.login(Role.STUDENT, "CS-001", PASSWORD, institution_code=seed.other_institution_code)
