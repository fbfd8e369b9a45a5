from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import pytest

from campus_attendance.container import Container, build_container

SIGNING_KEY = "test-qr-signing-key"
PASSWORD = "secret123"


@dataclass(frozen=True)
class Seed:
    institution_code: str
    teacher_id: int
    student_ids: list
    other_institution_code: str
    other_teacher_id: int
    other_student_id: int


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 3, 9, 0, 0)


@pytest.fixture
def container() -> Container:
    return build_container(backend="memory", signing_key=SIGNING_KEY, access_secret_key="test-secret")


@pytest.fixture
def seed(container: Container) -> Seed:
    directory = container.directory_service

    code = directory.register_institution(
        institution_code="gcc", name="Green Valley College", email="admin@gcc.edu", password=PASSWORD
    )
    teacher_id = directory.enroll_teacher(
        institution_code=code,
        employee_code="T-001",
        full_name="R. Mehta",
        email="mehta@gcc.edu",
        password=PASSWORD,
        department="Science",
    )
    student_ids = [
        directory.enroll_student(
            institution_code=code,
            roll_no=f"cs-{n:03d}",
            full_name=f"Student {n}",
            password=PASSWORD,
            email=f"student{n}@gcc.edu",
            class_name="10",
            section="A",
        )
        for n in (1, 2, 3)
    ]

    other = directory.register_institution(
        institution_code="OTH", name="Other School", email="admin@oth.edu", password=PASSWORD
    )
    other_teacher = directory.enroll_teacher(
        institution_code=other,
        employee_code="O-001",
        full_name="Other Teacher",
        email="teacher@oth.edu",
        password=PASSWORD,
    )
    other_student = directory.enroll_student(
        institution_code=other, roll_no="oth-001", full_name="Other Student", password=PASSWORD
    )

    return Seed(
        institution_code=code,
        teacher_id=teacher_id,
        student_ids=student_ids,
        other_institution_code=other,
        other_teacher_id=other_teacher,
        other_student_id=other_student,
    )
