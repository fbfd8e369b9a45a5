from __future__ import annotations

from typing import Optional, Protocol

from .model import Institution, Student, Teacher


class DirectoryRepository(Protocol):
    """Read/enroll interface over institutions, teachers and students.

    Services depend on this interface, not on a concrete database.
    """

    def get_institution(self, institution_code: str) -> Optional[Institution]:
        raise NotImplementedError

    def get_institution_by_email(self, email: str) -> Optional[Institution]:
        raise NotImplementedError

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def get_teacher_by_email(self, email: str) -> Optional[Teacher]:
        raise NotImplementedError

    def get_student(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_student_by_login(self, login: str, institution_code: Optional[str] = None) -> Optional[Student]:
        """Look a student up by email or roll number, within one institution when given."""
        raise NotImplementedError

    def add_institution(self, institution: Institution) -> str:
        raise NotImplementedError

    def add_teacher(
        self,
        *,
        employee_code: str,
        full_name: str,
        email: str,
        institution_code: str,
        password_hash: str,
        department: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def add_student(
        self,
        *,
        roll_no: str,
        full_name: str,
        institution_code: str,
        password_hash: str,
        email: Optional[str] = None,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> int:
        raise NotImplementedError
