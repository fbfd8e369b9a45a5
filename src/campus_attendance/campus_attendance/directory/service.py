from __future__ import annotations

from typing import Optional

from werkzeug.security import generate_password_hash

from ..common.validators import require_min_length, require_non_empty
from ..core.exceptions import DuplicateRecordError, NotFoundError, ValidationError
from .model import Institution, Student, Teacher
from .repository import DirectoryRepository


class DirectoryService:
    """Use case: identity lookups for redemption, plus enrollment.

    Lookups are always scoped by institution code: a teacher or student from
    another tenant is reported as not found.
    """

    def __init__(self, directory: DirectoryRepository):
        self._directory = directory

    def require_active_institution(self, institution_code: str) -> Institution:
        institution = self._directory.get_institution(institution_code)
        if not institution or not institution.is_active:
            raise NotFoundError("Institution not found")
        return institution

    def require_active_teacher(self, teacher_id: int, institution_code: Optional[str] = None) -> Teacher:
        teacher = self._directory.get_teacher(teacher_id)
        if not teacher or not teacher.is_active:
            raise NotFoundError("Teacher not found")
        if institution_code is not None and teacher.institution_code != institution_code:
            raise NotFoundError("Teacher not found")
        return teacher

    def require_active_student(self, student_id: int, institution_code: Optional[str] = None) -> Student:
        student = self._directory.get_student(student_id)
        if not student or not student.is_active:
            raise NotFoundError("Student not found")
        if institution_code is not None and student.institution_code != institution_code:
            raise NotFoundError("Student not found")
        return student

    def register_institution(
        self,
        *,
        institution_code: str,
        name: str,
        email: str,
        password: str,
        institution_type: str = "college",
    ) -> str:
        code = require_non_empty(institution_code, "Institution code").upper()
        require_min_length(password, "Password", 6)
        institution = Institution(
            institution_code=code,
            name=require_non_empty(name, "Institution name"),
            email=require_non_empty(email, "Email"),
            password_hash=generate_password_hash(password),
            institution_type=institution_type,
        )
        try:
            return self._directory.add_institution(institution)
        except DuplicateRecordError:
            raise ValidationError("Institution already registered") from None

    def enroll_teacher(
        self,
        *,
        institution_code: str,
        employee_code: str,
        full_name: str,
        email: str,
        password: str,
        department: Optional[str] = None,
    ) -> int:
        self.require_active_institution(institution_code)
        require_min_length(password, "Password", 6)
        try:
            return self._directory.add_teacher(
                employee_code=require_non_empty(employee_code, "Teacher ID"),
                full_name=require_non_empty(full_name, "Name"),
                email=require_non_empty(email, "Email"),
                institution_code=institution_code,
                password_hash=generate_password_hash(password),
                department=department,
            )
        except DuplicateRecordError:
            raise ValidationError("Teacher with this email or ID already exists") from None

    def enroll_student(
        self,
        *,
        institution_code: str,
        roll_no: str,
        full_name: str,
        password: str,
        email: Optional[str] = None,
        class_name: Optional[str] = None,
        section: Optional[str] = None,
    ) -> int:
        self.require_active_institution(institution_code)
        require_min_length(password, "Password", 6)
        try:
            return self._directory.add_student(
                roll_no=require_non_empty(roll_no, "Roll number"),
                full_name=require_non_empty(full_name, "Student name"),
                institution_code=institution_code,
                password_hash=generate_password_hash(password),
                email=email,
                class_name=class_name,
                section=section,
            )
        except DuplicateRecordError:
            raise ValidationError("Student with this roll number already exists") from None
