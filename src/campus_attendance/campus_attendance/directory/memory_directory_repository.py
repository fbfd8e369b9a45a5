from __future__ import annotations

import threading
from dataclasses import replace
from typing import Optional

from ..core.exceptions import DuplicateRecordError
from .model import Institution, Student, Teacher
from .repository import DirectoryRepository


class InMemoryDirectoryRepository(DirectoryRepository):
    """Process-local directory used by the testing settings and demos."""

    def __init__(self):
        self._lock = threading.Lock()
        self._institutions: dict[str, Institution] = {}
        self._teachers: dict[int, Teacher] = {}
        self._students: dict[int, Student] = {}
        self._teacher_seq = 0
        self._student_seq = 0

    def get_institution(self, institution_code: str) -> Optional[Institution]:
        return self._institutions.get(institution_code)

    def get_institution_by_email(self, email: str) -> Optional[Institution]:
        email = email.lower()
        return next((i for i in self._institutions.values() if i.email == email), None)

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        return self._teachers.get(int(teacher_id))

    def get_teacher_by_email(self, email: str) -> Optional[Teacher]:
        email = email.lower()
        return next((t for t in self._teachers.values() if t.email == email), None)

    def get_student(self, student_id: int) -> Optional[Student]:
        return self._students.get(int(student_id))

    def get_student_by_login(self, login: str, institution_code: Optional[str] = None) -> Optional[Student]:
        for s in sorted(self._students.values(), key=lambda s: s.student_id):
            if institution_code is not None and s.institution_code != institution_code:
                continue
            if (s.email and s.email == login.lower()) or s.roll_no == login.upper():
                return s
        return None

    def add_institution(self, institution: Institution) -> str:
        with self._lock:
            if institution.institution_code in self._institutions or self.get_institution_by_email(institution.email):
                raise DuplicateRecordError(f"institution {institution.institution_code} already exists")
            self._institutions[institution.institution_code] = replace(institution, email=institution.email.lower())
        return institution.institution_code

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
        with self._lock:
            email = email.lower()
            if any(t.email == email or t.employee_code == employee_code for t in self._teachers.values()):
                raise DuplicateRecordError(f"teacher {employee_code} already exists")
            self._teacher_seq += 1
            self._teachers[self._teacher_seq] = Teacher(
                teacher_id=self._teacher_seq,
                employee_code=employee_code,
                full_name=full_name,
                email=email,
                department=department,
                institution_code=institution_code,
                password_hash=password_hash,
            )
            return self._teacher_seq

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
        with self._lock:
            roll_no = roll_no.upper()
            if any(s.roll_no == roll_no and s.institution_code == institution_code for s in self._students.values()):
                raise DuplicateRecordError(f"student {roll_no} already exists")
            self._student_seq += 1
            self._students[self._student_seq] = Student(
                student_id=self._student_seq,
                roll_no=roll_no,
                full_name=full_name,
                email=email.lower() if email else None,
                class_name=class_name,
                section=section,
                institution_code=institution_code,
                password_hash=password_hash,
            )
            return self._student_seq

    def set_active(self, *, teacher_id: Optional[int] = None, student_id: Optional[int] = None, is_active: bool) -> bool:
        with self._lock:
            if teacher_id is not None and int(teacher_id) in self._teachers:
                self._teachers[int(teacher_id)] = replace(self._teachers[int(teacher_id)], is_active=is_active)
                return True
            if student_id is not None and int(student_id) in self._students:
                self._students[int(student_id)] = replace(self._students[int(student_id)], is_active=is_active)
                return True
            return False
