from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Institution:
    """Tenant: every teacher, student and record is scoped by ``institution_code``."""

    institution_code: str
    name: str
    email: str
    password_hash: str
    institution_type: str = "college"
    is_active: bool = True


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    employee_code: str
    full_name: str
    email: str
    institution_code: str
    password_hash: str
    department: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class Student:
    student_id: int
    roll_no: str
    full_name: str
    institution_code: str
    password_hash: str
    email: Optional[str] = None
    class_name: Optional[str] = None
    section: Optional[str] = None
    is_active: bool = True
