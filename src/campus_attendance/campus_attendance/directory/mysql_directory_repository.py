from __future__ import annotations

from typing import Any, Dict, Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, unique_insert
from .model import Institution, Student, Teacher
from .repository import DirectoryRepository

_TEACHER_COLUMNS = (
    "teacher_id, employee_code, full_name, email, department, institution_code, password_hash, is_active"
)
_STUDENT_COLUMNS = (
    "student_id, roll_no, full_name, email, class_name, section, institution_code, password_hash, is_active"
)
_INSTITUTION_COLUMNS = "institution_code, name, email, password_hash, institution_type, is_active"


def _to_institution(row: Dict[str, Any]) -> Institution:
    return Institution(
        institution_code=row["institution_code"],
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        institution_type=row.get("institution_type") or "college",
        is_active=bool(row.get("is_active", True)),
    )


def _to_teacher(row: Dict[str, Any]) -> Teacher:
    return Teacher(
        teacher_id=int(row["teacher_id"]),
        employee_code=row["employee_code"],
        full_name=row["full_name"],
        email=row["email"],
        department=row.get("department"),
        institution_code=row["institution_code"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
    )


def _to_student(row: Dict[str, Any]) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        roll_no=row["roll_no"],
        full_name=row["full_name"],
        email=row.get("email"),
        class_name=row.get("class_name"),
        section=row.get("section"),
        institution_code=row["institution_code"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
    )


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_institution(self, institution_code: str) -> Optional[Institution]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_INSTITUTION_COLUMNS} FROM institutions WHERE institution_code=%s",
                (institution_code,),
            )
            row = fetchone(cur)
            return _to_institution(row) if row else None

    def get_institution_by_email(self, email: str) -> Optional[Institution]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_INSTITUTION_COLUMNS} FROM institutions WHERE email=%s",
                (email.lower(),),
            )
            row = fetchone(cur)
            return _to_institution(row) if row else None

    def get_teacher(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE teacher_id=%s", (int(teacher_id),))
            row = fetchone(cur)
            return _to_teacher(row) if row else None

    def get_teacher_by_email(self, email: str) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_TEACHER_COLUMNS} FROM teachers WHERE email=%s", (email.lower(),))
            row = fetchone(cur)
            return _to_teacher(row) if row else None

    def get_student(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_STUDENT_COLUMNS} FROM students WHERE student_id=%s", (int(student_id),))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_student_by_login(self, login: str, institution_code: Optional[str] = None) -> Optional[Student]:
        where = "(email=%s OR roll_no=%s)"
        params: list = [login.lower(), login.upper()]
        if institution_code is not None:
            where += " AND institution_code=%s"
            params.append(institution_code)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_STUDENT_COLUMNS}
                FROM students
                WHERE {where}
                ORDER BY student_id ASC
                LIMIT 1
                """,
                tuple(params),
            )
            row = fetchone(cur)
            return _to_student(row) if row else None

    def add_institution(self, institution: Institution) -> str:
        with unique_insert(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO institutions(institution_code, name, email, password_hash, institution_type, is_active)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    institution.institution_code,
                    institution.name,
                    institution.email.lower(),
                    institution.password_hash,
                    institution.institution_type,
                    int(institution.is_active),
                ),
            )
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
        with unique_insert(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(employee_code, full_name, email, department, institution_code, password_hash, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                """,
                (employee_code, full_name, email.lower(), department, institution_code, password_hash),
            )
            return int(cur.lastrowid)

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
        with unique_insert(), db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(roll_no, full_name, email, class_name, section, institution_code, password_hash, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,%s,1)
                """,
                (
                    roll_no.upper(),
                    full_name,
                    email.lower() if email else None,
                    class_name,
                    section,
                    institution_code,
                    password_hash,
                ),
            )
            return int(cur.lastrowid)
