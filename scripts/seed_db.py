"""Seed a demo institution with one teacher and a few students.

Passwords come from SEED_PASSWORD (default ``changeme123``). Re-running is
safe: existing accounts are reported and skipped.
"""

from __future__ import annotations

import importlib
import os

from dotenv import load_dotenv

from campus_attendance.config import get_settings_module
from campus_attendance.container import build_container
from campus_attendance.core.app_logger import get_logger, setup_logging
from campus_attendance.core.exceptions import ValidationError

logger = get_logger("scripts.seed_db")

DEMO_CODE = "DEMO"
DEMO_STUDENTS = [("DEMO-001", "Aarav Shah"), ("DEMO-002", "Diya Nair"), ("DEMO-003", "Kabir Rao")]


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    password = os.getenv("SEED_PASSWORD", "changeme123")

    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        backend=getattr(settings, "DB_BACKEND", "mysql"),
        signing_key=getattr(settings, "QR_SIGNING_KEY", settings.SECRET_KEY),
    )
    directory = container.directory_service

    steps = [
        lambda: directory.register_institution(
            institution_code=DEMO_CODE, name="Demo School", email="admin@demo.school", password=password
        ),
        lambda: directory.enroll_teacher(
            institution_code=DEMO_CODE,
            employee_code="DEMO-T1",
            full_name="Demo Teacher",
            email="teacher@demo.school",
            password=password,
        ),
    ]
    steps += [
        (lambda roll=roll, name=name: directory.enroll_student(
            institution_code=DEMO_CODE, roll_no=roll, full_name=name, password=password, class_name="10", section="A"
        ))
        for roll, name in DEMO_STUDENTS
    ]

    for step in steps:
        try:
            logger.info("created %s", step())
        except ValidationError as e:
            logger.info("skipped: %s", e)


if __name__ == "__main__":
    main()
