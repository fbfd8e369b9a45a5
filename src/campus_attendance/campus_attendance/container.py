from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.ledger import AttendanceLedger
from .attendance.memory_attendance_repository import InMemoryAttendanceRepository
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .auth.guard import make_role_required
from .auth.service import AuthService
from .core.constants import (
    CLASS_SESSION_TTL_SECONDS,
    DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    LATE_THRESHOLD_SECONDS,
    TEACHER_SELF_TTL_SECONDS,
)
from .database.connection import DBConfig, DatabaseConnection
from .directory.memory_directory_repository import InMemoryDirectoryRepository
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .directory.repository import DirectoryRepository
from .directory.service import DirectoryService
from .redemption.service import RedemptionService
from .reports.service import AttendanceReportService
from .sessions.codec import TokenCodec
from .sessions.policy import SessionPolicy

BACKEND_MYSQL = "mysql"
BACKEND_MEMORY = "memory"


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    directory_repo: DirectoryRepository
    attendance_repo: AttendanceRepository

    policy: SessionPolicy
    codec: TokenCodec
    ledger: AttendanceLedger

    directory_service: DirectoryService
    auth_service: AuthService
    redemption_service: RedemptionService
    report_service: AttendanceReportService

    role_required: Callable


def build_container(
    *,
    db_config: Optional[dict] = None,
    backend: str = BACKEND_MYSQL,
    signing_key: str,
    access_secret_key: Optional[str] = None,
    access_token_ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    class_ttl_seconds: int = CLASS_SESSION_TTL_SECONDS,
    teacher_self_ttl_seconds: int = TEACHER_SELF_TTL_SECONDS,
    late_threshold_seconds: int = LATE_THRESHOLD_SECONDS,
) -> Container:
    if not signing_key:
        raise ValueError("A signing key is required to issue session tokens")

    backend = (backend or BACKEND_MYSQL).lower()
    if backend == BACKEND_MEMORY:
        conn = None
        directory_repo = InMemoryDirectoryRepository()
        attendance_repo = InMemoryAttendanceRepository()
    elif backend == BACKEND_MYSQL:
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql backend")
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        directory_repo = MySQLDirectoryRepository(conn)
        attendance_repo = MySQLAttendanceRepository(conn)
    else:
        raise ValueError(f"Unknown DB_BACKEND {backend!r}")

    policy = SessionPolicy(
        class_ttl_seconds=class_ttl_seconds,
        teacher_self_ttl_seconds=teacher_self_ttl_seconds,
        late_threshold_seconds=late_threshold_seconds,
        strategy_factory=AttendanceStrategyFactory(),
    )
    codec = TokenCodec(signing_key, policy)
    ledger = AttendanceLedger(attendance_repo, policy)

    directory_service = DirectoryService(directory_repo)
    auth_service = AuthService(directory_repo, access_secret_key or signing_key, ttl_seconds=access_token_ttl_seconds)
    redemption_service = RedemptionService(codec, ledger, directory_service)
    report_service = AttendanceReportService(ledger)

    return Container(
        conn=conn,
        directory_repo=directory_repo,
        attendance_repo=attendance_repo,
        policy=policy,
        codec=codec,
        ledger=ledger,
        directory_service=directory_service,
        auth_service=auth_service,
        redemption_service=redemption_service,
        report_service=report_service,
        role_required=make_role_required(auth_service),
    )
