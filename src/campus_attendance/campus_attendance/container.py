from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .checkins.factory import GeofenceStrategyFactory
from .checkins.mysql_checkin_repository import MySQLCheckInRepository
from .checkins.repository import CheckInRepository
from .checkins.service import CheckInService
from .core.constants import (
    DEFAULT_BACKUP_CODE_TTL_MINUTES,
    DEFAULT_GEOFENCE_RADIUS_M,
    DEFAULT_SESSION_GRACE_MINUTES,
)
from .database.connection import DBConfig, DatabaseConnection
from .excuses.mysql_excuse_repository import MySQLExcuseRepository
from .excuses.repository import ExcuseRepository
from .excuses.service import ExcuseService
from .reports.aggregator import AttendanceAggregator
from .reports.exporter import ReportExporter
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.policy import SessionPolicy
from .sessions.repository import SessionRepository
from .sessions.service import SessionService
from .users.mysql_directory_repository import MySQLDirectoryRepository
from .users.repository import DirectoryRepository


@dataclass(frozen=True)
class EngineSettings:
    """Tunable attendance rules, read from the active settings module."""

    grace_minutes: int = DEFAULT_SESSION_GRACE_MINUTES
    backup_code_ttl_minutes: int = DEFAULT_BACKUP_CODE_TTL_MINUTES
    default_radius_m: float = DEFAULT_GEOFENCE_RADIUS_M
    geofence_policy: str = "strict"

    @classmethod
    def from_settings(cls, settings) -> "EngineSettings":
        return cls(
            grace_minutes=int(getattr(settings, "SESSION_GRACE_MINUTES", DEFAULT_SESSION_GRACE_MINUTES)),
            backup_code_ttl_minutes=int(getattr(settings, "BACKUP_CODE_TTL_MINUTES", DEFAULT_BACKUP_CODE_TTL_MINUTES)),
            default_radius_m=float(getattr(settings, "DEFAULT_GEOFENCE_RADIUS_M", DEFAULT_GEOFENCE_RADIUS_M)),
            geofence_policy=str(getattr(settings, "GEOFENCE_POLICY", "strict")),
        )


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    directory_repo: DirectoryRepository
    sessions_repo: SessionRepository
    checkins_repo: CheckInRepository
    excuses_repo: ExcuseRepository

    session_service: SessionService
    checkin_service: CheckInService
    excuse_service: ExcuseService
    aggregator: AttendanceAggregator
    exporter: ReportExporter


def assemble(
    *,
    directory_repo: DirectoryRepository,
    sessions_repo: SessionRepository,
    checkins_repo: CheckInRepository,
    excuses_repo: ExcuseRepository,
    settings: EngineSettings | None = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    settings = settings or EngineSettings()
    policy = SessionPolicy(
        grace_minutes=settings.grace_minutes,
        backup_code_ttl_minutes=settings.backup_code_ttl_minutes,
    )

    session_service = SessionService(
        sessions_repo,
        directory_repo,
        policy=policy,
        default_radius_m=settings.default_radius_m,
    )
    checkin_service = CheckInService(
        checkins_repo,
        session_service,
        directory_repo,
        strategy_factory=GeofenceStrategyFactory(policy=settings.geofence_policy),
    )
    excuse_service = ExcuseService(excuses_repo, checkins_repo, session_service, directory_repo)
    aggregator = AttendanceAggregator(
        sessions_repo,
        checkins_repo,
        excuses_repo,
        directory_repo,
        policy=policy,
    )

    return Container(
        conn=conn,
        directory_repo=directory_repo,
        sessions_repo=sessions_repo,
        checkins_repo=checkins_repo,
        excuses_repo=excuses_repo,
        session_service=session_service,
        checkin_service=checkin_service,
        excuse_service=excuse_service,
        aggregator=aggregator,
        exporter=ReportExporter(),
    )


def build_container(*, db_config: dict, settings: EngineSettings | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return assemble(
        directory_repo=MySQLDirectoryRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        checkins_repo=MySQLCheckInRepository(conn),
        excuses_repo=MySQLExcuseRepository(conn),
        settings=settings,
        conn=conn,
    )
