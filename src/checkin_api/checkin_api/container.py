from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_ACCESS_TOKEN_TTL_SECONDS, DEFAULT_REFRESH_TOKEN_TTL_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_transaction import MySQLTransactionManager
from .database.unit_of_work import TransactionManager
from .organizations.mysql_organization_repository import MySQLOrganizationRepository
from .organizations.service import OrganizationService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    transactions: TransactionManager

    auth_service: AuthService
    user_service: UserService
    organization_service: OrganizationService
    attendance_service: AttendanceService
    report_service: ReportService


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    access_ttl_seconds: int = DEFAULT_ACCESS_TOKEN_TTL_SECONDS,
    refresh_ttl_seconds: int = DEFAULT_REFRESH_TOKEN_TTL_SECONDS,
    logger=None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    conn = conn or DatabaseConnection(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    orgs_repo = MySQLOrganizationRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    reports_repo = MySQLReportRepository(conn)
    transactions = MySQLTransactionManager(conn)

    tokens = TokenService(
        jwt_secret,
        access_ttl_seconds=access_ttl_seconds,
        refresh_ttl_seconds=refresh_ttl_seconds,
    )

    return Container(
        transactions=transactions,
        auth_service=AuthService(users_repo, tokens, logger=logger),
        user_service=UserService(users_repo, logger=logger),
        organization_service=OrganizationService(orgs_repo, users_repo, transactions, logger=logger),
        attendance_service=AttendanceService(
            attendance_repo,
            transactions,
            orgs_repo,
            strategy_factory=AttendanceStrategyFactory(),
            logger=logger,
        ),
        report_service=ReportService(reports_repo, orgs_repo, logger=logger),
    )
