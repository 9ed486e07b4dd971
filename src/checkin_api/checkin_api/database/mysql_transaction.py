from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import mysql.connector

from ..attendance.mysql_attendance_repository import MySQLAttendanceRepository
from ..core.exceptions import StoreError
from ..organizations.mysql_organization_repository import MySQLOrganizationRepository
from ..reports.mysql_report_repository import MySQLReportRepository
from ..users.mysql_user_repository import MySQLUserRepository
from .connection import BoundConnection, DatabaseConnection
from .unit_of_work import TransactionManager, UnitOfWork


class MySQLTransactionManager(TransactionManager):
    """Runs a unit of work on one connection: all statements commit or none do."""

    def __init__(self, conn_factory: DatabaseConnection, *, isolation_level: str = "READ COMMITTED"):
        self._conn_factory = conn_factory
        self._isolation_level = isolation_level

    @contextmanager
    def transaction(self) -> Iterator[UnitOfWork]:
        try:
            conn = self._conn_factory.connect()
        except mysql.connector.Error as exc:
            raise StoreError(str(exc)) from exc
        try:
            conn.start_transaction(isolation_level=self._isolation_level)
        except mysql.connector.Error as exc:
            conn.close()
            raise StoreError(str(exc)) from exc

        bound = BoundConnection(conn)
        uow = UnitOfWork(
            users=MySQLUserRepository(bound),
            organizations=MySQLOrganizationRepository(bound),
            attendance=MySQLAttendanceRepository(bound),
            reports=MySQLReportRepository(bound),
        )
        try:
            yield uow
            conn.commit()
        except mysql.connector.Error as exc:
            conn.rollback()
            raise StoreError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()
