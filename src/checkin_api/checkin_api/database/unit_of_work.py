from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, ContextManager, Protocol, TypeVar

from ..attendance.repository import AttendanceRepository
from ..organizations.repository import OrganizationRepository
from ..reports.repository import ReportRepository
from ..users.repository import UserRepository

T = TypeVar("T")


@dataclass(frozen=True)
class UnitOfWork:
    """Repositories sharing one transactional connection."""

    users: UserRepository
    organizations: OrganizationRepository
    attendance: AttendanceRepository
    reports: ReportRepository


class TransactionManager(Protocol):
    def transaction(self) -> ContextManager[UnitOfWork]:
        """Open a transaction.

        Commits when the block exits normally; on any exception rolls back and
        re-raises.
        """

        raise NotImplementedError

    def run_in_transaction(self, fn: Callable[[UnitOfWork], T]) -> T:
        with self.transaction() as uow:
            return fn(uow)
