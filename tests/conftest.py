from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
import structlog

from src.checkin_api.checkin_api.attendance.service import AttendanceService
from src.checkin_api.checkin_api.core.enums import Role
from src.checkin_api.checkin_api.organizations.service import OrganizationService
from src.checkin_api.checkin_api.reports.service import ReportService
from src.checkin_api.checkin_api.users.service import AuthService, UserService
from src.checkin_api.checkin_api.users.tokens import TokenService
from tests.fakes import (
    InMemoryAttendance,
    InMemoryOrganizations,
    InMemoryReports,
    InMemoryStore,
    InMemoryTransactionManager,
    InMemoryUsers,
)

TEST_JWT_SECRET = "test-jwt-secret-0123456789abcdef0123"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def users_repo(store):
    return InMemoryUsers(store)


@pytest.fixture
def orgs_repo(store):
    return InMemoryOrganizations(store)


@pytest.fixture
def attendance_repo(store):
    return InMemoryAttendance(store)


@pytest.fixture
def reports_repo(store):
    return InMemoryReports(store)


@pytest.fixture
def tx(store):
    return InMemoryTransactionManager(store)


@pytest.fixture
def clock():
    # Wednesday
    return FakeClock(datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def logger():
    return structlog.get_logger("tests")


@pytest.fixture
def tokens():
    return TokenService(TEST_JWT_SECRET, access_ttl_seconds=3600, refresh_ttl_seconds=7200)


@pytest.fixture
def auth_service(users_repo, tokens, logger):
    return AuthService(users_repo, tokens, logger=logger)


@pytest.fixture
def user_service(users_repo, logger):
    return UserService(users_repo, logger=logger)


@pytest.fixture
def org_service(orgs_repo, users_repo, tx, logger):
    return OrganizationService(orgs_repo, users_repo, tx, logger=logger)


@pytest.fixture
def attendance_service(attendance_repo, tx, orgs_repo, clock, logger):
    return AttendanceService(attendance_repo, tx, orgs_repo, clock=clock, logger=logger)


@pytest.fixture
def report_service(reports_repo, orgs_repo, logger):
    return ReportService(reports_repo, orgs_repo, logger=logger)


@pytest.fixture
def make_user(users_repo):
    counter = {"n": 0}

    def _make(full_name: str = "", email: str = ""):
        counter["n"] += 1
        n = counter["n"]
        return users_repo.create_user(
            full_name=full_name or f"User {n}",
            email=email or f"user{n}@example.com",
            password_hash="not-a-real-hash",
            phone_number=f"+1555000{n:04d}",
        )

    return _make


@pytest.fixture
def acme(org_service, orgs_repo, make_user):
    """Organization with an owner, a manager and an employee."""
    owner = make_user("Olivia Owner", "owner@acme.test")
    manager = make_user("Mark Manager", "manager@acme.test")
    employee = make_user("Emma Employee", "employee@acme.test")

    org = org_service.create_organization(
        caller_id=owner.id,
        name="Acme",
        email="hr@acme.test",
        default_location_lat=10.0,
        default_location_long=20.0,
    )
    orgs_repo.add_member(org_id=org.id, user_id=manager.id, role=Role.MANAGER)
    orgs_repo.add_member(org_id=org.id, user_id=employee.id, role=Role.EMPLOYEE)

    return {"org": org, "owner": owner, "manager": manager, "employee": employee}
