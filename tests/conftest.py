"""Shared fixtures: in-memory SQLite, wired services, principals and an API client."""

from __future__ import annotations

import os

# Settings are read at import time, so the environment must be in place first.
os.environ.update(
    {
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": "test-secret",
        "RATE_LIMIT_ENABLED": "false",
        "ALLOW_ANONYMOUS_REPORTING": "false",
        "LOG_LEVEL": "WARNING",
    }
)
for _name in ("OPENAI_API_KEY", "SUPABASE_URL", "SUPABASE_SERVICE_ROLE"):
    os.environ.pop(_name, None)

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from civicvoice.core.security import make_token
from civicvoice.db.base import Base
from civicvoice.models import alert, department, department_update, issue, issue_activity  # noqa: F401
from civicvoice.schemas.issue import IssueIn
from civicvoice.services.authz import AuthorizationGuard, Principal, Role
from civicvoice.services.departments import DepartmentDirectory
from civicvoice.services.issues import IssueService
from civicvoice.services.repository import IssueRepository


class StepClock:
    """Deterministic clock: every call moves one minute forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        self.now = self.now + timedelta(minutes=1)
        return self.now


def valid_issue(**overrides) -> IssueIn:
    data = {
        "issueType": "Pothole",
        "location": "5th Ave",
        "severity": "HIGH",
        "description": "Large pothole",
    }
    data.update(overrides)
    return IssueIn.model_validate(data)


def auth(principal: Principal) -> dict:
    token = make_token(principal.id, principal.role.value, principal.department)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def engine():
    eng = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def clock():
    return StepClock(datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def guard():
    return AuthorizationGuard()


@pytest.fixture
def directory(db):
    return DepartmentDirectory(db)


@pytest.fixture
def roads(directory):
    return directory.create("Roads & Transport", "Potholes, signals, congestion")


@pytest.fixture
def water(directory):
    return directory.create("Water & Sewage", "Leaks, contamination, flooding")


@pytest.fixture
def service(db, directory, guard, clock):
    return IssueService(IssueRepository(db), directory, guard, clock=clock)


@pytest.fixture
def admin():
    return Principal(id="admin-1", role=Role.admin)


@pytest.fixture
def citizen():
    return Principal(id="citizen-1", role=Role.citizen)


@pytest.fixture
def other_citizen():
    return Principal(id="citizen-2", role=Role.citizen)


@pytest.fixture
def roads_officer(roads):
    return Principal(id="officer-roads", role=Role.department, department=roads.id)


@pytest.fixture
def water_officer(water):
    return Principal(id="officer-water", role=Role.department, department=water.id)


@pytest.fixture
def filed(service, citizen):
    """A pending issue filed by ``citizen``."""
    return service.create(valid_issue(), citizen)


@pytest.fixture
def forwarded(service, filed, admin, roads):
    """``filed`` forwarded to Roads by an admin."""
    return service.update_status(filed.id, None, roads.id, admin)


@pytest.fixture
def completed(service, forwarded, roads_officer):
    """``forwarded`` marked completed by the Roads officer."""
    return service.department_update(forwarded.id, "completed", "Patched", None, roads_officer)


@pytest.fixture
def app(session_factory):
    from civicvoice.db.session import get_db
    from civicvoice.main import app as fastapi_app

    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    fastapi_app.dependency_overrides[get_db] = _get_db
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
