"""Pytest configuration and shared fixtures."""

import pytest
import os
import jwt
from datetime import datetime, timedelta, timezone
from sqlalchemy.orm import sessionmaker

# Set test environment variables before importing app
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "hr-admin-jwt-signing-key-32-bytes-long-for-pytest"

from config.settings import settings
from src.models import Department, Holiday, HolidayType, User, UserRole
from src.services.access_control import Actor
from src.services.team_roster import TeamRosterService
from src.models.validators import TeamCreateRequest
from src.utils.database import get_engine, init_database, reset_engine
from src.web_interface import create_app


@pytest.fixture
def database(tmp_path):
    """Point the app at a fresh SQLite file for each test."""
    original_url = settings.database.url
    settings.database.url = f"sqlite:///{tmp_path / 'hr_admin.db'}"
    reset_engine()
    init_database()
    yield get_engine()
    reset_engine()
    settings.database.url = original_url


@pytest.fixture
def app(database):
    """Create Flask app for testing."""
    flask_app = create_app(testing=True)
    yield flask_app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db_session(database):
    """Session independent of the one the request handlers use."""
    SessionLocal = sessionmaker(bind=database, expire_on_commit=False)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    """Factory for committed users."""
    counter = {"n": 0}

    def _make_user(role=UserRole.EMPLOYEE, first_name=None, is_active=True, department=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            employee_id=f"EMP{n:04d}",
            first_name=first_name or f"User{n}",
            last_name="Test",
            email=f"user{n}@example.com",
            role=role,
            department_id=department.id if department else None,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user(UserRole.ADMIN, first_name="Admin")


@pytest.fixture
def hr_user(make_user):
    return make_user(UserRole.HR_MANAGER, first_name="Hannah")


@pytest.fixture
def manager_user(make_user):
    return make_user(UserRole.TEAM_MANAGER, first_name="Manny")


@pytest.fixture
def other_manager_user(make_user):
    return make_user(UserRole.TEAM_MANAGER, first_name="Morgan")


@pytest.fixture
def leader_user(make_user):
    return make_user(UserRole.TEAM_LEADER, first_name="Lee")


@pytest.fixture
def employee_user(make_user):
    return make_user(UserRole.EMPLOYEE, first_name="Emery")


@pytest.fixture
def admin(admin_user):
    return Actor.from_user(admin_user)


@pytest.fixture
def department(db_session):
    dept = Department(name="Engineering", code="ENG", description="Builds things", is_active=True)
    db_session.add(dept)
    db_session.commit()
    return dept


@pytest.fixture
def other_department(db_session):
    dept = Department(name="Operations", code="OPS", is_active=True)
    db_session.add(dept)
    db_session.commit()
    return dept


@pytest.fixture
def roster(db_session):
    return TeamRosterService(db_session)


@pytest.fixture
def make_team(roster, admin, db_session, department):
    """Factory for committed teams created through the roster service."""

    def _make_team(name="Alpha", code="A1", max_size=None, manager=None, leader=None, dept=None):
        request = TeamCreateRequest(
            name=name,
            code=code,
            department=(dept or department).id,
            teamManager=manager.id if manager else None,
            teamLeader=leader.id if leader else None,
            maxSize=max_size,
        )
        team = roster.create_team(admin, request)
        db_session.commit()
        return team

    return _make_team


@pytest.fixture
def make_holiday(db_session, admin_user):
    def _make_holiday(name, on, holiday_type=HolidayType.NATIONAL, is_active=True):
        holiday = Holiday(
            holiday_name=name,
            holiday_type=holiday_type,
            is_active=is_active,
            created_by=admin_user.id,
        )
        holiday.set_date(on)
        db_session.add(holiday)
        db_session.commit()
        return holiday

    return _make_holiday


def make_token(user, expires_in=timedelta(hours=1)):
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user.id,
        "email": user.email,
        "role": user.role.value,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, os.environ["JWT_SECRET_KEY"], algorithm="HS256")


@pytest.fixture
def auth_token():
    """Mint a bearer token for a user."""
    return make_token


@pytest.fixture
def auth_headers():
    """Build Authorization headers for a user."""

    def _auth_headers(user):
        return {"Authorization": f"Bearer {make_token(user)}"}

    return _auth_headers
