# tests/conftest.py

import itertools
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.database import Database
from app.dependencies.permissions import get_current_user
from app.main import create_app
from app.models.user import User
from app.models.enums import UserRole
from app.schemas.user import CurrentUser
from app.services.event_service import EventService
from app.utils.date_helpers import DateHelpers

_user_ids = itertools.count(1)


# --- Store Setup ---
@pytest.fixture(scope="function")
def database():
    """Fresh in-memory store for each test"""
    db = Database(url="sqlite://")
    db.init_db()
    yield db
    db.dispose()


@pytest.fixture(scope="function")
def db_session(database):
    session = database.session()
    yield session
    session.close()


def add_user(session, role=UserRole.STUDENT.value, name=None) -> CurrentUser:
    """Persist a user and return the identity the access gate would attach"""
    n = next(_user_ids)
    user = User(
        name=name or f"{role.title()} {n}",
        email=f"{role}{n}@campus.edu",
        role=role,
        supabase_id=f"sb-{n}",
    )
    session.add(user)
    session.commit()
    return CurrentUser.from_model(user)


@pytest.fixture
def make_user(db_session):
    def factory(role=UserRole.STUDENT.value, name=None):
        return add_user(db_session, role=role, name=name)

    return factory


@pytest.fixture
def organizer(make_user):
    return make_user(UserRole.ORGANIZER.value, name="Olivia Organizer")


@pytest.fixture
def admin(make_user):
    return make_user(UserRole.ADMIN.value, name="Ada Admin")


@pytest.fixture
def student(make_user):
    return make_user(UserRole.STUDENT.value, name="Sam Student")


def in_days(days=7):
    return DateHelpers.utcnow().replace(microsecond=0) + timedelta(days=days)


@pytest.fixture
def future():
    """Factory for naive UTC datetimes some days from now"""
    return in_days


@pytest.fixture
def make_event(db_session, organizer):
    """Create an event through the lifecycle service; returns its id"""

    def factory(
        owner=None,
        event_name="Hack Night",
        max_students=10,
        total_budget=100.0,
        date_time=None,
        **extra,
    ):
        owner = owner or organizer
        return EventService(db_session).create_event(
            organizer_id=owner.id,
            event_name=event_name,
            date_time=date_time or in_days(),
            venue=extra.get("venue", "Main Hall"),
            description=extra.get("description", "Pizza and code"),
            max_students=max_students,
            total_budget=total_budget,
        )

    return factory


# --- Test Client Fixtures ---
class AuthState:
    """Mutable stand-in for the access gate; tests switch ``current`` per request"""

    def __init__(self):
        self.current = None

    def __call__(self):
        if self.current is None:
            raise AssertionError("No authenticated user configured for this test")
        return self.current


@pytest.fixture
def auth():
    return AuthState()


@pytest.fixture(scope="function")
def client(database, auth):
    """TestClient on the real in-memory store with the access gate stubbed out"""
    app = create_app(database=database, supabase_client=MagicMock())
    app.dependency_overrides[get_current_user] = auth

    yield TestClient(app)

    app.dependency_overrides.clear()
