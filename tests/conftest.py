"""Shared test fixtures.

Points the app at an in-memory SQLite database before anything under
chorecycle is imported, then builds a fresh schema per test with a small
family already seeded.
"""

import os

# Patch env vars BEFORE any chorecycle imports
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("TIMEZONE", "UTC")

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from chorecycle.core.clock import FixedClock, get_clock
from chorecycle.core.config import Base, get_db
from chorecycle.core.security import create_access_token
from chorecycle.models import Activity, Family, FamilyMember, ScheduleEntry, User

CYCLE_START = date(2025, 1, 6)  # a Monday


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------


def make_user(db, email, display_name, **kwargs):
    kwargs.setdefault("cycle_weeks", 4)
    kwargs.setdefault("cycle_start_date", CYCLE_START)
    user = User(email=email, display_name=display_name, **kwargs)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_activity(db, name, category="Home", **kwargs):
    activity = Activity(name=name, category=category, **kwargs)
    db.add(activity)
    db.commit()
    db.refresh(activity)
    return activity


def schedule(db, activity, week_of_cycle, day_of_week, user=None):
    entry = ScheduleEntry(
        activity_id=activity.id,
        user_id=user.id if user is not None else None,
        week_of_cycle=week_of_cycle,
        day_of_week=day_of_week,
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@pytest.fixture
def alice(db):
    return make_user(db, "alice@example.com", "Alice")


@pytest.fixture
def bob(db):
    return make_user(db, "bob@example.com", "Bob")


@pytest.fixture
def carol(db):
    """Belongs to no family."""
    return make_user(db, "carol@example.com", "Carol")


@pytest.fixture
def family(db, alice, bob):
    family = Family(name="Smiths", rota_cycle_weeks=4, rota_start_date=CYCLE_START)
    db.add(family)
    db.commit()
    db.add_all(
        [
            FamilyMember(
                family_id=family.id,
                user_id=alice.id,
                joined_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            ),
            FamilyMember(
                family_id=family.id,
                user_id=bob.id,
                joined_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
            ),
        ]
    )
    db.commit()
    db.refresh(family)
    return family


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


@pytest.fixture
def clock():
    return FixedClock(datetime(2025, 1, 20, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def client(db, clock):
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}
