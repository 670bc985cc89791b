"""
Shared fixtures: a fresh in-memory database per test, a frozen clock and
a seeded child with one activity per category.
"""
import pytest
from datetime import date, datetime, time, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ganbari_quest.constants import CATEGORIES
from ganbari_quest.database import Base
from ganbari_quest.models import (
    Activity, ActivityLog, Child, LoginBonus, MarketBenchmark, Status
)
from ganbari_quest.services.date_service import FixedClock

# Wednesday
NOW = datetime(2026, 1, 21, 9, 0, 0)

BENCHMARKS = {
    "physical": (30.0, 10.0),
    "learning": (20.0, 8.0),
    "daily_life": (35.0, 8.0),
    "social": (25.0, 10.0),
    "creative": (25.0, 9.0),
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def today(clock):
    return clock().date()


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)


@pytest.fixture
def child(db_session):
    child = Child(nickname="テストちゃん", age=4, theme="pink")
    db_session.add(child)
    db_session.commit()
    return child


@pytest.fixture
def activities(db_session):
    """One 5-point activity per category, keyed by category"""
    result = {}
    for i, category in enumerate(CATEGORIES, 1):
        activity = Activity(
            name=f"{category}-activity",
            category=category,
            icon="⭐",
            base_points=5,
            sort_order=i
        )
        db_session.add(activity)
        result[category] = activity
    db_session.commit()
    return result


@pytest.fixture
def benchmarks(db_session):
    for category, (mean, std_dev) in BENCHMARKS.items():
        db_session.add(MarketBenchmark(age=4, category=category, mean=mean, std_dev=std_dev))
    db_session.commit()


def add_activity_log(db, child_id, activity_id, recorded_date, points=5,
                     streak_days=1, streak_bonus=0, cancelled=False):
    """Insert a past activity log directly"""
    log = ActivityLog(
        child_id=child_id,
        activity_id=activity_id,
        points=points,
        streak_days=streak_days,
        streak_bonus=streak_bonus,
        recorded_date=recorded_date,
        recorded_at=datetime.combine(recorded_date, time(9, 0)),
        cancelled=cancelled
    )
    db.add(log)
    db.commit()
    return log


def add_login_bonus(db, child_id, login_date, consecutive_days=1):
    """Insert a past login bonus claim directly"""
    bonus = LoginBonus(
        child_id=child_id,
        login_date=login_date,
        rank="吉",
        base_points=3,
        multiplier=1.0,
        total_points=3,
        consecutive_days=consecutive_days,
        created_at=datetime.combine(login_date, time(8, 0))
    )
    db.add(bonus)
    db.commit()
    return bonus


def set_status(db, child_id, category, value):
    status = Status(child_id=child_id, category=category, value=value)
    db.add(status)
    db.commit()
    return status
