from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Date, ForeignKey, UniqueConstraint, Index
)

from ganbari_quest.database import Base
from ganbari_quest.services.date_service import DateService


class Child(Base):
    __tablename__ = "children"

    id = Column(Integer, primary_key=True, index=True)
    nickname = Column(String, nullable=False)
    age = Column(Integer, nullable=False)
    birth_date = Column(Date, nullable=True)
    theme = Column(String, nullable=False, default="pink")
    created_at = Column(DateTime, default=DateService.utc_now)
    updated_at = Column(DateTime, default=DateService.utc_now, onupdate=DateService.utc_now)


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    icon = Column(String, nullable=False)
    base_points = Column(Integer, nullable=False, default=5)
    age_min = Column(Integer, nullable=True)  # None = no lower bound
    age_max = Column(Integer, nullable=True)  # None = no upper bound
    is_visible = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=DateService.utc_now)


class ActivityLog(Base):
    __tablename__ = "activity_logs"
    __table_args__ = (
        # Cancelled rows keep their slot: one row per child/activity/day, ever
        UniqueConstraint("child_id", "activity_id", "recorded_date", name="uq_activity_logs_daily"),
        Index("ix_activity_logs_child_date", "child_id", "recorded_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False)
    activity_id = Column(Integer, ForeignKey("activities.id"), nullable=False)
    points = Column(Integer, nullable=False)  # Base points at record time
    streak_days = Column(Integer, nullable=False, default=1)
    streak_bonus = Column(Integer, nullable=False, default=0)
    recorded_date = Column(Date, nullable=False)
    recorded_at = Column(DateTime, nullable=False, default=DateService.utc_now)
    cancelled = Column(Boolean, nullable=False, default=False)


class PointLedgerEntry(Base):
    __tablename__ = "point_ledger"
    __table_args__ = (
        Index("ix_point_ledger_child_created", "child_id", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False)
    amount = Column(Integer, nullable=False)  # Signed
    type = Column(String, nullable=False)  # activity, cancel, weekly_bonus, login_bonus, convert
    description = Column(String, nullable=True)
    reference_id = Column(Integer, nullable=True)  # Activity log or evaluation id
    created_at = Column(DateTime, nullable=False, default=DateService.utc_now)


class Status(Base):
    __tablename__ = "statuses"
    __table_args__ = (
        UniqueConstraint("child_id", "category", name="uq_statuses_child_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False)
    category = Column(String, nullable=False)
    value = Column(Float, nullable=False, default=0.0)  # Clamped to [0, 100]
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=DateService.utc_now)

    __mapper_args__ = {"version_id_col": version}


class StatusHistory(Base):
    __tablename__ = "status_history"
    __table_args__ = (
        Index("ix_status_history_child_category", "child_id", "category", "recorded_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False)
    category = Column(String, nullable=False)
    value = Column(Float, nullable=False)  # Resulting value
    change_amount = Column(Float, nullable=False)  # Raw (unclamped) delta
    change_type = Column(String, nullable=False)  # weekly_evaluation, daily_decay, manual
    recorded_at = Column(DateTime, nullable=False, default=DateService.utc_now)


class Evaluation(Base):
    __tablename__ = "evaluations"
    __table_args__ = (
        UniqueConstraint("child_id", "week_start", name="uq_evaluations_child_week"),
    )

    id = Column(Integer, primary_key=True, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False)
    week_start = Column(Date, nullable=False)
    week_end = Column(Date, nullable=False)
    scores_json = Column(String, nullable=False)  # JSON per-category snapshot
    bonus_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=DateService.utc_now)


class MarketBenchmark(Base):
    __tablename__ = "market_benchmarks"
    __table_args__ = (
        UniqueConstraint("age", "category", name="uq_benchmarks_age_category"),
    )

    id = Column(Integer, primary_key=True, index=True)
    age = Column(Integer, nullable=False)
    category = Column(String, nullable=False)
    mean = Column(Float, nullable=False)
    std_dev = Column(Float, nullable=False)
    source = Column(String, nullable=True)
    updated_at = Column(DateTime, default=DateService.utc_now, onupdate=DateService.utc_now)


class LoginBonus(Base):
    __tablename__ = "login_bonuses"
    __table_args__ = (
        UniqueConstraint("child_id", "login_date", name="uq_login_bonuses_child_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    child_id = Column(Integer, ForeignKey("children.id"), nullable=False)
    login_date = Column(Date, nullable=False)
    rank = Column(String, nullable=False)
    base_points = Column(Integer, nullable=False)
    multiplier = Column(Float, nullable=False, default=1.0)
    total_points = Column(Integer, nullable=False)
    consecutive_days = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, nullable=False, default=DateService.utc_now)
