"""
Status repository - Data access layer for statuses, status history and benchmarks.
"""
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session

from ganbari_quest.models import Status, StatusHistory, MarketBenchmark


class StatusRepository:
    """Repository for Status data access"""

    @staticmethod
    def get_all_for_child(db: Session, child_id: int) -> List[Status]:
        return db.query(Status).filter(Status.child_id == child_id).all()

    @staticmethod
    def get_for_update(db: Session, child_id: int, category: str) -> Optional[Status]:
        """
        Get a status row locked for the rest of the transaction.

        FOR UPDATE is dropped by dialects without row locks (SQLite); the
        row's version column still catches concurrent writers there.
        """
        return db.query(Status).filter(
            and_(
                Status.child_id == child_id,
                Status.category == category
            )
        ).with_for_update().first()

    @staticmethod
    def create(db: Session, status: Status) -> Status:
        """Add a status row (caller commits)"""
        db.add(status)
        db.flush()
        return status


class StatusHistoryRepository:
    """Repository for StatusHistory data access (insert-only)"""

    @staticmethod
    def create(db: Session, history: StatusHistory) -> StatusHistory:
        db.add(history)
        db.flush()
        return history

    @staticmethod
    def get_recent(db: Session, child_id: int, category: str, limit: int = 7) -> List[StatusHistory]:
        """Get most recent history rows for a category, newest first"""
        return db.query(StatusHistory).filter(
            and_(
                StatusHistory.child_id == child_id,
                StatusHistory.category == category
            )
        ).order_by(
            StatusHistory.recorded_at.desc(), StatusHistory.id.desc()
        ).limit(limit).all()


class BenchmarkRepository:
    """Repository for MarketBenchmark data access"""

    @staticmethod
    def get(db: Session, age: int, category: str) -> Optional[MarketBenchmark]:
        return db.query(MarketBenchmark).filter(
            and_(
                MarketBenchmark.age == age,
                MarketBenchmark.category == category
            )
        ).first()

    @staticmethod
    def create(db: Session, benchmark: MarketBenchmark) -> MarketBenchmark:
        db.add(benchmark)
        db.flush()
        return benchmark
