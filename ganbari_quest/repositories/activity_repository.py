"""
Activity repository - Data access layer for activities and activity logs.
Handles catalog filtering, the per-day log lookup, streak dates and the
category aggregates used by the weekly evaluation and daily decay.
"""
from datetime import date
from typing import List, Optional, Dict
from sqlalchemy import and_, or_, func
from sqlalchemy.orm import Session

from ganbari_quest.models import Activity, ActivityLog


class ActivityRepository:
    """Repository for Activity catalog data access"""

    @staticmethod
    def get_all(
        db: Session,
        category: Optional[str] = None,
        child_age: Optional[int] = None,
        include_hidden: bool = False
    ) -> List[Activity]:
        """Get activities filtered by category, age range and visibility"""
        query = db.query(Activity)

        if category:
            query = query.filter(Activity.category == category)

        if not include_hidden:
            query = query.filter(Activity.is_visible == True)

        if child_age is not None:
            query = query.filter(
                and_(
                    or_(Activity.age_min.is_(None), Activity.age_min <= child_age),
                    or_(Activity.age_max.is_(None), Activity.age_max >= child_age)
                )
            )

        return query.order_by(Activity.sort_order, Activity.id).all()

    @staticmethod
    def get_by_id(db: Session, activity_id: int) -> Optional[Activity]:
        return db.query(Activity).filter(Activity.id == activity_id).first()

    @staticmethod
    def create(db: Session, activity: Activity) -> Activity:
        """Add an activity (caller commits)"""
        db.add(activity)
        db.flush()
        return activity


class ActivityLogRepository:
    """Repository for ActivityLog data access"""

    @staticmethod
    def get_by_id(db: Session, log_id: int) -> Optional[ActivityLog]:
        return db.query(ActivityLog).filter(ActivityLog.id == log_id).first()

    @staticmethod
    def get_daily_log(
        db: Session,
        child_id: int,
        activity_id: int,
        target_date: date
    ) -> Optional[ActivityLog]:
        """Get the non-cancelled log for child + activity on a day"""
        return db.query(ActivityLog).filter(
            and_(
                ActivityLog.child_id == child_id,
                ActivityLog.activity_id == activity_id,
                ActivityLog.recorded_date == target_date,
                ActivityLog.cancelled == False
            )
        ).first()

    @staticmethod
    def get_recorded_dates(db: Session, child_id: int, activity_id: int) -> List[date]:
        """Get all non-cancelled recorded dates for child + activity, newest first"""
        rows = db.query(ActivityLog.recorded_date).filter(
            and_(
                ActivityLog.child_id == child_id,
                ActivityLog.activity_id == activity_id,
                ActivityLog.cancelled == False
            )
        ).order_by(ActivityLog.recorded_date.desc()).all()
        return [row.recorded_date for row in rows]

    @staticmethod
    def create(db: Session, log: ActivityLog) -> ActivityLog:
        """Add an activity log (caller commits)"""
        db.add(log)
        db.flush()
        return log

    @staticmethod
    def get_logs(
        db: Session,
        child_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None
    ) -> List[tuple]:
        """Get non-cancelled (log, activity) pairs in an inclusive date range, newest first"""
        query = db.query(ActivityLog, Activity).join(
            Activity, ActivityLog.activity_id == Activity.id
        ).filter(
            and_(
                ActivityLog.child_id == child_id,
                ActivityLog.cancelled == False
            )
        )

        if date_from:
            query = query.filter(ActivityLog.recorded_date >= date_from)
        if date_to:
            query = query.filter(ActivityLog.recorded_date <= date_to)

        return query.order_by(ActivityLog.recorded_at.desc(), ActivityLog.id.desc()).all()

    @staticmethod
    def get_activity_ids_for_date(db: Session, child_id: int, target_date: date) -> List[int]:
        rows = db.query(ActivityLog.activity_id).filter(
            and_(
                ActivityLog.child_id == child_id,
                ActivityLog.recorded_date == target_date,
                ActivityLog.cancelled == False
            )
        ).all()
        return [row.activity_id for row in rows]

    @staticmethod
    def count_by_category(
        db: Session,
        child_id: int,
        week_start: date,
        week_end: date
    ) -> Dict[str, dict]:
        """
        Aggregate non-cancelled logs per category over an inclusive range.

        Returns:
            {category: {"count": n, "points": sum of base points}}
        """
        rows = db.query(
            Activity.category,
            func.count(ActivityLog.id).label("count"),
            func.coalesce(func.sum(ActivityLog.points), 0).label("points")
        ).join(
            Activity, ActivityLog.activity_id == Activity.id
        ).filter(
            and_(
                ActivityLog.child_id == child_id,
                ActivityLog.cancelled == False,
                ActivityLog.recorded_date >= week_start,
                ActivityLog.recorded_date <= week_end
            )
        ).group_by(Activity.category).all()

        return {row.category: {"count": int(row.count), "points": int(row.points)} for row in rows}

    @staticmethod
    def get_last_dates_by_category(db: Session, child_id: int) -> Dict[str, date]:
        """Get the most recent non-cancelled activity date per category"""
        rows = db.query(
            Activity.category,
            func.max(ActivityLog.recorded_date).label("last_date")
        ).join(
            Activity, ActivityLog.activity_id == Activity.id
        ).filter(
            and_(
                ActivityLog.child_id == child_id,
                ActivityLog.cancelled == False
            )
        ).group_by(Activity.category).all()

        return {row.category: row.last_date for row in rows if row.last_date is not None}
