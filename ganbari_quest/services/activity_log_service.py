"""
Activity log service.
Records daily activities with streak bonuses, handles the short cancellation
window and builds log listings with category summaries.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional, Union
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ganbari_quest.constants import (
    CANCEL_WINDOW_MS, LEDGER_TYPE_ACTIVITY, LEDGER_TYPE_CANCEL
)
from ganbari_quest.errors import ServiceError, not_found, already_recorded, cancel_expired
from ganbari_quest.models import ActivityLog
from ganbari_quest.repositories.activity_repository import ActivityRepository, ActivityLogRepository
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.schemas import (
    RecordActivityResult, CancelActivityResult, ActivityLogEntry,
    ActivityLogSummary, ActivityLogsResponse, CategorySummary
)
from ganbari_quest.services import scoring_rules
from ganbari_quest.services.date_service import Clock, DateService
from ganbari_quest.services.point_service import PointService
from ganbari_quest.services.streak_service import count_streak

logger = logging.getLogger("ganbari_quest.activity_logs")

CANCEL_WINDOW = timedelta(milliseconds=CANCEL_WINDOW_MS)


class ActivityLogService:
    """Service for recording and cancelling activities"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or DateService.utc_now
        self.child_repo = ChildRepository()
        self.activity_repo = ActivityRepository()
        self.log_repo = ActivityLogRepository()
        self.point_service = PointService(db, self.clock)

    def record_activity(
        self,
        child_id: int,
        activity_id: int
    ) -> Union[RecordActivityResult, ServiceError]:
        """
        Record an activity for today.

        Points = base points + streak bonus, where the streak counts
        consecutive days (including today) this activity was recorded.
        The log and its ledger entry are written in one transaction.

        Returns:
            Result with the cancellation deadline, NOT_FOUND (child/activity)
            or ALREADY_RECORDED
        """
        now = self.clock()
        today = now.date()

        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        activity = self.activity_repo.get_by_id(self.db, activity_id)
        if not activity:
            return not_found("activity")

        if self.log_repo.get_daily_log(self.db, child_id, activity_id, today):
            logger.info(f"Already recorded: child={child_id} activity={activity_id} on {today}")
            return already_recorded()

        prior_dates = self.log_repo.get_recorded_dates(self.db, child_id, activity_id)
        streak_days = count_streak(prior_dates, today)
        streak_bonus = scoring_rules.calculate_streak_bonus(streak_days)
        total_points = activity.base_points + streak_bonus

        description = activity.name
        if streak_bonus > 0:
            description = f"{activity.name} ({streak_days}日連続+{streak_bonus})"

        try:
            log = self.log_repo.create(self.db, ActivityLog(
                child_id=child_id,
                activity_id=activity_id,
                points=activity.base_points,
                streak_days=streak_days,
                streak_bonus=streak_bonus,
                recorded_date=today,
                recorded_at=now
            ))
            self.point_service.add_entry(
                child_id, total_points, LEDGER_TYPE_ACTIVITY, description, reference_id=log.id
            )
            self.db.commit()
        except SQLAlchemyError:
            # Unique (child, activity, day) also blocks re-recording after a cancel
            self.db.rollback()
            raise

        logger.info(
            f"Recorded activity {activity_id} for child {child_id}: "
            f"{total_points}P (streak {streak_days}, bonus {streak_bonus})"
        )

        return RecordActivityResult(
            id=log.id,
            child_id=child_id,
            activity_id=activity_id,
            activity_name=activity.name,
            base_points=activity.base_points,
            streak_days=streak_days,
            streak_bonus=streak_bonus,
            total_points=total_points,
            recorded_at=now,
            cancelable_until=now + CANCEL_WINDOW
        )

    def cancel_activity_log(self, log_id: int) -> Union[CancelActivityResult, ServiceError]:
        """
        Cancel a recorded activity within the cancellation window.

        The log is flagged (never deleted) and a compensating negative
        ledger entry refunds exactly points + streak bonus.

        Returns:
            Refunded points, NOT_FOUND (missing or already cancelled) or CANCEL_EXPIRED
        """
        log = self.log_repo.get_by_id(self.db, log_id)
        if not log or log.cancelled:
            return not_found("log")

        if self.clock() - log.recorded_at > CANCEL_WINDOW:
            logger.info(f"Cancel expired for activity log {log_id}")
            return cancel_expired()

        refund = log.points + log.streak_bonus

        try:
            log.cancelled = True
            self.db.flush()
            self.point_service.add_entry(
                log.child_id, -refund, LEDGER_TYPE_CANCEL, "キャンセル", reference_id=log_id
            )
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(f"Cancelled activity log {log_id}, refunded {refund}P")
        return CancelActivityResult(refunded_points=refund)

    def get_activity_logs(
        self,
        child_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        period: Optional[str] = None
    ) -> Union[ActivityLogsResponse, ServiceError]:
        """
        Get non-cancelled logs in a date range with a per-category summary.

        When date_from is missing and a period (week/month/year) is given,
        the range starts at the beginning of that period.
        """
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        if date_from is None and period:
            date_from = DateService.get_period_start(period, DateService.today(self.clock))

        rows = self.log_repo.get_logs(self.db, child_id, date_from, date_to)

        logs: List[ActivityLogEntry] = []
        by_category = {}
        total_points = 0

        for log, activity in rows:
            logs.append(ActivityLogEntry(
                id=log.id,
                activity_id=activity.id,
                activity_name=activity.name,
                activity_icon=activity.icon,
                category=activity.category,
                points=log.points,
                streak_days=log.streak_days,
                streak_bonus=log.streak_bonus,
                recorded_date=log.recorded_date,
                recorded_at=log.recorded_at
            ))

            row_total = log.points + log.streak_bonus
            total_points += row_total
            summary = by_category.setdefault(activity.category, CategorySummary())
            summary.count += 1
            summary.points += row_total

        return ActivityLogsResponse(
            logs=logs,
            summary=ActivityLogSummary(
                total_count=len(logs),
                total_points=total_points,
                by_category=by_category
            )
        )

    def get_today_recorded_activity_ids(self, child_id: int) -> Union[List[int], ServiceError]:
        """Activity ids the child already recorded today (for the done state)"""
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        today = DateService.today(self.clock)
        return self.log_repo.get_activity_ids_for_date(self.db, child_id, today)
