"""
Daily decay service.
Lowers the status of categories a child has left idle. Meant to run once
per calendar day; it does not guard against repeated runs itself.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session

from ganbari_quest.constants import CATEGORIES, CHANGE_TYPE_DAILY_DECAY
from ganbari_quest.repositories.activity_repository import ActivityLogRepository
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.schemas import CategoryDecay, DecayResult
from ganbari_quest.services import scoring_rules
from ganbari_quest.services.date_service import Clock, DateService
from ganbari_quest.services.status_service import StatusService

logger = logging.getLogger("ganbari_quest.decay")


class DecayService:
    """Service for the daily status decay job"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or DateService.utc_now
        self.child_repo = ChildRepository()
        self.log_repo = ActivityLogRepository()
        self.status_service = StatusService(db, self.clock)

    def run_daily_decay(self, target_date: Optional[date] = None) -> List[DecayResult]:
        """
        Apply decay for every child and category.

        Categories with no activity at all are skipped. Otherwise the days
        since the last non-cancelled activity (relative to target_date) and
        the child's age determine the decay, applied as a negative delta.

        Args:
            target_date: Day to decay for (defaults to the clock's today)

        Returns:
            Applied decays per child
        """
        today = target_date or DateService.today(self.clock)
        results = []

        for child in self.child_repo.get_all(self.db):
            last_dates = self.log_repo.get_last_dates_by_category(self.db, child.id)
            decays = []

            for category in CATEGORIES:
                last_date = last_dates.get(category)
                if last_date is None:
                    continue

                days_since = DateService.days_between(last_date, today)
                if days_since <= 0:
                    continue

                amount = scoring_rules.calculate_decay(days_since, child.age)
                if amount > 0:
                    self.status_service.apply_change(
                        child.id, category, -amount, CHANGE_TYPE_DAILY_DECAY
                    )
                    decays.append(CategoryDecay(category=category, amount=amount))

            results.append(DecayResult(child_id=child.id, decays=decays))

        total = sum(len(r.decays) for r in results)
        logger.info(f"Daily decay for {today}: {total} category decays across {len(results)} children")
        return results
