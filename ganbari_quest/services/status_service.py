"""
Status service.
Owns the per-category status values: the single write path (apply_change)
and the derived view (deviation, stars, trend, level, character type).
"""
import logging
from typing import Dict, Optional, Union
from sqlalchemy.orm import Session

from ganbari_quest.constants import (
    CATEGORIES, DEFAULT_DEVIATION_SCORE, STATUS_UPDATE_MAX_RETRIES
)
from ganbari_quest.database import run_with_retry
from ganbari_quest.errors import ServiceError, not_found
from ganbari_quest.models import Status, StatusHistory
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.repositories.status_repository import (
    StatusRepository, StatusHistoryRepository, BenchmarkRepository
)
from ganbari_quest.schemas import ChildStatusResponse, StatusDetail, StatusResponse
from ganbari_quest.services import scoring_rules
from ganbari_quest.services.date_service import Clock, DateService

logger = logging.getLogger("ganbari_quest.status")


class StatusService:
    """Service for child status values"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or DateService.utc_now
        self.child_repo = ChildRepository()
        self.status_repo = StatusRepository()
        self.history_repo = StatusHistoryRepository()
        self.benchmark_repo = BenchmarkRepository()

    def get_child_status(self, child_id: int) -> Union[ChildStatusResponse, ServiceError]:
        """
        Build the status overview for a child.

        For each category: stored value (0 if never set), deviation score
        against the age benchmark (50 without one), stars and trend. The
        averages drive level/title and character type.
        """
        child = self.child_repo.get_by_id(self.db, child_id)
        if not child:
            return not_found("child")

        stored = {s.category: s.value for s in self.status_repo.get_all_for_child(self.db, child_id)}
        statuses: Dict[str, StatusDetail] = {}
        total_value = 0.0
        total_deviation = 0

        for category in CATEGORIES:
            value = stored.get(category, 0.0)

            benchmark = self.benchmark_repo.get(self.db, child.age, category)
            if benchmark:
                deviation = scoring_rules.calculate_deviation_score(
                    value, benchmark.mean, benchmark.std_dev
                )
            else:
                deviation = DEFAULT_DEVIATION_SCORE

            # Trend needs two history rows; the latest change decides it
            history = self.history_repo.get_recent(self.db, child_id, category, limit=2)
            recent_change = history[0].change_amount if len(history) >= 2 else 0.0

            statuses[category] = StatusDetail(
                value=scoring_rules.round_half_up(value, 1),
                deviation_score=deviation,
                stars=scoring_rules.calculate_stars(deviation),
                trend=scoring_rules.calculate_trend(recent_change)
            )
            total_value += value
            total_deviation += deviation

        avg_status = total_value / len(CATEGORIES)
        avg_deviation = total_deviation / len(CATEGORIES)
        tier = scoring_rules.calculate_level(avg_status)

        return ChildStatusResponse(
            child_id=child_id,
            level=tier.level,
            level_title=tier.title,
            exp_to_next_level=scoring_rules.round_half_up(
                scoring_rules.calculate_exp_to_next_level(avg_status), 1
            ),
            statuses=statuses,
            character_type=scoring_rules.calculate_character_type(avg_deviation)
        )

    def apply_change(
        self,
        child_id: int,
        category: str,
        change_amount: float,
        change_type: str
    ) -> Union[StatusResponse, ServiceError]:
        """
        Apply a status delta in its own transaction.

        Concurrent writers to the same (child, category) are serialized by
        the row lock / version check; a conflict reruns the update.

        Args:
            child_id: Child to update
            category: Status category
            change_amount: Signed delta (unclamped)
            change_type: Reason tag stored in history

        Returns:
            Updated status, or NOT_FOUND if the child doesn't exist
        """
        child = self.child_repo.get_by_id(self.db, child_id)
        if not child:
            return not_found("child")

        status = run_with_retry(
            self.db,
            lambda: self.apply_in_transaction(child_id, category, change_amount, change_type),
            max_attempts=STATUS_UPDATE_MAX_RETRIES,
            label=f"status update child={child_id} {category}"
        )
        return StatusResponse.model_validate(status)

    def apply_in_transaction(
        self,
        child_id: int,
        category: str,
        change_amount: float,
        change_type: str
    ) -> Status:
        """
        Read, clamp and write one status inside the caller's transaction.

        History keeps the raw delta even when the value is clamped.
        """
        now = self.clock()
        status = self.status_repo.get_for_update(self.db, child_id, category)
        current_value = status.value if status else 0.0
        new_value = scoring_rules.clamp_status(current_value + change_amount)

        if status:
            status.value = new_value
            status.updated_at = now
            self.db.flush()
        else:
            status = self.status_repo.create(self.db, Status(
                child_id=child_id,
                category=category,
                value=new_value,
                updated_at=now
            ))

        self.history_repo.create(self.db, StatusHistory(
            child_id=child_id,
            category=category,
            value=new_value,
            change_amount=change_amount,
            change_type=change_type,
            recorded_at=now
        ))

        logger.debug(
            f"Status child={child_id} {category}: {current_value:.2f} -> {new_value:.2f} "
            f"({change_amount:+.2f}, {change_type})"
        )
        return status
