"""
Weekly evaluation service.
Aggregates a week of activity per category, raises statuses accordingly and
credits a breadth bonus. One evaluation per child and week.
"""
import json
import logging
from datetime import date
from typing import Dict, List, Optional, Union
from sqlalchemy.orm import Session

from ganbari_quest.constants import (
    CATEGORIES, CHANGE_TYPE_WEEKLY_EVALUATION, LEDGER_TYPE_WEEKLY_BONUS
)
from ganbari_quest.database import run_with_retry
from ganbari_quest.errors import ServiceError, not_found
from ganbari_quest.models import Evaluation
from ganbari_quest.repositories.activity_repository import ActivityLogRepository
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.repositories.evaluation_repository import EvaluationRepository
from ganbari_quest.schemas import CategoryScore, EvaluationResult, EvaluationResponse
from ganbari_quest.services import scoring_rules
from ganbari_quest.services.date_service import Clock, DateService
from ganbari_quest.services.point_service import PointService
from ganbari_quest.services.status_service import StatusService

logger = logging.getLogger("ganbari_quest.evaluation")


class EvaluationService:
    """Service for the weekly evaluation job"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or DateService.utc_now
        self.child_repo = ChildRepository()
        self.log_repo = ActivityLogRepository()
        self.evaluation_repo = EvaluationRepository()
        self.status_service = StatusService(db, self.clock)
        self.point_service = PointService(db, self.clock)

    def evaluate_child(
        self,
        child_id: int,
        week_start: date,
        week_end: date
    ) -> Union[EvaluationResult, ServiceError]:
        """
        Evaluate one child for an inclusive date range.

        Every category gets a status increase from its activity count
        (applied only when > 0), the breadth bonus is credited to the ledger
        and a score snapshot is stored. Idempotent: if the week was already
        evaluated the stored snapshot is returned and nothing is written.

        Args:
            child_id: Child to evaluate
            week_start: First day (Monday)
            week_end: Last day (Sunday)

        Returns:
            Evaluation result or NOT_FOUND
        """
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        return run_with_retry(
            self.db,
            lambda: self._evaluate(child_id, week_start, week_end),
            label=f"weekly evaluation child={child_id} week={week_start}"
        )

    def _evaluate(self, child_id: int, week_start: date, week_end: date) -> EvaluationResult:
        existing = self.evaluation_repo.get_by_week(self.db, child_id, week_start)
        if existing:
            logger.info(f"Week {week_start} already evaluated for child {child_id}")
            return EvaluationResult(
                child_id=child_id,
                week_start=existing.week_start,
                week_end=existing.week_end,
                category_scores=self._parse_scores(existing.scores_json),
                bonus_points=existing.bonus_points,
                already_evaluated=True
            )

        counts = self.log_repo.count_by_category(self.db, child_id, week_start, week_end)
        category_scores: Dict[str, dict] = {}

        for category in CATEGORIES:
            row = counts.get(category, {"count": 0, "points": 0})
            status_increase = scoring_rules.calculate_status_increase(row["count"])
            category_scores[category] = {
                "count": row["count"],
                "points": row["points"],
                "status_increase": status_increase
            }

            if status_increase > 0:
                self.status_service.apply_in_transaction(
                    child_id, category, status_increase, CHANGE_TYPE_WEEKLY_EVALUATION
                )

        bonus_points = scoring_rules.calculate_evaluation_bonus(category_scores)

        evaluation = self.evaluation_repo.create(self.db, Evaluation(
            child_id=child_id,
            week_start=week_start,
            week_end=week_end,
            scores_json=json.dumps(category_scores),
            bonus_points=bonus_points,
            created_at=self.clock()
        ))

        if bonus_points > 0:
            self.point_service.add_entry(
                child_id,
                bonus_points,
                LEDGER_TYPE_WEEKLY_BONUS,
                f"しゅうかんひょうかボーナス +{bonus_points}P",
                reference_id=evaluation.id
            )

        logger.info(
            f"Evaluated child {child_id} for {week_start}..{week_end}: bonus {bonus_points}P"
        )

        return EvaluationResult(
            child_id=child_id,
            week_start=week_start,
            week_end=week_end,
            category_scores={k: CategoryScore(**v) for k, v in category_scores.items()},
            bonus_points=bonus_points
        )

    def run_weekly_evaluation(self, target_date: Optional[date] = None) -> List[EvaluationResult]:
        """
        Evaluate every child for the most recently completed week.

        Args:
            target_date: Reference day (defaults to the clock's today)
        """
        today = target_date or DateService.today(self.clock)
        week_start, week_end = DateService.get_week_range(today)

        results = []
        for child in self.child_repo.get_all(self.db):
            results.append(self.evaluate_child(child.id, week_start, week_end))

        logger.info(f"Weekly evaluation {week_start}..{week_end}: {len(results)} children")
        return results

    def get_evaluations(
        self,
        child_id: int,
        limit: int = 10
    ) -> Union[List[EvaluationResponse], ServiceError]:
        """Get recent evaluations with decoded score snapshots"""
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        return [
            EvaluationResponse(
                id=e.id,
                child_id=e.child_id,
                week_start=e.week_start,
                week_end=e.week_end,
                scores=self._parse_scores(e.scores_json),
                bonus_points=e.bonus_points,
                created_at=e.created_at
            )
            for e in self.evaluation_repo.get_recent(self.db, child_id, limit)
        ]

    @staticmethod
    def _parse_scores(scores_json: str) -> Dict[str, CategoryScore]:
        return {k: CategoryScore(**v) for k, v in json.loads(scores_json).items()}
