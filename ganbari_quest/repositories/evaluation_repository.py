"""
Evaluation repository - Data access layer for weekly evaluations.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session

from ganbari_quest.models import Evaluation


class EvaluationRepository:
    """Repository for Evaluation data access"""

    @staticmethod
    def get_by_week(db: Session, child_id: int, week_start: date) -> Optional[Evaluation]:
        return db.query(Evaluation).filter(
            and_(
                Evaluation.child_id == child_id,
                Evaluation.week_start == week_start
            )
        ).first()

    @staticmethod
    def get_recent(db: Session, child_id: int, limit: int = 10) -> List[Evaluation]:
        return db.query(Evaluation).filter(
            Evaluation.child_id == child_id
        ).order_by(Evaluation.week_start.desc()).limit(limit).all()

    @staticmethod
    def create(db: Session, evaluation: Evaluation) -> Evaluation:
        """Add an evaluation (caller commits)"""
        db.add(evaluation)
        db.flush()
        return evaluation
