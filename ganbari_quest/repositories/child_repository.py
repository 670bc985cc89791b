"""
Child repository - Data access layer for Child model.
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from ganbari_quest.models import Child


class ChildRepository:
    """Repository for Child data access"""

    @staticmethod
    def get_by_id(db: Session, child_id: int) -> Optional[Child]:
        return db.query(Child).filter(Child.id == child_id).first()

    @staticmethod
    def get_all(db: Session) -> List[Child]:
        return db.query(Child).order_by(Child.id).all()

    @staticmethod
    def create(db: Session, child: Child) -> Child:
        """Add a child (caller commits)"""
        db.add(child)
        db.flush()
        return child
