"""
Point ledger repository.
The ledger is insert-only: there is no update or delete here, and the balance
is always the sum of a child's entries.
"""
from typing import List
from sqlalchemy import func
from sqlalchemy.orm import Session

from ganbari_quest.models import PointLedgerEntry


class PointLedgerRepository:
    """Repository for PointLedgerEntry data access"""

    @staticmethod
    def create(db: Session, entry: PointLedgerEntry) -> PointLedgerEntry:
        """Append a ledger entry (caller commits)"""
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def get_balance(db: Session, child_id: int) -> int:
        total = db.query(func.coalesce(func.sum(PointLedgerEntry.amount), 0)).filter(
            PointLedgerEntry.child_id == child_id
        ).scalar()
        return int(total or 0)

    @staticmethod
    def get_history(db: Session, child_id: int, limit: int, offset: int) -> List[PointLedgerEntry]:
        """Get ledger entries newest first"""
        return db.query(PointLedgerEntry).filter(
            PointLedgerEntry.child_id == child_id
        ).order_by(
            PointLedgerEntry.created_at.desc(), PointLedgerEntry.id.desc()
        ).offset(offset).limit(limit).all()
