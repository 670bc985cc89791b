"""
Point ledger service.
Appends signed entries to the ledger and derives balances from it; handles
conversion of points into pocket money.
"""
import logging
from typing import Optional, Union
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ganbari_quest.constants import (
    POINTS_PER_CONVERT_UNIT, DEFAULT_HISTORY_LIMIT, LEDGER_TYPE_CONVERT
)
from ganbari_quest.errors import ServiceError, not_found, insufficient_points
from ganbari_quest.models import PointLedgerEntry
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.repositories.ledger_repository import PointLedgerRepository
from ganbari_quest.schemas import (
    PointBalance, PointHistoryResponse, PointLedgerResponse, ConvertResult
)
from ganbari_quest.services.date_service import Clock, DateService

logger = logging.getLogger("ganbari_quest.points")


class PointService:
    """Service for the point ledger"""

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        self.db = db
        self.clock = clock or DateService.utc_now
        self.ledger_repo = PointLedgerRepository()
        self.child_repo = ChildRepository()

    def add_entry(
        self,
        child_id: int,
        amount: int,
        entry_type: str,
        description: str,
        reference_id: Optional[int] = None
    ) -> PointLedgerEntry:
        """
        Append a ledger entry inside the caller's transaction.

        Args:
            child_id: Owner of the entry
            amount: Signed point amount
            entry_type: activity, cancel, weekly_bonus, login_bonus or convert
            description: Human readable text
            reference_id: Originating activity log / evaluation id

        Returns:
            The flushed (uncommitted) entry
        """
        entry = PointLedgerEntry(
            child_id=child_id,
            amount=amount,
            type=entry_type,
            description=description,
            reference_id=reference_id,
            created_at=self.clock()
        )
        self.ledger_repo.create(self.db, entry)
        logger.info(f"Ledger: child={child_id} {entry_type} {amount:+d} ({description})")
        return entry

    def get_balance(self, child_id: int) -> int:
        return self.ledger_repo.get_balance(self.db, child_id)

    def get_point_balance(self, child_id: int) -> Union[PointBalance, ServiceError]:
        """Get balance with the amount that can be converted right now"""
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        balance = self.get_balance(child_id)
        unit = POINTS_PER_CONVERT_UNIT

        return PointBalance(
            child_id=child_id,
            balance=balance,
            convertable_amount=(balance // unit) * unit if balance > 0 else 0,
            next_convert_at=balance if balance >= unit else unit
        )

    def get_point_history(
        self,
        child_id: int,
        limit: int = DEFAULT_HISTORY_LIMIT,
        offset: int = 0
    ) -> Union[PointHistoryResponse, ServiceError]:
        """Get ledger entries newest first"""
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        entries = self.ledger_repo.get_history(self.db, child_id, limit, offset)
        return PointHistoryResponse(
            history=[PointLedgerResponse.model_validate(e) for e in entries]
        )

    def convert_points(self, child_id: int, amount: int) -> Union[ConvertResult, ServiceError]:
        """
        Convert points into pocket money.

        Succeeds only when amount <= balance; writes a single negative
        convert entry.
        """
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        balance = self.get_balance(child_id)
        if balance < amount:
            logger.info(f"Convert rejected: child={child_id} amount={amount} balance={balance}")
            return insufficient_points()

        message = f"{amount}ポイントをおこづかいにかえました"
        try:
            self.add_entry(child_id, -amount, LEDGER_TYPE_CONVERT, message)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        return ConvertResult(
            message=message,
            converted_amount=amount,
            remaining_balance=balance - amount
        )
