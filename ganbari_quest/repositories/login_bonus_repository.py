"""
Login bonus repository - Data access layer for daily login bonuses.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session

from ganbari_quest.models import LoginBonus


class LoginBonusRepository:
    """Repository for LoginBonus data access"""

    @staticmethod
    def get_by_date(db: Session, child_id: int, login_date: date) -> Optional[LoginBonus]:
        return db.query(LoginBonus).filter(
            and_(
                LoginBonus.child_id == child_id,
                LoginBonus.login_date == login_date
            )
        ).first()

    @staticmethod
    def get_recent(db: Session, child_id: int, limit: int) -> List[LoginBonus]:
        """Get most recent bonuses, newest login date first"""
        return db.query(LoginBonus).filter(
            LoginBonus.child_id == child_id
        ).order_by(LoginBonus.login_date.desc()).limit(limit).all()

    @staticmethod
    def create(db: Session, bonus: LoginBonus) -> LoginBonus:
        """Add a login bonus (caller commits)"""
        db.add(bonus)
        db.flush()
        return bonus
