"""
Login bonus service - Business logic for the daily omikuji bonus.
"""
import logging
import random
from typing import Optional, Union
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ganbari_quest.constants import LEDGER_TYPE_LOGIN_BONUS, LOGIN_STREAK_LOOKBACK
from ganbari_quest.errors import ServiceError, already_claimed, not_found
from ganbari_quest.models import LoginBonus
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.repositories.login_bonus_repository import LoginBonusRepository
from ganbari_quest.schemas import ClaimResult, LoginBonusStatus
from ganbari_quest.services import scoring_rules
from ganbari_quest.services.date_service import Clock, DateService
from ganbari_quest.services.point_service import PointService
from ganbari_quest.services.streak_service import count_streak

logger = logging.getLogger("ganbari_quest.login_bonus")


class LoginBonusService:
    """Service for daily login bonus claims"""

    def __init__(
        self,
        db: Session,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None
    ):
        self.db = db
        self.clock = clock or DateService.utc_now
        self.rng = rng
        self.child_repo = ChildRepository()
        self.bonus_repo = LoginBonusRepository()
        self.point_service = PointService(db, self.clock)

    def calculate_consecutive_days(self, child_id: int) -> int:
        """Login streak including today, walking back over recent claim dates"""
        today = DateService.today(self.clock)
        recent = self.bonus_repo.get_recent(self.db, child_id, LOGIN_STREAK_LOOKBACK)
        return count_streak((b.login_date for b in recent), today)

    def get_login_bonus_status(self, child_id: int) -> Union[LoginBonusStatus, ServiceError]:
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        today = DateService.today(self.clock)
        todays_bonus = self.bonus_repo.get_by_date(self.db, child_id, today)

        if todays_bonus:
            consecutive_days = todays_bonus.consecutive_days
        else:
            consecutive_days = self.calculate_consecutive_days(child_id)

        latest = self.bonus_repo.get_recent(self.db, child_id, 1)

        return LoginBonusStatus(
            child_id=child_id,
            claimed_today=todays_bonus is not None,
            consecutive_login_days=consecutive_days,
            last_claimed_at=latest[0].created_at if latest else None
        )

    def claim_login_bonus(self, child_id: int) -> Union[ClaimResult, ServiceError]:
        """
        Claim today's login bonus.

        Draws an omikuji rank, scales its base points by the login streak
        multiplier (floored) and stores the claim and its ledger entry in a
        single transaction. A second claim on the same day, including one
        that loses a race on the unique (child, day) row, is ALREADY_CLAIMED.

        Args:
            child_id: Claiming child

        Returns:
            Claim result or NOT_FOUND / ALREADY_CLAIMED
        """
        if not self.child_repo.get_by_id(self.db, child_id):
            return not_found("child")

        today = DateService.today(self.clock)
        if self.bonus_repo.get_by_date(self.db, child_id, today):
            return already_claimed()

        consecutive_days = self.calculate_consecutive_days(child_id)
        omikuji = scoring_rules.draw_omikuji(self.rng)
        multiplier = scoring_rules.get_login_multiplier(consecutive_days)
        total_points = scoring_rules.calculate_login_bonus_points(omikuji.base_points, multiplier)
        message = self._build_message(omikuji.rank, consecutive_days, multiplier, total_points)

        try:
            bonus = self.bonus_repo.create(self.db, LoginBonus(
                child_id=child_id,
                login_date=today,
                rank=omikuji.rank,
                base_points=omikuji.base_points,
                multiplier=multiplier,
                total_points=total_points,
                consecutive_days=consecutive_days,
                created_at=self.clock()
            ))
            self.point_service.add_entry(
                child_id,
                total_points,
                LEDGER_TYPE_LOGIN_BONUS,
                message,
                reference_id=bonus.id
            )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.info(f"Concurrent login bonus claim for child {child_id} on {today}")
            return already_claimed()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        logger.info(
            f"Login bonus: child={child_id} rank={omikuji.rank} days={consecutive_days} "
            f"x{multiplier} = {total_points}P"
        )

        return ClaimResult(
            child_id=child_id,
            rank=omikuji.rank,
            base_points=omikuji.base_points,
            consecutive_login_days=consecutive_days,
            multiplier=multiplier,
            total_points=total_points,
            message=message
        )

    @staticmethod
    def _build_message(rank: str, consecutive_days: int, multiplier: float, total_points: int) -> str:
        if multiplier > 1:
            return f"{rank}！{consecutive_days}にちれんぞくで{multiplier:g}ばい！{total_points}ポイントゲット！"
        return f"{rank}！{total_points}ポイントゲット！"
