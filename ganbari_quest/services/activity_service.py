"""
Activity catalog service.
"""
import logging
from typing import List, Optional, Union
from sqlalchemy.orm import Session

from ganbari_quest.errors import ServiceError, not_found
from ganbari_quest.models import Activity
from ganbari_quest.repositories.activity_repository import ActivityRepository
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.schemas import ActivityCreate, ActivityUpdate, ActivityResponse

logger = logging.getLogger("ganbari_quest.activities")


class ActivityService:
    """Service for the activity catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ActivityRepository()
        self.child_repo = ChildRepository()

    def list_activities(
        self,
        category: Optional[str] = None,
        child_id: Optional[int] = None,
        include_hidden: bool = False
    ) -> Union[List[ActivityResponse], ServiceError]:
        """List activities, restricted to the child's age when child_id is given"""
        child_age = None
        if child_id is not None:
            child = self.child_repo.get_by_id(self.db, child_id)
            if not child:
                return not_found("child")
            child_age = child.age

        activities = self.repo.get_all(self.db, category, child_age, include_hidden)
        return [ActivityResponse.model_validate(a) for a in activities]

    def get_activity(self, activity_id: int) -> Union[ActivityResponse, ServiceError]:
        activity = self.repo.get_by_id(self.db, activity_id)
        if not activity:
            return not_found("activity")
        return ActivityResponse.model_validate(activity)

    def create_activity(self, data: ActivityCreate) -> ActivityResponse:
        activity = self.repo.create(self.db, Activity(**data.model_dump()))
        self.db.commit()
        logger.info(f"Created activity {activity.id}: {activity.name}")
        return ActivityResponse.model_validate(activity)

    def update_activity(
        self,
        activity_id: int,
        data: ActivityUpdate
    ) -> Union[ActivityResponse, ServiceError]:
        activity = self.repo.get_by_id(self.db, activity_id)
        if not activity:
            return not_found("activity")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(activity, field, value)
        self.db.commit()
        return ActivityResponse.model_validate(activity)

    def set_visibility(self, activity_id: int, visible: bool) -> Union[ActivityResponse, ServiceError]:
        activity = self.repo.get_by_id(self.db, activity_id)
        if not activity:
            return not_found("activity")

        activity.is_visible = visible
        self.db.commit()
        return ActivityResponse.model_validate(activity)
