from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Dict, List, Optional

from ganbari_quest.constants import (
    CATEGORIES, POINTS_PER_CONVERT_UNIT, CHANGE_TYPE_MANUAL,
    PERIOD_WEEK, PERIOD_MONTH, PERIOD_YEAR
)

CATEGORY_PATTERN = "^(" + "|".join(CATEGORIES) + ")$"
PERIOD_PATTERN = f"^({PERIOD_WEEK}|{PERIOD_MONTH}|{PERIOD_YEAR})$"


# Children
class ChildResponse(BaseModel):
    id: int
    nickname: str
    age: int
    theme: str

    class Config:
        from_attributes = True


# Activity catalog
class ActivityBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    category: str = Field(..., pattern=CATEGORY_PATTERN)
    icon: str = Field(..., min_length=1)
    base_points: int = Field(default=5, ge=1, le=100)
    age_min: Optional[int] = Field(None, ge=0, le=20)
    age_max: Optional[int] = Field(None, ge=0, le=20)
    sort_order: int = 0


class ActivityCreate(ActivityBase):
    pass


class ActivityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[str] = Field(None, pattern=CATEGORY_PATTERN)
    icon: Optional[str] = Field(None, min_length=1)
    base_points: Optional[int] = Field(None, ge=1, le=100)
    age_min: Optional[int] = Field(None, ge=0, le=20)
    age_max: Optional[int] = Field(None, ge=0, le=20)
    sort_order: Optional[int] = None


class ActivityVisibilityUpdate(BaseModel):
    is_visible: bool


class ActivityResponse(ActivityBase):
    id: int
    is_visible: bool

    class Config:
        from_attributes = True


# Activity recording
class RecordActivityRequest(BaseModel):
    child_id: int = Field(..., gt=0)
    activity_id: int = Field(..., gt=0)


class RecordActivityResult(BaseModel):
    id: int
    child_id: int
    activity_id: int
    activity_name: str
    base_points: int
    streak_days: int
    streak_bonus: int
    total_points: int
    recorded_at: datetime
    cancelable_until: datetime


class CancelActivityResult(BaseModel):
    refunded_points: int


class ActivityLogEntry(BaseModel):
    id: int
    activity_id: int
    activity_name: str
    activity_icon: str
    category: str
    points: int
    streak_days: int
    streak_bonus: int
    recorded_date: date
    recorded_at: datetime


class CategorySummary(BaseModel):
    count: int = 0
    points: int = 0


class ActivityLogSummary(BaseModel):
    total_count: int
    total_points: int
    by_category: Dict[str, CategorySummary]


class ActivityLogsResponse(BaseModel):
    logs: List[ActivityLogEntry]
    summary: ActivityLogSummary


# Points
class PointBalance(BaseModel):
    child_id: int
    balance: int
    convertable_amount: int
    next_convert_at: int


class PointLedgerResponse(BaseModel):
    id: int
    child_id: int
    amount: int
    type: str
    description: Optional[str]
    reference_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class PointHistoryResponse(BaseModel):
    history: List[PointLedgerResponse]


class ConvertPointsRequest(BaseModel):
    child_id: int = Field(..., gt=0)
    amount: int = Field(..., gt=0, multiple_of=POINTS_PER_CONVERT_UNIT)


class ConvertResult(BaseModel):
    message: str
    converted_amount: int
    remaining_balance: int


# Status
class StatusDetail(BaseModel):
    value: float
    deviation_score: int
    stars: int
    trend: str


class ChildStatusResponse(BaseModel):
    child_id: int
    level: int
    level_title: str
    exp_to_next_level: float
    statuses: Dict[str, StatusDetail]
    character_type: str


class StatusUpdateRequest(BaseModel):
    category: str = Field(..., pattern=CATEGORY_PATTERN)
    change_amount: float = Field(..., ge=-100, le=100)
    change_type: str = Field(default=CHANGE_TYPE_MANUAL, min_length=1, max_length=50)


class StatusResponse(BaseModel):
    child_id: int
    category: str
    value: float
    updated_at: datetime

    class Config:
        from_attributes = True


# Evaluations
class CategoryScore(BaseModel):
    count: int
    points: int
    status_increase: float


class EvaluationResult(BaseModel):
    child_id: int
    week_start: date
    week_end: date
    category_scores: Dict[str, CategoryScore]
    bonus_points: int
    already_evaluated: bool = False


class EvaluationResponse(BaseModel):
    id: int
    child_id: int
    week_start: date
    week_end: date
    scores: Dict[str, CategoryScore]
    bonus_points: int
    created_at: datetime


class CategoryDecay(BaseModel):
    category: str
    amount: float


class DecayResult(BaseModel):
    child_id: int
    decays: List[CategoryDecay]


# Login bonus
class LoginBonusStatus(BaseModel):
    child_id: int
    claimed_today: bool
    consecutive_login_days: int
    last_claimed_at: Optional[datetime]


class ClaimResult(BaseModel):
    child_id: int
    rank: str
    base_points: int
    consecutive_login_days: int
    multiplier: float
    total_points: int
    message: str
