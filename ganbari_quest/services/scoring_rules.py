"""
Scoring rules.
Pure functions for streak bonuses, status growth and decay, deviation scores,
levels and the daily omikuji draw. No I/O and no clock access.
"""
import math
import random
from typing import Mapping, Optional, Sequence

from ganbari_quest.constants import (
    STREAK_BONUS_CAP,
    STATUS_MIN,
    STATUS_MAX,
    STATUS_INCREASE_STEPS,
    STAR_THRESHOLDS,
    EVALUATION_BONUS_STEPS,
    AGE_DECAY_COEFFICIENTS,
    ADULT_DECAY_COEFFICIENT,
    DECAY_BASE_FACTOR,
    DECAY_ACCELERATION_PER_DAY,
    DEFAULT_DEVIATION_SCORE,
    LEVEL_TABLE,
    MAX_LEVEL,
    TREND_THRESHOLD,
    TREND_UP,
    TREND_DOWN,
    TREND_STABLE,
    CHARACTER_HERO,
    CHARACTER_NORMAL,
    CHARACTER_GANBARI,
    OMIKUJI_RANKS,
    OmikujiRank,
    LevelTier,
    Threshold,
    LOGIN_MULTIPLIERS,
    DEFAULT_LOGIN_MULTIPLIER,
)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves going up (2.5 -> 3, -2.5 -> -2), unlike round()"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _first_match(steps: Sequence[Threshold], amount: float, default: float) -> float:
    for step in steps:
        if amount >= step.minimum:
            return step.value
    return default


def clamp_status(value: float) -> float:
    return max(STATUS_MIN, min(STATUS_MAX, value))


def calculate_streak_bonus(streak_days: int) -> int:
    """
    Bonus points for a streak.

    0 for the first day, then one point per extra day, capped at 10.
    """
    if streak_days < 2:
        return 0
    return min(streak_days - 1, STREAK_BONUS_CAP)


def calculate_status_increase(weekly_count: int) -> float:
    """
    Status increase from a week's activity count in one category.

    >=7 -> 3.0, >=5 -> 2.0, >=3 -> 1.0, >=1 -> 0.5, else 0
    """
    return _first_match(STATUS_INCREASE_STEPS, weekly_count, 0.0)


def get_age_coefficient(age: int) -> float:
    for entry in AGE_DECAY_COEFFICIENTS:
        if age <= entry.max_age:
            return entry.coefficient
    return ADULT_DECAY_COEFFICIENT


def calculate_decay(days_since_activity: int, age: int) -> float:
    """
    Status decay for a category left idle.

    Decay = AgeCoefficient x 0.1 + 0.05 x (days - 1)

    Older children decay faster; each extra idle day accelerates it.
    """
    if days_since_activity <= 0:
        return 0.0
    base_decay = get_age_coefficient(age) * DECAY_BASE_FACTOR
    acceleration = DECAY_ACCELERATION_PER_DAY * max(0, days_since_activity - 1)
    return base_decay + acceleration


def calculate_deviation_score(value: float, mean: float, std_dev: float) -> int:
    """Deviation score: (value - mean) / std_dev x 10 + 50, 50 when std_dev is 0"""
    if std_dev == 0:
        return DEFAULT_DEVIATION_SCORE
    return int(round_half_up((value - mean) / std_dev * 10 + 50))


def calculate_stars(deviation_score: float) -> int:
    return int(_first_match(STAR_THRESHOLDS, deviation_score, 1))


def calculate_character_type(avg_deviation_score: float) -> str:
    if avg_deviation_score >= 55:
        return CHARACTER_HERO
    if avg_deviation_score >= 45:
        return CHARACTER_NORMAL
    return CHARACTER_GANBARI


def calculate_trend(recent_change: float) -> str:
    if recent_change > TREND_THRESHOLD:
        return TREND_UP
    if recent_change < -TREND_THRESHOLD:
        return TREND_DOWN
    return TREND_STABLE


def calculate_level(avg_status: float) -> LevelTier:
    """
    Level tier for an average status.

    The average is clamped to [0, 100]; the highest tier whose floor is
    reached wins, so fractional values between tiers stay in the lower one.
    """
    clamped = clamp_status(avg_status)
    tier = LEVEL_TABLE[0]
    for entry in LEVEL_TABLE:
        if clamped >= entry.min_avg:
            tier = entry
    return tier


def calculate_exp_to_next_level(avg_status: float) -> float:
    """Status points still needed for the next tier (0 at max level)"""
    tier = calculate_level(avg_status)
    if tier.level >= MAX_LEVEL:
        return 0.0
    next_tier = LEVEL_TABLE[tier.level]
    return max(0.0, next_tier.min_avg - avg_status)


def calculate_evaluation_bonus(category_scores: Mapping[str, Mapping[str, float]]) -> int:
    """
    Weekly bonus for breadth of activity.

    Counts categories with at least one activity:
    >=5 -> 20, >=4 -> 10, >=3 -> 5, else 0
    """
    active_categories = sum(1 for score in category_scores.values() if score.get("count", 0) > 0)
    return int(_first_match(EVALUATION_BONUS_STEPS, active_categories, 0))


def draw_omikuji(rng: Optional[random.Random] = None) -> OmikujiRank:
    """
    Weighted random omikuji draw.

    Subtracts each rank's weight from a uniform sample until it drops to
    zero or below; falls back to the last rank on floating point rounding.
    """
    rng = rng or random
    total_weight = sum(rank.weight for rank in OMIKUJI_RANKS)
    remaining = rng.random() * total_weight

    for rank in OMIKUJI_RANKS:
        remaining -= rank.weight
        if remaining <= 0:
            return rank

    return OMIKUJI_RANKS[-1]


def get_login_multiplier(consecutive_days: int) -> float:
    """>=30 -> 3.0, >=14 -> 2.5, >=7 -> 2.0, >=3 -> 1.5, else 1.0"""
    return _first_match(LOGIN_MULTIPLIERS, consecutive_days, DEFAULT_LOGIN_MULTIPLIER)


def calculate_login_bonus_points(base_points: int, multiplier: float) -> int:
    """Final login bonus, floored (5 x 1.5 = 7)"""
    return math.floor(base_points * multiplier)
