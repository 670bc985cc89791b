"""
Application constants.
Scoring tables are immutable and shared by every service; runtime settings come from the environment.
"""
import os
from typing import NamedTuple, Tuple


# === Runtime settings ===

DATABASE_URL = os.getenv("GANBARI_DATABASE_URL", "sqlite:///./data/ganbari-quest.db")

DEFAULT_LOG_DIRECTORY_PROD = "/var/log/ganbari-quest"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

SCHEDULER_ENABLED = os.getenv("GANBARI_SCHEDULER_ENABLED", "true").lower() in ("1", "true", "yes")
WEEKLY_EVALUATION_DAY = os.getenv("GANBARI_WEEKLY_EVALUATION_DAY", "mon")
WEEKLY_EVALUATION_TIME = os.getenv("GANBARI_WEEKLY_EVALUATION_TIME", "00:05")
DAILY_DECAY_TIME = os.getenv("GANBARI_DAILY_DECAY_TIME", "00:10")

# Frontend origins allowed to call the API (comma separated)
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("GANBARI_CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]


# === Categories ===

CATEGORY_PHYSICAL = "physical"
CATEGORY_LEARNING = "learning"
CATEGORY_DAILY_LIFE = "daily_life"
CATEGORY_SOCIAL = "social"
CATEGORY_CREATIVE = "creative"

CATEGORIES: Tuple[str, ...] = (
    CATEGORY_PHYSICAL,
    CATEGORY_LEARNING,
    CATEGORY_DAILY_LIFE,
    CATEGORY_SOCIAL,
    CATEGORY_CREATIVE,
)


# === Point ledger ===

LEDGER_TYPE_ACTIVITY = "activity"
LEDGER_TYPE_CANCEL = "cancel"
LEDGER_TYPE_WEEKLY_BONUS = "weekly_bonus"
LEDGER_TYPE_LOGIN_BONUS = "login_bonus"
LEDGER_TYPE_CONVERT = "convert"

POINTS_PER_CONVERT_UNIT = 500
DEFAULT_HISTORY_LIMIT = 50


# === Activity recording ===

CANCEL_WINDOW_MS = 5000
STREAK_BONUS_CAP = 10

PERIOD_WEEK = "week"
PERIOD_MONTH = "month"
PERIOD_YEAR = "year"


# === Status ===

STATUS_MIN = 0.0
STATUS_MAX = 100.0
DEFAULT_DEVIATION_SCORE = 50
STATUS_UPDATE_MAX_RETRIES = 3

CHANGE_TYPE_WEEKLY_EVALUATION = "weekly_evaluation"
CHANGE_TYPE_DAILY_DECAY = "daily_decay"
CHANGE_TYPE_MANUAL = "manual"

TREND_THRESHOLD = 0.5
TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"

CHARACTER_HERO = "hero"
CHARACTER_NORMAL = "normal"
CHARACTER_GANBARI = "ganbari"


class Threshold(NamedTuple):
    minimum: float
    value: float


# (weekly activity count, status increase), checked top-down
STATUS_INCREASE_STEPS: Tuple[Threshold, ...] = (
    Threshold(7, 3.0),
    Threshold(5, 2.0),
    Threshold(3, 1.0),
    Threshold(1, 0.5),
)

# (deviation score, stars)
STAR_THRESHOLDS: Tuple[Threshold, ...] = (
    Threshold(65, 5),
    Threshold(58, 4),
    Threshold(50, 3),
    Threshold(42, 2),
)

# (active categories, weekly bonus points)
EVALUATION_BONUS_STEPS: Tuple[Threshold, ...] = (
    Threshold(5, 20),
    Threshold(4, 10),
    Threshold(3, 5),
)


class AgeCoefficient(NamedTuple):
    max_age: int
    coefficient: float


AGE_DECAY_COEFFICIENTS: Tuple[AgeCoefficient, ...] = (
    AgeCoefficient(6, 0.3),
    AgeCoefficient(12, 0.5),
    AgeCoefficient(18, 0.7),
)
ADULT_DECAY_COEFFICIENT = 0.9
DECAY_BASE_FACTOR = 0.1
DECAY_ACCELERATION_PER_DAY = 0.05


class LevelTier(NamedTuple):
    level: int
    min_avg: float
    max_avg: float
    title: str


LEVEL_TABLE: Tuple[LevelTier, ...] = (
    LevelTier(1, 0, 9, "はじめのぼうけんしゃ"),
    LevelTier(2, 10, 19, "がんばりルーキー"),
    LevelTier(3, 20, 29, "わくわくファイター"),
    LevelTier(4, 30, 39, "つよつよチャレンジャー"),
    LevelTier(5, 40, 49, "きらきらヒーロー"),
    LevelTier(6, 50, 59, "すごうでアドベンチャー"),
    LevelTier(7, 60, 69, "そらとぶチャンピオン"),
    LevelTier(8, 70, 79, "きせきのマスター"),
    LevelTier(9, 80, 89, "せかいいちのつわもの"),
    LevelTier(10, 90, 100, "かみさまレベル"),
)
MAX_LEVEL = LEVEL_TABLE[-1].level


# === Login bonus ===

class OmikujiRank(NamedTuple):
    rank: str
    weight: int
    base_points: int


OMIKUJI_RANKS: Tuple[OmikujiRank, ...] = (
    OmikujiRank("大大吉", 1, 30),
    OmikujiRank("大吉", 5, 15),
    OmikujiRank("中吉", 15, 7),
    OmikujiRank("小吉", 25, 5),
    OmikujiRank("吉", 34, 3),
    OmikujiRank("末吉", 20, 2),
)

# (consecutive login days, multiplier), checked top-down
LOGIN_MULTIPLIERS: Tuple[Threshold, ...] = (
    Threshold(30, 3.0),
    Threshold(14, 2.5),
    Threshold(7, 2.0),
    Threshold(3, 1.5),
)
DEFAULT_LOGIN_MULTIPLIER = 1.0
LOGIN_STREAK_LOOKBACK = 60
