"""
Tagged business failures.
Services return a ServiceError instead of raising for expected conditions;
storage errors are not represented here and propagate as-is.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    ALREADY_RECORDED = "ALREADY_RECORDED"
    CANCEL_EXPIRED = "CANCEL_EXPIRED"
    ALREADY_CLAIMED = "ALREADY_CLAIMED"
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"


# HTTP status for each failure
STATUS_MAP = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ALREADY_RECORDED: 409,
    ErrorCode.ALREADY_CLAIMED: 409,
    ErrorCode.CANCEL_EXPIRED: 400,
    ErrorCode.INSUFFICIENT_POINTS: 400,
}

_TARGET_MESSAGES = {
    "child": "こどもがみつかりません",
    "activity": "かつどうがみつかりません",
    "log": "きろくがみつかりません",
}


class ServiceError(BaseModel):
    error: ErrorCode
    message: str
    target: Optional[str] = None

    @property
    def status_code(self) -> int:
        return STATUS_MAP[self.error]


def not_found(target: str) -> ServiceError:
    return ServiceError(
        error=ErrorCode.NOT_FOUND,
        message=_TARGET_MESSAGES.get(target, "みつかりませんでした"),
        target=target,
    )


def already_recorded() -> ServiceError:
    return ServiceError(error=ErrorCode.ALREADY_RECORDED, message="きょうはもうやったよ！")


def cancel_expired() -> ServiceError:
    return ServiceError(error=ErrorCode.CANCEL_EXPIRED, message="もうとりけせないよ")


def already_claimed() -> ServiceError:
    return ServiceError(error=ErrorCode.ALREADY_CLAIMED, message="きょうのボーナスはもうもらったよ！")


def insufficient_points() -> ServiceError:
    return ServiceError(error=ErrorCode.INSUFFICIENT_POINTS, message="ポイントがたりません")
