from fastapi import FastAPI, Depends, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
import os
from pathlib import Path

from ganbari_quest.database import get_db, init_db
from ganbari_quest.errors import ServiceError, not_found
from ganbari_quest.schemas import (
    ChildResponse,
    ActivityCreate, ActivityUpdate, ActivityVisibilityUpdate, ActivityResponse,
    RecordActivityRequest, RecordActivityResult, CancelActivityResult, ActivityLogsResponse,
    PointBalance, PointHistoryResponse, ConvertPointsRequest, ConvertResult,
    ChildStatusResponse, StatusUpdateRequest, StatusResponse,
    EvaluationResult, EvaluationResponse, DecayResult,
    LoginBonusStatus, ClaimResult, PERIOD_PATTERN
)
from ganbari_quest.repositories.child_repository import ChildRepository
from ganbari_quest.services.activity_log_service import ActivityLogService
from ganbari_quest.services.activity_service import ActivityService
from ganbari_quest.services.decay_service import DecayService
from ganbari_quest.services.evaluation_service import EvaluationService
from ganbari_quest.services.login_bonus_service import LoginBonusService
from ganbari_quest.services.point_service import PointService
from ganbari_quest.services.status_service import StatusService
from ganbari_quest.services.scheduler_service import start_scheduler, stop_scheduler
from ganbari_quest.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV, SCHEDULER_ENABLED, DEFAULT_HISTORY_LIMIT,
    CORS_ALLOWED_ORIGINS
)

LOG_DIR = os.getenv("GANBARI_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("GANBARI_LOG_FILE", "app.log")

try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path, encoding="utf-8"),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("ganbari_quest")

app = FastAPI(
    title="Ganbari Quest API",
    description="Household activity tracker with points, statuses and daily login bonuses",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def unwrap(result):
    """Turn a tagged service failure into an HTTP error"""
    if isinstance(result, ServiceError):
        raise HTTPException(
            status_code=result.status_code,
            detail={"code": result.error.value, "message": result.message}
        )
    return result


@app.on_event("startup")
async def startup_event():
    init_db()
    logger.info(f"Ganbari Quest API started. Logging to: {log_path}")
    if SCHEDULER_ENABLED:
        start_scheduler()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Ganbari Quest API")
    stop_scheduler()


@app.get("/")
async def root():
    return {"message": "Ganbari Quest API", "status": "active"}


# Children
@app.get("/api/v1/children", response_model=List[ChildResponse])
def list_children(db: Session = Depends(get_db)):
    return ChildRepository.get_all(db)


@app.get("/api/v1/children/{child_id}", response_model=ChildResponse)
def get_child(child_id: int, db: Session = Depends(get_db)):
    return unwrap(ChildRepository.get_by_id(db, child_id) or not_found("child"))


# Status
@app.get("/api/v1/children/{child_id}/status", response_model=ChildStatusResponse)
def get_child_status(child_id: int, db: Session = Depends(get_db)):
    return unwrap(StatusService(db).get_child_status(child_id))


@app.post("/api/v1/children/{child_id}/status", response_model=StatusResponse)
def update_status(child_id: int, data: StatusUpdateRequest, db: Session = Depends(get_db)):
    """Apply a manual status delta (clamped to 0-100)"""
    return unwrap(StatusService(db).apply_change(
        child_id, data.category, data.change_amount, data.change_type
    ))


@app.get("/api/v1/children/{child_id}/evaluations", response_model=List[EvaluationResponse])
def get_evaluations(child_id: int, limit: int = Query(10, ge=1, le=52), db: Session = Depends(get_db)):
    return unwrap(EvaluationService(db).get_evaluations(child_id, limit))


# Activities
@app.get("/api/v1/activities", response_model=List[ActivityResponse])
def list_activities(
    category: Optional[str] = None,
    child_id: Optional[int] = None,
    include_hidden: bool = False,
    db: Session = Depends(get_db)
):
    return unwrap(ActivityService(db).list_activities(category, child_id, include_hidden))


@app.post("/api/v1/activities", response_model=ActivityResponse, status_code=status.HTTP_201_CREATED)
def create_activity(data: ActivityCreate, db: Session = Depends(get_db)):
    return ActivityService(db).create_activity(data)


@app.get("/api/v1/activities/{activity_id}", response_model=ActivityResponse)
def get_activity(activity_id: int, db: Session = Depends(get_db)):
    return unwrap(ActivityService(db).get_activity(activity_id))


@app.put("/api/v1/activities/{activity_id}", response_model=ActivityResponse)
def update_activity(activity_id: int, data: ActivityUpdate, db: Session = Depends(get_db)):
    return unwrap(ActivityService(db).update_activity(activity_id, data))


@app.patch("/api/v1/activities/{activity_id}/visibility", response_model=ActivityResponse)
def set_activity_visibility(activity_id: int, data: ActivityVisibilityUpdate, db: Session = Depends(get_db)):
    return unwrap(ActivityService(db).set_visibility(activity_id, data.is_visible))


# Activity logs
@app.post("/api/v1/activity-logs", response_model=RecordActivityResult, status_code=status.HTTP_201_CREATED)
def record_activity(data: RecordActivityRequest, db: Session = Depends(get_db)):
    return unwrap(ActivityLogService(db).record_activity(data.child_id, data.activity_id))


@app.delete("/api/v1/activity-logs/{log_id}", response_model=CancelActivityResult)
def cancel_activity_log(log_id: int, db: Session = Depends(get_db)):
    """Cancel a record within a few seconds of recording it"""
    return unwrap(ActivityLogService(db).cancel_activity_log(log_id))


@app.get("/api/v1/children/{child_id}/activity-logs", response_model=ActivityLogsResponse)
def get_activity_logs(
    child_id: int,
    date_from: Optional[date] = Query(None, alias="from"),
    date_to: Optional[date] = Query(None, alias="to"),
    period: Optional[str] = Query(None, pattern=PERIOD_PATTERN),
    db: Session = Depends(get_db)
):
    return unwrap(ActivityLogService(db).get_activity_logs(child_id, date_from, date_to, period))


@app.get("/api/v1/children/{child_id}/activity-logs/today", response_model=List[int])
def get_today_recorded_activity_ids(child_id: int, db: Session = Depends(get_db)):
    return unwrap(ActivityLogService(db).get_today_recorded_activity_ids(child_id))


# Points
@app.get("/api/v1/children/{child_id}/points", response_model=PointBalance)
def get_point_balance(child_id: int, db: Session = Depends(get_db)):
    return unwrap(PointService(db).get_point_balance(child_id))


@app.get("/api/v1/children/{child_id}/points/history", response_model=PointHistoryResponse)
def get_point_history(
    child_id: int,
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    return unwrap(PointService(db).get_point_history(child_id, limit, offset))


@app.post("/api/v1/points/convert", response_model=ConvertResult)
def convert_points(data: ConvertPointsRequest, db: Session = Depends(get_db)):
    return unwrap(PointService(db).convert_points(data.child_id, data.amount))


# Login bonus
@app.get("/api/v1/children/{child_id}/login-bonus", response_model=LoginBonusStatus)
def get_login_bonus_status(child_id: int, db: Session = Depends(get_db)):
    return unwrap(LoginBonusService(db).get_login_bonus_status(child_id))


@app.post("/api/v1/children/{child_id}/login-bonus/claim", response_model=ClaimResult)
def claim_login_bonus(child_id: int, db: Session = Depends(get_db)):
    return unwrap(LoginBonusService(db).claim_login_bonus(child_id))


# Batch jobs (normally run by the scheduler)
@app.post("/api/v1/admin/weekly-evaluation", response_model=List[EvaluationResult])
def run_weekly_evaluation(target_date: Optional[date] = None, db: Session = Depends(get_db)):
    results = EvaluationService(db).run_weekly_evaluation(target_date)
    return [r for r in results if not isinstance(r, ServiceError)]


@app.post("/api/v1/admin/daily-decay", response_model=List[DecayResult])
def run_daily_decay(target_date: Optional[date] = None, db: Session = Depends(get_db)):
    return DecayService(db).run_daily_decay(target_date)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("ganbari_quest.main:app", host="0.0.0.0", port=8000, reload=False)
