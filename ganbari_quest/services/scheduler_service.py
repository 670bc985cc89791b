"""
Background scheduler for the periodic scoring jobs
Handles:
- Weekly evaluation (status increases and breadth bonus)
- Daily status decay for idle categories
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ganbari_quest.constants import (
    WEEKLY_EVALUATION_DAY, WEEKLY_EVALUATION_TIME, DAILY_DECAY_TIME
)
from ganbari_quest.database import SessionLocal
from ganbari_quest.schemas import EvaluationResult
from ganbari_quest.services.decay_service import DecayService
from ganbari_quest.services.evaluation_service import EvaluationService

logger = logging.getLogger("ganbari_quest.scheduler")

# Create scheduler instance
scheduler = BackgroundScheduler()


def _parse_time(time_str: str):
    """'00:05' -> (0, 5)"""
    hour, minute = time_str.split(":")
    return int(hour), int(minute)


def run_weekly_evaluation():
    """Job: evaluate the previous week for every child"""
    db = SessionLocal()
    try:
        results = EvaluationService(db).run_weekly_evaluation()
        bonus = sum(r.bonus_points for r in results if isinstance(r, EvaluationResult))
        logger.info(f"Weekly evaluation job finished: {len(results)} children, {bonus}P bonus")
    except Exception:
        logger.exception("Scheduler Error (Weekly Evaluation)")
    finally:
        db.close()


def run_daily_decay():
    """Job: decay statuses of idle categories"""
    db = SessionLocal()
    try:
        results = DecayService(db).run_daily_decay()
        logger.info(f"Daily decay job finished: {len(results)} children")
    except Exception:
        logger.exception("Scheduler Error (Daily Decay)")
    finally:
        db.close()


def start_scheduler():
    """Start the background scheduler"""
    logger.info("Starting Ganbari Quest background scheduler")

    hour, minute = _parse_time(WEEKLY_EVALUATION_TIME)
    scheduler.add_job(
        run_weekly_evaluation,
        CronTrigger(day_of_week=WEEKLY_EVALUATION_DAY, hour=hour, minute=minute),
        id='weekly_evaluation',
        replace_existing=True
    )

    hour, minute = _parse_time(DAILY_DECAY_TIME)
    scheduler.add_job(
        run_daily_decay,
        CronTrigger(hour=hour, minute=minute),
        id='daily_decay',
        replace_existing=True
    )

    scheduler.start()
    logger.info("Background scheduler started successfully")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped")
