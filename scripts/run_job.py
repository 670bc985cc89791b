#!/usr/bin/env python3
"""
Run a scoring batch job once, for use from an external cron.

Usage:
    python3 scripts/run_job.py weekly [--date YYYY-MM-DD]
    python3 scripts/run_job.py decay [--date YYYY-MM-DD]
"""

import argparse
import logging
import sys
from datetime import date

from ganbari_quest.database import SessionLocal, init_db
from ganbari_quest.errors import ServiceError
from ganbari_quest.services.decay_service import DecayService
from ganbari_quest.services.evaluation_service import EvaluationService

logger = logging.getLogger("ganbari_quest.jobs")


def run_weekly(db, target_date):
    for result in EvaluationService(db).run_weekly_evaluation(target_date):
        if isinstance(result, ServiceError):
            print(f"  ✗ {result.message}")
            continue
        state = "already evaluated" if result.already_evaluated else f"bonus {result.bonus_points}P"
        print(f"  ✓ child {result.child_id}: {result.week_start}..{result.week_end} {state}")


def run_decay(db, target_date):
    for result in DecayService(db).run_daily_decay(target_date):
        decays = ", ".join(f"{d.category} -{d.amount}" for d in result.decays) or "no decay"
        print(f"  ✓ child {result.child_id}: {decays}")


JOBS = {
    "weekly": run_weekly,
    "decay": run_decay,
}


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a Ganbari Quest batch job")
    parser.add_argument("job", choices=sorted(JOBS))
    parser.add_argument("--date", type=date.fromisoformat, default=None,
                        help="Reference date (default: today, UTC)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    init_db()
    db = SessionLocal()
    try:
        print(f"Running {args.job} job")
        JOBS[args.job](db, args.date)
    except Exception:
        logger.exception(f"Job {args.job} failed")
        return 1
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
