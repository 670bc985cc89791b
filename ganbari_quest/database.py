"""
Database engine and session factory.
"""
import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from ganbari_quest.constants import DATABASE_URL

logger = logging.getLogger("ganbari_quest.database")


def _create_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        # FastAPI serves requests from a thread pool
        connect_args["check_same_thread"] = False
        db_file = url.replace("sqlite:///", "", 1)
        if db_file and db_file != url and not db_file.startswith(":memory:"):
            Path(db_file).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args=connect_args)


engine = _create_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency yielding a session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables that do not exist yet"""
    from ganbari_quest import models  # noqa: F401  register models with Base

    Base.metadata.create_all(bind=engine)


def run_with_retry(db, operation, max_attempts: int = 3, label: str = "transaction"):
    """
    Run operation in the session's transaction and commit it.

    A concurrent write conflict (stale version or unique violation) rolls
    back and reruns the whole operation; any other database error rolls
    back and propagates. After max_attempts the conflict propagates too.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            result = operation()
            db.commit()
            return result
        except (StaleDataError, IntegrityError) as e:
            db.rollback()
            if attempt == max_attempts:
                logger.error(f"{label} failed after {attempt} attempts: {e}")
                raise
            logger.warning(f"{label} conflict (attempt {attempt}/{max_attempts}), retrying: {e}")
        except SQLAlchemyError:
            db.rollback()
            raise
