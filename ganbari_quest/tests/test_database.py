"""
Tests for run_with_retry.
"""
import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ganbari_quest.database import run_with_retry


class FakeSession:
    def __init__(self):
        self.commits = 0
        self.rollbacks = 0

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1


def _failing(errors, result="ok"):
    """Operation that raises the given errors in turn, then returns result"""
    pending = list(errors)

    def operation():
        if pending:
            raise pending.pop(0)
        return result

    return operation


class TestRunWithRetry:
    """Tests for run_with_retry"""

    def test_commits_on_success(self):
        db = FakeSession()

        assert run_with_retry(db, _failing([])) == "ok"
        assert db.commits == 1
        assert db.rollbacks == 0

    def test_retries_stale_version(self):
        db = FakeSession()

        result = run_with_retry(db, _failing([StaleDataError("version mismatch")]))

        assert result == "ok"
        assert db.rollbacks == 1
        assert db.commits == 1

    def test_retries_unique_violation(self):
        db = FakeSession()
        error = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))

        assert run_with_retry(db, _failing([error, error])) == "ok"
        assert db.rollbacks == 2

    def test_gives_up_after_max_attempts(self):
        db = FakeSession()
        errors = [StaleDataError("stale")] * 3

        with pytest.raises(StaleDataError):
            run_with_retry(db, _failing(errors), max_attempts=3)

        assert db.rollbacks == 3
        assert db.commits == 0

    def test_other_errors_propagate_immediately(self):
        db = FakeSession()
        error = OperationalError("SELECT", {}, Exception("database is locked"))

        with pytest.raises(OperationalError):
            run_with_retry(db, _failing([error]))

        assert db.rollbacks == 1
