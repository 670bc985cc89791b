"""
Tests for DecayService.
"""
import pytest
from datetime import date, timedelta

from ganbari_quest.models import Child, Status, StatusHistory
from ganbari_quest.services.decay_service import DecayService
from ganbari_quest.tests.conftest import add_activity_log, set_status


def _value(db, child_id, category):
    status = db.query(Status).filter(
        Status.child_id == child_id, Status.category == category
    ).one()
    return status.value


class TestDailyDecay:
    """Tests for run_daily_decay"""

    def test_decay_by_idle_days(self, db_session, clock, child, activities, today):
        """Yesterday -> 0.03, three days ago -> 0.13 for a 4 year old"""
        add_activity_log(db_session, child.id, activities["physical"].id, today - timedelta(days=1))
        add_activity_log(db_session, child.id, activities["learning"].id, today - timedelta(days=3))
        set_status(db_session, child.id, "physical", 30)
        set_status(db_session, child.id, "learning", 20)

        results = DecayService(db_session, clock).run_daily_decay()

        decays = {d.category: d.amount for d in results[0].decays}
        assert decays == pytest.approx({"physical": 0.03, "learning": 0.13})
        assert _value(db_session, child.id, "physical") == pytest.approx(29.97)
        assert _value(db_session, child.id, "learning") == pytest.approx(19.87)

    def test_skips_categories_without_activity(self, db_session, clock, child):
        set_status(db_session, child.id, "social", 25)

        results = DecayService(db_session, clock).run_daily_decay()

        assert results[0].decays == []
        assert _value(db_session, child.id, "social") == 25

    def test_no_decay_for_activity_today(self, db_session, clock, child, activities, today):
        add_activity_log(db_session, child.id, activities["creative"].id, today)

        results = DecayService(db_session, clock).run_daily_decay()

        assert results[0].decays == []

    def test_only_latest_activity_counts(self, db_session, clock, child, activities, today):
        activity_id = activities["physical"].id
        add_activity_log(db_session, child.id, activity_id, today - timedelta(days=10))
        add_activity_log(db_session, child.id, activity_id, today - timedelta(days=1))

        results = DecayService(db_session, clock).run_daily_decay()

        assert results[0].decays[0].amount == pytest.approx(0.03)

    def test_cancelled_activity_ignored(self, db_session, clock, child, activities, yesterday):
        add_activity_log(db_session, child.id, activities["physical"].id, yesterday, cancelled=True)

        results = DecayService(db_session, clock).run_daily_decay()

        assert results[0].decays == []

    def test_explicit_target_date(self, db_session, clock, child, activities):
        add_activity_log(db_session, child.id, activities["physical"].id, date(2026, 1, 1))

        results = DecayService(db_session, clock).run_daily_decay(date(2026, 1, 6))

        # 0.03 + 0.05 x 4
        assert results[0].decays[0].amount == pytest.approx(0.23)

    def test_older_child_decays_faster(self, db_session, clock, activities, yesterday):
        teen = Child(nickname="おにいちゃん", age=15)
        db_session.add(teen)
        db_session.commit()
        add_activity_log(db_session, teen.id, activities["learning"].id, yesterday)

        results = DecayService(db_session, clock).run_daily_decay()

        assert results[0].decays[0].amount == pytest.approx(0.07)

    def test_repeated_runs_reapply(self, db_session, clock, child, activities, yesterday):
        """No per-day guard: each run decays again"""
        add_activity_log(db_session, child.id, activities["physical"].id, yesterday)
        set_status(db_session, child.id, "physical", 10)
        service = DecayService(db_session, clock)

        service.run_daily_decay()
        service.run_daily_decay()

        assert _value(db_session, child.id, "physical") == pytest.approx(9.94)
        assert db_session.query(StatusHistory).filter(
            StatusHistory.change_type == "daily_decay"
        ).count() == 2

    def test_status_never_negative(self, db_session, clock, child, activities, today):
        add_activity_log(db_session, child.id, activities["social"].id, today - timedelta(days=30))

        DecayService(db_session, clock).run_daily_decay()

        assert _value(db_session, child.id, "social") == 0

    def test_every_child_gets_a_result(self, db_session, clock, child):
        db_session.add(Child(nickname="いもうと", age=2))
        db_session.commit()

        results = DecayService(db_session, clock).run_daily_decay()

        assert len(results) == 2
