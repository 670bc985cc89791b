"""
Tests for the scoring rules.

Tests cover:
1. Streak bonus and weekly status increase
2. Decay by age and idle days
3. Deviation score, stars, character type and trend
4. Level lookup and exp to next level
5. Weekly evaluation bonus
6. Omikuji draw and login multiplier
"""
import pytest
import random
from collections import Counter

from ganbari_quest.constants import OMIKUJI_RANKS, LEVEL_TABLE
from ganbari_quest.services import scoring_rules


class TestStreakBonus:
    """Tests for calculate_streak_bonus"""

    @pytest.mark.parametrize("days,expected", [
        (0, 0), (1, 0), (2, 1), (5, 4), (11, 10), (20, 10), (100, 10),
    ])
    def test_streak_bonus_table(self, days, expected):
        """One point per day after the first, capped at 10"""
        assert scoring_rules.calculate_streak_bonus(days) == expected


class TestStatusIncrease:
    """Tests for calculate_status_increase"""

    @pytest.mark.parametrize("count,expected", [
        (0, 0.0), (1, 0.5), (2, 0.5), (3, 1.0), (4, 1.0), (5, 2.0), (6, 2.0), (7, 3.0), (20, 3.0),
    ])
    def test_step_function(self, count, expected):
        assert scoring_rules.calculate_status_increase(count) == expected


class TestDecay:
    """Tests for calculate_decay and the age coefficient"""

    def test_one_idle_day_for_preschooler(self):
        """Age 4 decays 0.3 x 0.1 on the first idle day"""
        assert scoring_rules.calculate_decay(1, 4) == pytest.approx(0.03)

    def test_acceleration_per_extra_day(self):
        assert scoring_rules.calculate_decay(3, 4) == pytest.approx(0.13)

    def test_teenager_decays_faster(self):
        assert scoring_rules.calculate_decay(5, 15) == pytest.approx(0.27)

    @pytest.mark.parametrize("days", [0, -1, -10])
    def test_no_decay_without_elapsed_days(self, days):
        assert scoring_rules.calculate_decay(days, 4) == 0

    @pytest.mark.parametrize("age,expected", [
        (0, 0.3), (6, 0.3), (7, 0.5), (12, 0.5), (13, 0.7), (18, 0.7), (19, 0.9), (40, 0.9),
    ])
    def test_age_coefficient_bands(self, age, expected):
        assert scoring_rules.get_age_coefficient(age) == expected

    def test_decay_grows_with_idle_days(self):
        values = [scoring_rules.calculate_decay(d, 8) for d in range(1, 15)]
        assert values == sorted(values)


class TestDeviationAndStars:
    """Tests for deviation score, stars, character type and trend"""

    def test_deviation_two_std_devs_above_mean(self):
        assert scoring_rules.calculate_deviation_score(70, 50, 10) == 70

    @pytest.mark.parametrize("value", [0, 37.5, 50, 100])
    def test_zero_std_dev_is_neutral(self, value):
        assert scoring_rules.calculate_deviation_score(value, 50, 0) == 50

    def test_deviation_rounds_half_up(self):
        """52.5 -> 53 and 42.5 -> 43, where round() would give 52 and 42"""
        assert scoring_rules.calculate_deviation_score(31.25, 30, 10) == 51
        assert scoring_rules.calculate_deviation_score(32.5, 30, 10) == 53
        assert scoring_rules.calculate_deviation_score(22.5, 30, 10) == 43

    @pytest.mark.parametrize("deviation,stars", [
        (70, 5), (65, 5), (64, 4), (58, 4), (57, 3), (50, 3), (49, 2), (42, 2), (41, 1), (0, 1),
    ])
    def test_stars(self, deviation, stars):
        assert scoring_rules.calculate_stars(deviation) == stars

    @pytest.mark.parametrize("avg,expected", [
        (60, "hero"), (55, "hero"), (54.9, "normal"), (45, "normal"), (44.9, "ganbari"),
    ])
    def test_character_type(self, avg, expected):
        assert scoring_rules.calculate_character_type(avg) == expected

    @pytest.mark.parametrize("change,expected", [
        (3.0, "up"), (0.51, "up"), (0.5, "stable"), (0, "stable"), (-0.5, "stable"), (-0.51, "down"),
    ])
    def test_trend(self, change, expected):
        assert scoring_rules.calculate_trend(change) == expected


class TestLevel:
    """Tests for calculate_level and calculate_exp_to_next_level"""

    @pytest.mark.parametrize("avg,level", [
        (0, 1), (9, 1), (9.5, 1), (10, 2), (19.5, 2), (45, 5), (89.9, 9), (90, 10), (100, 10),
    ])
    def test_tier_lookup(self, avg, level):
        assert scoring_rules.calculate_level(avg).level == level

    def test_out_of_range_is_clamped(self):
        assert scoring_rules.calculate_level(-20).level == 1
        assert scoring_rules.calculate_level(150).level == 10

    def test_every_tier_has_a_title(self):
        titles = [tier.title for tier in LEVEL_TABLE]
        assert len(titles) == 10
        assert len(set(titles)) == 10
        assert scoring_rules.calculate_level(0).title == LEVEL_TABLE[0].title

    def test_exp_to_next_level(self):
        assert scoring_rules.calculate_exp_to_next_level(0) == 10
        assert scoring_rules.calculate_exp_to_next_level(9.5) == pytest.approx(0.5)
        assert scoring_rules.calculate_exp_to_next_level(42) == 8

    def test_no_exp_needed_at_max_level(self):
        assert scoring_rules.calculate_exp_to_next_level(95) == 0
        assert scoring_rules.calculate_exp_to_next_level(100) == 0


class TestEvaluationBonus:
    """Tests for calculate_evaluation_bonus"""

    @staticmethod
    def _scores(active):
        categories = ["physical", "learning", "daily_life", "social", "creative"]
        return {c: {"count": 2 if i < active else 0} for i, c in enumerate(categories)}

    @pytest.mark.parametrize("active,bonus", [(5, 20), (4, 10), (3, 5), (2, 0), (0, 0)])
    def test_bonus_by_active_categories(self, active, bonus):
        assert scoring_rules.calculate_evaluation_bonus(self._scores(active)) == bonus

    def test_empty_map(self):
        assert scoring_rules.calculate_evaluation_bonus({}) == 0


class _FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestOmikuji:
    """Tests for draw_omikuji"""

    def test_weights_sum_to_100(self):
        assert sum(rank.weight for rank in OMIKUJI_RANKS) == 100

    def test_frequencies_match_weights(self):
        """Over 10,000 draws each rank appears about weight/100 of the time"""
        rng = random.Random(42)
        draws = 10000
        counts = Counter(scoring_rules.draw_omikuji(rng).rank for _ in range(draws))

        assert set(counts) <= {rank.rank for rank in OMIKUJI_RANKS}
        for rank in OMIKUJI_RANKS:
            assert counts[rank.rank] / draws == pytest.approx(rank.weight / 100, abs=0.02)

    def test_lowest_sample_draws_first_rank(self):
        assert scoring_rules.draw_omikuji(_FixedRandom(0.0)).rank == "大大吉"

    def test_highest_sample_draws_last_rank(self):
        assert scoring_rules.draw_omikuji(_FixedRandom(0.999999)).rank == "末吉"

    def test_works_without_explicit_rng(self):
        assert scoring_rules.draw_omikuji() in OMIKUJI_RANKS


class TestLoginMultiplier:
    """Tests for get_login_multiplier and calculate_login_bonus_points"""

    @pytest.mark.parametrize("days,multiplier", [
        (1, 1.0), (2, 1.0), (3, 1.5), (6, 1.5), (7, 2.0), (13, 2.0), (14, 2.5), (29, 2.5), (30, 3.0), (365, 3.0),
    ])
    def test_thresholds(self, days, multiplier):
        assert scoring_rules.get_login_multiplier(days) == multiplier

    def test_monotonic(self):
        values = [scoring_rules.get_login_multiplier(d) for d in range(0, 60)]
        assert values == sorted(values)

    def test_points_are_floored(self):
        assert scoring_rules.calculate_login_bonus_points(5, 1.5) == 7
        assert scoring_rules.calculate_login_bonus_points(7, 2.5) == 17
        assert scoring_rules.calculate_login_bonus_points(30, 3.0) == 90


class TestRounding:
    """Tests for round_half_up and clamp_status"""

    def test_halves_go_up(self):
        assert scoring_rules.round_half_up(2.5) == 3
        assert scoring_rules.round_half_up(-2.5) == -2
        assert scoring_rules.round_half_up(1.25, 1) == pytest.approx(1.3)

    def test_clamp(self):
        assert scoring_rules.clamp_status(-3) == 0
        assert scoring_rules.clamp_status(42.5) == 42.5
        assert scoring_rules.clamp_status(103) == 100
