"""Tests for the weekly challenge and fasting score engine."""

import random
from datetime import date, datetime, timedelta, timezone

from fastwell.models.fasting import FastingSession, FastingStatus
from fastwell.services.scoring import (
    CHALLENGE_DEFINITION,
    SEVEN_DAY_BONUS_POINTS,
    compute_score,
    compute_weekly_challenges,
    consistency_sub_score,
    frequency_label,
    frequency_sub_score,
)


def full_week(reference, completed_fast, skip_index=None):
    """One fast per challenge slot, each meeting its goal exactly."""
    history = []
    for slot in CHALLENGE_DEFINITION:
        if slot.relative_day_index == skip_index:
            continue
        end = reference - timedelta(days=slot.relative_day_index, hours=1)
        history.append(completed_fast(end, int(slot.goal_hours * 60), slot.goal_hours))
    return history


class TestWeeklyChallenges:
    """Tests for compute_weekly_challenges."""

    def test_empty_history(self, reference_noon):
        """No fasts: every slot incomplete, no points, no bonus."""
        result = compute_weekly_challenges([], reference_noon)

        assert len(result.days) == 7
        assert all(not day.is_completed for day in result.days)
        assert result.points_from_days == 0
        assert result.total_points == 0
        assert result.bonus_awarded is False

    def test_slots_ordered_oldest_first(self, reference_noon):
        """Day 1 is six days ago and Day 7 is the reference day."""
        result = compute_weekly_challenges([], reference_noon)

        assert [d.relative_day_index for d in result.days] == [6, 5, 4, 3, 2, 1, 0]
        assert result.days[0].day_label == "Day 1"
        assert result.days[0].target_date == reference_noon.date() - timedelta(days=6)
        assert result.days[-1].target_date == reference_noon.date()
        assert [d.goal_hours for d in result.days] == [12, 12, 14, 14, 16, 16, 16]

    def test_full_week_awards_bonus(self, reference_noon, completed_fast):
        """Seven completed slots: 70 points plus the 50 point bonus."""
        history = full_week(reference_noon, completed_fast)
        result = compute_weekly_challenges(history, reference_noon)

        assert result.completed_count == 7
        assert result.points_from_days == 70
        assert result.bonus_awarded is True
        assert result.bonus_points == SEVEN_DAY_BONUS_POINTS
        assert result.total_points == 120

    def test_six_of_seven_keeps_points_without_bonus(self, reference_noon, completed_fast):
        """A missed slot withholds only the bonus."""
        history = full_week(reference_noon, completed_fast, skip_index=3)
        result = compute_weekly_challenges(history, reference_noon)

        assert result.completed_count == 6
        assert result.points_from_days == 60
        assert result.bonus_awarded is False
        assert result.bonus_points == 0
        assert result.total_points == 60

    def test_goal_boundary_is_inclusive(self, reference_noon, completed_fast):
        """Exactly the goal counts; one minute short does not."""
        end = reference_noon - timedelta(hours=1)
        exact = compute_weekly_challenges([completed_fast(end, 16 * 60)], reference_noon)
        short = compute_weekly_challenges([completed_fast(end, 16 * 60 - 1)], reference_noon)

        assert exact.days[-1].is_completed is True
        assert exact.days[-1].fast_duration_met == 960
        assert short.days[-1].is_completed is False

    def test_slot_goal_overrides_session_goal(self, reference_noon, completed_fast):
        """A 12 hour fast with a 20 hour personal goal still completes a 12 hour slot."""
        end = reference_noon - timedelta(days=6, hours=1)
        result = compute_weekly_challenges([completed_fast(end, 12 * 60, 20)], reference_noon)

        assert result.days[0].is_completed is True
        assert result.days[0].points_earned == 10

    def test_fast_counts_on_its_end_day(self, reference_noon, completed_fast):
        """A fast spanning midnight belongs to the day it ended."""
        end = reference_noon - timedelta(days=1, hours=4)  # 08:00 yesterday
        fast = completed_fast(end, 16 * 60)  # started 16:00 the day before
        result = compute_weekly_challenges([fast], reference_noon)

        by_index = {d.relative_day_index: d for d in result.days}
        assert by_index[1].is_completed is True
        assert by_index[2].is_completed is False

    def test_active_sessions_are_ignored(self, reference_noon):
        """Only completed sessions can fill a slot."""
        active = FastingSession(
            user_id="user-1",
            start_time=reference_noon - timedelta(hours=20),
            status=FastingStatus.ACTIVE,
        )
        result = compute_weekly_challenges([active], reference_noon)

        assert result.completed_count == 0

    def test_deterministic(self, reference_noon, completed_fast):
        """Same history and reference give the same result."""
        history = full_week(reference_noon, completed_fast, skip_index=0)

        first = compute_weekly_challenges(history, reference_noon)
        second = compute_weekly_challenges(history, reference_noon)

        assert first.to_dict() == second.to_dict()

    def test_completed_without_end_time_ignored(self, reference_noon):
        """A completed record missing its end time fills no slot."""
        session = FastingSession(
            user_id="user-1",
            start_time=reference_noon - timedelta(hours=17),
            end_time=None,
            status=FastingStatus.COMPLETED,
            actual_duration_minutes=960,
        )
        result = compute_weekly_challenges([session], reference_noon)

        assert result.completed_count == 0
        assert result.points_from_days == 0

    def test_same_day_fasts_count_once(self, reference_noon, completed_fast):
        """Two qualifying fasts on one day still earn that slot's points once."""
        history = [
            completed_fast(reference_noon - timedelta(hours=1), 16 * 60),
            completed_fast(reference_noon - timedelta(hours=3), 17 * 60),
        ]
        result = compute_weekly_challenges(history, reference_noon)

        assert result.completed_count == 1
        assert result.points_from_days == 10
        assert result.days[-1].fast_duration_met == 960


class TestScore:
    """Tests for compute_score."""

    def test_empty_history_floor(self):
        """No fasts: both sub-scores at the floor and no percentage."""
        reference = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        summary = compute_score([], reference)

        assert summary.frequency_sub_score == 1
        assert summary.consistency_sub_score == 1
        assert summary.total_score == 2
        assert summary.consistency_percentage is None
        assert summary.has_data is False

    def test_full_week_scenario(self, reference_noon, completed_fast):
        """Seven fasts, all goals met: frequency 2, consistency 5."""
        summary = compute_score(full_week(reference_noon, completed_fast), reference_noon)

        assert summary.fasts_last_30_days == 7
        assert summary.fasts_last_7_days == 7
        assert summary.frequency_sub_score == 2
        assert summary.consistency_sub_score == 5
        assert summary.consistency_percentage == 100
        assert summary.total_score == 7
        assert summary.frequency_label == "Excellent"

    def test_seven_day_window_is_half_open(self, completed_fast):
        """Exactly seven days ago is out; 6 days 23 hours ago is in."""
        reference = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

        boundary = compute_score([completed_fast(reference - timedelta(days=7), 600)], reference)
        inside = compute_score(
            [completed_fast(reference - timedelta(days=6, hours=23), 600)], reference
        )

        assert boundary.fasts_last_7_days == 0
        assert boundary.fasts_last_30_days == 1
        assert inside.fasts_last_7_days == 1

    def test_thirty_day_window(self, completed_fast):
        """Fasts that ended 30 or more days ago do not count."""
        reference = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        history = [
            completed_fast(reference - timedelta(days=30), 600, 10),
            completed_fast(reference - timedelta(days=29, hours=23), 600, 10),
        ]
        summary = compute_score(history, reference)

        assert summary.fasts_last_30_days == 1

    def test_fasts_without_goals_get_fixed_consistency(self, completed_fast):
        """Recent fasts but none with a goal: consistency is 2."""
        reference = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        history = [completed_fast(reference - timedelta(days=d, hours=2), 600) for d in range(3)]
        summary = compute_score(history, reference)

        assert summary.consistency_sub_score == 2
        assert summary.consistency_percentage is None
        assert summary.frequency_sub_score == 1
        assert summary.total_score == 3

    def test_consistency_ratio(self, completed_fast):
        """Three of four goals met is 75%, which scores 3."""
        reference = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)
        history = [
            completed_fast(reference - timedelta(days=1), 16 * 60, 16),
            completed_fast(reference - timedelta(days=2), 16 * 60, 16),
            completed_fast(reference - timedelta(days=3), 16 * 60, 16),
            completed_fast(reference - timedelta(days=4), 15 * 60, 16),
        ]
        summary = compute_score(history, reference)

        assert summary.consistency_percentage == 75
        assert summary.consistency_sub_score == 3

    def test_total_stays_in_range_for_random_histories(self, completed_fast):
        """Totals are always between 1 and 10."""
        rng = random.Random(1234)
        reference = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)

        for _ in range(200):
            history = [
                completed_fast(
                    reference - timedelta(minutes=rng.randint(0, 60 * 24 * 45)),
                    rng.randint(0, 72 * 60),
                    rng.choice([None, 12, 16, 18, 24]),
                )
                for _ in range(rng.randint(0, 40))
            ]
            summary = compute_score(history, reference)
            assert 1 <= summary.total_score <= 10
            assert 1 <= summary.frequency_sub_score <= 5
            assert 1 <= summary.consistency_sub_score <= 5

    def test_completed_without_end_time_not_counted(self, reference_noon):
        """A completed record missing its end time is outside both windows."""
        session = FastingSession(
            user_id="user-1",
            start_time=reference_noon - timedelta(hours=17),
            end_time=None,
            status=FastingStatus.COMPLETED,
            goal_duration_hours=16,
            actual_duration_minutes=960,
        )
        summary = compute_score([session], reference_noon)

        assert summary.fasts_last_7_days == 0
        assert summary.fasts_last_30_days == 0
        assert summary.has_data is False

    def test_date_reference_means_end_of_day(self, completed_fast):
        """A calendar day is scored as of the following local midnight."""
        history = [
            completed_fast(datetime(2024, 6, 15, 20, 0), 16 * 60, 16),
            completed_fast(datetime(2024, 6, 9, 0, 0), 16 * 60, 16),
        ]
        summary = compute_score(history, date(2024, 6, 15))

        assert summary.fasts_last_7_days == 1
        assert summary.fasts_last_30_days == 2
        assert summary == compute_score(history, datetime(2024, 6, 16, 0, 0))


class TestThresholds:
    """Tests for the sub-score lookup tables."""

    def test_frequency_thresholds(self):
        assert frequency_sub_score(0) == 1
        assert frequency_sub_score(4) == 1
        assert frequency_sub_score(5) == 2
        assert frequency_sub_score(10) == 3
        assert frequency_sub_score(15) == 4
        assert frequency_sub_score(20) == 5
        assert frequency_sub_score(31) == 5

    def test_consistency_thresholds(self):
        assert consistency_sub_score(0.0) == 1
        assert consistency_sub_score(0.39) == 1
        assert consistency_sub_score(0.4) == 2
        assert consistency_sub_score(0.6) == 3
        assert consistency_sub_score(0.8) == 4
        assert consistency_sub_score(0.95) == 5

    def test_frequency_labels(self):
        assert frequency_label(0) == "Low"
        assert frequency_label(1) == "Low"
        assert frequency_label(2) == "Medium"
        assert frequency_label(4) == "High"
        assert frequency_label(6) == "Excellent"
