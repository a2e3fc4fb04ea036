"""Unit tests for Schedule Evaluator (habit_engine/tracking/schedule.py)"""
import pytest
from datetime import date, timedelta
from types import SimpleNamespace

from habit_engine.exceptions import InvalidFrequencyError
from habit_engine.models.habit import Habit
from habit_engine.tracking.schedule import (
    is_scheduled,
    is_completed,
    scheduled_days,
    is_weekly_complete,
)
from habit_engine.utils.datetime_helpers import enumerate_days, sunday_weekday


# ============================================================================
# is_scheduled Tests
# ============================================================================

def test_daily_habit_is_always_scheduled(habit_factory):
    """Test daily habits are due on every day of a long range"""
    habit = habit_factory()
    days = enumerate_days(date(2024, 1, 1), date(2024, 12, 31))

    assert all(is_scheduled(habit, day) for day in days)


def test_custom_habit_due_only_on_selected_weekdays(habit_factory):
    """Test Mon/Wed/Fri habit over two full weeks"""
    habit = habit_factory(days=[1, 3, 5])

    for day in enumerate_days(date(2024, 1, 7), date(2024, 1, 20)):
        assert is_scheduled(habit, day) == (sunday_weekday(day) in {1, 3, 5})


def test_custom_habit_explicit_days(habit_factory):
    habit = habit_factory(days=[1, 3, 5])

    assert is_scheduled(habit, date(2024, 1, 7)) is False   # Sunday
    assert is_scheduled(habit, date(2024, 1, 8)) is True    # Monday
    assert is_scheduled(habit, date(2024, 1, 9)) is False   # Tuesday
    assert is_scheduled(habit, date(2024, 1, 12)) is True   # Friday


def test_custom_sunday_is_zero(habit_factory):
    """Test weekday 0 means Sunday, not Monday"""
    habit = habit_factory(days=[0])

    assert is_scheduled(habit, date(2024, 1, 7)) is True
    assert is_scheduled(habit, date(2024, 1, 8)) is False


def test_custom_without_days_is_never_scheduled(habit_factory):
    habit = habit_factory(days=[])

    assert scheduled_days(habit, enumerate_days(date(2024, 1, 1), date(2024, 1, 31))) == []


def test_unknown_frequency_raises():
    """Test an unrecognized frequency is an error, not 'not due'"""
    habit = Habit.model_construct(
        id="broken",
        title="Broken",
        category_id="health",
        frequency=SimpleNamespace(type="monthly"),
        completions=[],
    )

    with pytest.raises(InvalidFrequencyError) as exc_info:
        is_scheduled(habit, date(2024, 1, 8))

    assert exc_info.value.operation == "is_scheduled"


# ============================================================================
# is_completed Tests
# ============================================================================

def test_is_completed_absent_record(habit_factory):
    habit = habit_factory()

    assert is_completed(habit, date(2024, 1, 8)) is False


def test_is_completed_true_record(habit_factory):
    habit = habit_factory(completed_on=[date(2024, 1, 8)])

    assert is_completed(habit, date(2024, 1, 8)) is True
    assert is_completed(habit, date(2024, 1, 9)) is False


def test_is_completed_false_record(habit_factory):
    """Test an uncompleted record counts as not done"""
    habit = habit_factory(incomplete_on=[date(2024, 1, 8)])

    assert is_completed(habit, date(2024, 1, 8)) is False


# ============================================================================
# is_weekly_complete Tests
# ============================================================================

def test_weekly_complete_mon_wed_fri(habit_factory, fixed_week):
    """Test Mon/Wed/Fri habit completed on exactly those days"""
    monday, wednesday, friday = fixed_week[1], fixed_week[3], fixed_week[5]
    habit = habit_factory(days=[1, 3, 5], completed_on=[monday, wednesday, friday])

    assert is_weekly_complete(habit, fixed_week) is True


def test_weekly_incomplete_when_due_day_missing(habit_factory, fixed_week):
    monday, friday = fixed_week[1], fixed_week[5]
    habit = habit_factory(days=[1, 3, 5], completed_on=[monday, friday])

    assert is_weekly_complete(habit, fixed_week) is False


def test_weekly_incomplete_when_due_day_unchecked(habit_factory, fixed_week):
    monday, wednesday, friday = fixed_week[1], fixed_week[3], fixed_week[5]
    habit = habit_factory(days=[1, 3, 5], completed_on=[monday, friday], incomplete_on=[wednesday])

    assert is_weekly_complete(habit, fixed_week) is False


def test_weekly_complete_ignores_off_days(habit_factory, fixed_week):
    """Test completions on unscheduled days neither help nor hurt"""
    monday, tuesday, wednesday, friday = fixed_week[1], fixed_week[2], fixed_week[3], fixed_week[5]
    habit = habit_factory(
        days=[1, 3, 5],
        completed_on=[monday, wednesday, friday],
        incomplete_on=[tuesday],
    )

    assert is_weekly_complete(habit, fixed_week) is True


def test_weekly_complete_daily_needs_all_seven(habit_factory, fixed_week):
    habit = habit_factory(completed_on=fixed_week[:6])
    assert is_weekly_complete(habit, fixed_week) is False

    habit = habit_factory(completed_on=fixed_week)
    assert is_weekly_complete(habit, fixed_week) is True


def test_weekly_complete_nothing_scheduled(habit_factory, fixed_week):
    """Test a habit with no due day in the week is never weekly-complete"""
    habit = habit_factory(days=[])

    assert is_weekly_complete(habit, fixed_week) is False


def test_weekly_complete_uses_only_given_week(habit_factory, fixed_week):
    previous_week = [day - timedelta(days=7) for day in fixed_week]
    habit = habit_factory(days=[1], completed_on=[previous_week[1]])

    assert is_weekly_complete(habit, previous_week) is True
    assert is_weekly_complete(habit, fixed_week) is False
