"""
Schedule Evaluator

Decides whether a habit is due on a calendar day and whether it was done.
An unrecognized frequency is a programming error and is always raised,
never treated as "not due".
"""

from datetime import date
from typing import Iterable
import logging

from habit_engine.exceptions import InvalidFrequencyError
from habit_engine.models.habit import CustomFrequency, DailyFrequency, Habit
from habit_engine.utils.datetime_helpers import sunday_weekday, to_date_key

logger = logging.getLogger(__name__)


def is_scheduled(habit: Habit, day: date) -> bool:
    """
    Check if a habit is due on a day

    Args:
        habit: Habit to evaluate
        day: Calendar day

    Returns:
        True for daily habits; for custom habits, True iff the day's
        weekday (0 = Sunday) is one of the selected days

    Raises:
        InvalidFrequencyError: If the habit's frequency kind is unknown
    """
    frequency = habit.frequency

    if isinstance(frequency, DailyFrequency):
        return True
    if isinstance(frequency, CustomFrequency):
        return sunday_weekday(day) in frequency.specific_days

    raise InvalidFrequencyError(
        message=f"Unrecognized frequency for habit '{habit.id}'",
        frequency=frequency,
        operation="is_scheduled"
    )


def is_completed(habit: Habit, day: date) -> bool:
    """Check if a habit has a completed record for a day (absent = not completed)"""
    completion = habit.find_completion(to_date_key(day))
    return completion is not None and completion.completed


def scheduled_days(habit: Habit, days: Iterable[date]) -> list[date]:
    """Subset of days on which the habit is due"""
    return [day for day in days if is_scheduled(habit, day)]


def is_weekly_complete(habit: Habit, week_dates: Iterable[date]) -> bool:
    """
    Check if every scheduled day of a week is completed

    A habit with no scheduled day in the week is never weekly-complete.

    Args:
        habit: Habit to evaluate
        week_dates: The seven dates of the week

    Returns:
        True if the habit is due at least once and done on every due day
    """
    due = scheduled_days(habit, week_dates)
    return bool(due) and all(is_completed(habit, day) for day in due)
