"""
Calendar Aggregator

Builds the dense per-day heatmap series and the weekly tracker strip.
"""

from datetime import date, timedelta
from typing import Iterable, Optional
import logging

from habit_engine.config import DEFAULT_CATEGORY_COLOR, HEATMAP_WINDOW_DAYS
from habit_engine.exceptions import ValidationError
from habit_engine.models.calendar import CalendarDayAggregate, CategoryCompletionData, WeekDayStats
from habit_engine.models.habit import Habit, HabitCategory
from habit_engine.tracking.schedule import is_completed, is_scheduled
from habit_engine.utils.datetime_helpers import enumerate_days, today_in_timezone

logger = logging.getLogger(__name__)


def _percentage(part: int, whole: int) -> float:
    return (part / whole) * 100 if whole > 0 else 0.0


def _group_by_category(habits: Iterable[Habit]) -> dict[str, list[Habit]]:
    # Insertion order = first appearance of each category in habits
    grouped: dict[str, list[Habit]] = {}
    for habit in habits:
        grouped.setdefault(habit.category_id, []).append(habit)
    return grouped


def build_aggregates(
    habits: list[Habit],
    categories: list[HabitCategory],
    window_days: int = HEATMAP_WINDOW_DAYS,
    selected_category_id: Optional[str] = None,
    today: Optional[date] = None,
) -> list[CalendarDayAggregate]:
    """
    Aggregate scheduled vs completed habits for every day of a rolling window

    Args:
        habits: Habits to aggregate
        categories: Categories, used for colors
        window_days: Days before today to include (today is always included)
        selected_category_id: Restrict to one category
        today: Last day of the window (defaults to today)

    Returns:
        window_days + 1 entries, ascending and gapless. Categories with
        nothing scheduled on a day are left out of that day's per_category.

    Raises:
        ValidationError: If window_days is negative
    """
    if window_days < 0:
        raise ValidationError(
            message="Window must be zero or more days",
            field="window_days",
            value=window_days
        )

    end = today or today_in_timezone()
    start = end - timedelta(days=window_days)

    colors = {category.id: category.color for category in categories}

    if selected_category_id is not None:
        habits = [habit for habit in habits if habit.category_id == selected_category_id]
    habits_by_category = _group_by_category(habits)

    aggregates = []
    for day in enumerate_days(start, end):
        per_category = []
        for category_id, category_habits in habits_by_category.items():
            scheduled = [habit for habit in category_habits if is_scheduled(habit, day)]
            if not scheduled:
                continue
            completed_count = sum(1 for habit in scheduled if is_completed(habit, day))
            per_category.append(
                CategoryCompletionData(
                    category_id=category_id,
                    color=colors.get(category_id, DEFAULT_CATEGORY_COLOR),
                    scheduled_count=len(scheduled),
                    completed_count=completed_count,
                )
            )

        total_scheduled = sum(data.scheduled_count for data in per_category)
        total_completed = sum(data.completed_count for data in per_category)
        aggregates.append(
            CalendarDayAggregate(
                date=day,
                total_completed_count=total_completed,
                completion_percentage=_percentage(total_completed, total_scheduled),
                per_category=per_category,
            )
        )

    logger.debug(
        f"Built {len(aggregates)} calendar aggregates for {len(habits)} habits "
        f"({start.isoformat()}..{end.isoformat()})"
    )
    return aggregates


def weekly_tracker_stats(categories: list[HabitCategory], week_dates: list[date]) -> list[WeekDayStats]:
    """
    Per-day progress for the weekly tracker strip

    Counts every habit on every day regardless of its schedule.
    """
    habits = [habit for category in categories for habit in category.habits]
    stats = []
    for day in week_dates:
        completed_habits = sum(1 for habit in habits if is_completed(habit, day))
        stats.append(
            WeekDayStats(
                date=day,
                total_habits=len(habits),
                completed_habits=completed_habits,
                progress=_percentage(completed_habits, len(habits)),
            )
        )
    return stats
