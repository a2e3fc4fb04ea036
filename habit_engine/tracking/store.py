"""
Completion Store - in-memory category -> habit -> completion tree

Holds the session's source of truth and applies every mutation to it.
Persistence (remote mirror and local cache) is handled by HabitService;
this module never does I/O.

Invariants:
- A habit's category_id always matches its owning category
- At most one completion per (habit, date); toggles update in place
- Completions only disappear through habit deletion or the weekly clear
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional
from uuid import uuid4
import logging
import threading

from habit_engine.exceptions import NotFoundError
from habit_engine.models.habit import (
    Habit,
    HabitCategory,
    HabitCompletion,
    HabitCreate,
    HabitUpdate,
)
from habit_engine.tracking.schedule import is_weekly_complete
from habit_engine.utils.datetime_helpers import (
    DAYS_PER_WEEK,
    current_week_dates,
    parse_date_key,
    to_date_key,
    week_start,
)

logger = logging.getLogger(__name__)


@dataclass
class ToggleResult:
    """
    Outcome of toggle_completion

    Attributes:
        habit: Copy of the habit after the toggle
        date_key: Day that was toggled (YYYY-MM-DD)
        completed: New completion state for that day
        weekly_completion_reached: The toggle completed the day and every
            scheduled day of the current week is now done
    """
    habit: Habit
    date_key: str
    completed: bool
    weekly_completion_reached: bool


def generate_id() -> str:
    """Unique id for new habits and categories"""
    return uuid4().hex


class CompletionStore:
    """
    Mutable category tree with atomic mutation operations.

    Every read-modify-write runs under a re-entrant lock so two mutations of
    the same habit never interleave within one process.
    """

    def __init__(self, categories: Optional[list[HabitCategory]] = None):
        self._categories: list[HabitCategory] = list(categories or [])
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def categories(self) -> list[HabitCategory]:
        return self._categories

    def snapshot(self) -> list[HabitCategory]:
        """Deep copy of the tree, safe to serialize or hand to callers"""
        with self._lock:
            return [category.model_copy(deep=True) for category in self._categories]

    def all_habits(self) -> list[Habit]:
        return [habit for category in self._categories for habit in category.habits]

    def find_category(self, category_id: str) -> HabitCategory:
        for category in self._categories:
            if category.id == category_id:
                return category
        raise NotFoundError(
            message=f"Category '{category_id}' does not exist",
            record_type="Category",
            record_id=category_id,
            operation="find_category"
        )

    def find_habit(self, habit_id: str) -> Habit:
        return self._locate(habit_id)[1]

    def _locate(self, habit_id: str) -> tuple[HabitCategory, Habit]:
        """Owning category and habit for a habit id"""
        for category in self._categories:
            for habit in category.habits:
                if habit.id == habit_id:
                    return category, habit
        raise NotFoundError(
            message=f"Habit '{habit_id}' does not exist",
            record_type="Habit",
            record_id=habit_id,
            operation="find_habit"
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def replace_all(self, categories: list[HabitCategory]) -> None:
        """Swap in a freshly loaded tree"""
        with self._lock:
            self._categories = list(categories)

    def add_category(self, name: str, color: str, category_id: Optional[str] = None) -> HabitCategory:
        """Create an empty category"""
        with self._lock:
            category = HabitCategory(id=category_id or generate_id(), name=name, color=color)
            self._categories.append(category)
        logger.info(f"Added category '{name}' ({category.id})")
        return category

    def add_habit(self, category_id: str, data: HabitCreate, habit_id: Optional[str] = None) -> Habit:
        """
        Attach a new habit to a category

        Args:
            category_id: Owning category
            data: Title and frequency
            habit_id: Id to use (a new unique id when omitted)

        Returns:
            The created habit, with no completions

        Raises:
            NotFoundError: If the category does not exist
        """
        with self._lock:
            category = self.find_category(category_id)
            habit = Habit(
                id=habit_id or generate_id(),
                title=data.title,
                category_id=category.id,
                frequency=data.frequency.model_copy(deep=True),
            )
            category.habits.append(habit)
        logger.info(f"Added habit '{habit.title}' ({habit.id}) to category {category_id}")
        return habit

    def toggle_completion(self, habit_id: str, day: date, today: Optional[date] = None) -> ToggleResult:
        """
        Flip a habit's completion for a day

        The first toggle of a day creates a completed record; later toggles
        flip that record in place.

        Args:
            habit_id: Habit to toggle
            day: Calendar day being toggled
            today: Local day defining the current week (defaults to today)

        Returns:
            ToggleResult with the post-toggle state

        Raises:
            NotFoundError: If the habit does not exist
        """
        date_key = to_date_key(day)
        day = parse_date_key(date_key)

        with self._lock:
            habit = self.find_habit(habit_id)
            completion = habit.find_completion(date_key)
            if completion is not None:
                completion.completed = not completion.completed
            else:
                completion = HabitCompletion(date=day, completed=True)
                habit.completions.append(completion)

            weekly_completion_reached = (
                completion.completed
                and is_weekly_complete(habit, current_week_dates(today=today))
            )
            result = ToggleResult(
                habit=habit.model_copy(deep=True),
                date_key=date_key,
                completed=completion.completed,
                weekly_completion_reached=weekly_completion_reached,
            )

        logger.info(
            f"Toggled habit {habit_id} on {date_key}: completed={result.completed}, "
            f"weekly_complete={result.weekly_completion_reached}"
        )
        return result

    def delete_habit(self, habit_id: str) -> Habit:
        """
        Remove a habit together with all its completions

        Returns:
            The removed habit

        Raises:
            NotFoundError: If the habit does not exist
        """
        with self._lock:
            category, habit = self._locate(habit_id)
            category.habits = [h for h in category.habits if h.id != habit_id]
        logger.info(f"Deleted habit {habit_id} with {len(habit.completions)} completions")
        return habit

    def update_habit(self, habit_id: str, update: HabitUpdate) -> Habit:
        """
        Merge title and/or frequency into a habit

        Raises:
            NotFoundError: If the habit does not exist
        """
        with self._lock:
            habit = self.find_habit(habit_id)
            if update.title is not None:
                habit.title = update.title
            if update.frequency is not None:
                habit.frequency = update.frequency.model_copy(deep=True)
        logger.info(f"Updated habit {habit_id}: {sorted(update.model_dump(exclude_none=True))}")
        return habit

    def clear_current_week_completions(self, today: Optional[date] = None) -> int:
        """
        Delete every completion in the Sunday-starting week containing today

        Args:
            today: Local day defining the week (defaults to today)

        Returns:
            Number of completion records removed
        """
        start = week_start(today or current_week_dates()[0])
        end = start + timedelta(days=DAYS_PER_WEEK - 1)
        removed = 0

        with self._lock:
            for habit in self.all_habits():
                kept = [c for c in habit.completions if not start <= c.date <= end]
                removed += len(habit.completions) - len(kept)
                habit.completions = kept

        logger.info(f"Cleared {removed} completions for week starting {to_date_key(start)}")
        return removed
