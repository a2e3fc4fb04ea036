"""
HabitService - Session-scoped Habit Business Logic

Orchestrates the in-memory CompletionStore, the remote database mirror and
the durable local cache for one user session.

Write policy (optimistic, best-effort replication):
1. Apply the mutation to the in-memory tree (source of truth)
2. Mirror it to the remote database; failures are logged, never rolled back
3. Write the whole tree to the local cache
"""

import asyncio
import logging
from datetime import date, datetime
from typing import Any, Awaitable, Callable, Optional, Union
from pydantic import ValidationError as PydanticValidationError

from habit_engine.cache.local_cache import LocalCache
from habit_engine.config import HEATMAP_WINDOW_DAYS
from habit_engine.db import queries
from habit_engine.exceptions import UnauthenticatedError, ValidationError, wrap_external_exception
from habit_engine.models.calendar import CalendarDayAggregate, WeekDayStats
from habit_engine.models.habit import Habit, HabitCategory, HabitCompletion, HabitCreate, HabitUpdate
from habit_engine.models.session import UserSession
from habit_engine.models.summary import CompletionRecord, QuarterlySummary
from habit_engine.tracking import (
    CompletionStore,
    ToggleResult,
    build_aggregates,
    is_weekly_complete,
    quarterly_summary,
    weekly_tracker_stats,
)
from habit_engine.tracking.store import generate_id
from habit_engine.utils.datetime_helpers import (
    current_week_dates,
    parse_date_key,
    quarter_date_range,
    to_date_key,
    today_in_timezone,
    week_key,
)

logger = logging.getLogger(__name__)

# (local id, name, color) seeded for brand-new users
DEFAULT_CATEGORIES = (
    ("health", "Health", "#4ade80"),
    ("productivity", "Productivity", "#60a5fa"),
    ("personal", "Personal", "#f472b6"),
)


def default_categories() -> list[HabitCategory]:
    """Starter categories for a session with no stored data"""
    return [HabitCategory(id=cid, name=name, color=color) for cid, name, color in DEFAULT_CATEGORIES]


class HabitService:
    """
    Service for one user's habit data.

    Responsibilities:
    - Session start: load from remote (or local cache), run the weekly reset
    - Habit mutations with best-effort remote mirroring
    - Heatmap, weekly tracker, export and quarterly summary
    """

    def __init__(
        self,
        session: UserSession,
        local_cache: Optional[LocalCache] = None,
        store: Optional[CompletionStore] = None
    ):
        """
        Initialize HabitService.

        Args:
            session: Who is using the engine (anonymous sessions skip the remote)
            local_cache: Durable fallback cache (per-user cache by default)
            store: In-memory tree (empty by default, filled by start())
        """
        self.session = session
        self.cache = local_cache or LocalCache(session.cache_key)
        self.store = store or CompletionStore()
        self._mutation_lock = asyncio.Lock()
        self._weekly_reset_checked = False

    def today(self) -> date:
        """Local calendar day for this session"""
        return today_in_timezone(self.session.timezone)

    @property
    def categories(self) -> list[HabitCategory]:
        return self.store.snapshot()

    # ------------------------------------------------------------------
    # Session start
    # ------------------------------------------------------------------

    async def start(self) -> list[HabitCategory]:
        """Load data and run the weekly reset; call once per session"""
        await self.load()
        await self.run_weekly_reset_if_due()
        return self.categories

    async def load(self) -> list[HabitCategory]:
        """
        Fill the store from the best available source.

        Order: remote database (authenticated only), local cache, defaults.
        """
        categories = None

        if self.session.is_authenticated:
            try:
                categories = await queries.fetch_habit_categories(self.session.user_id)
                if not categories:
                    categories = await self._seed_remote_categories()
            except Exception as e:
                error = wrap_external_exception(
                    e, operation="fetch_habit_categories", user_id=self.session.user_id
                )
                logger.warning(
                    f"Remote load failed for user {self.session.user_id}, "
                    f"using local cache (request_id={error.request_id})"
                )
                categories = None

        if categories is None:
            categories = await self.cache.load_categories()
            if categories is not None:
                logger.info(f"Loaded {len(categories)} categories from local cache")

        if categories is None:
            categories = default_categories()
            logger.info("No stored habit data, starting with default categories")

        self.store.replace_all(categories)
        await self._save_local()
        return self.categories

    async def _seed_remote_categories(self) -> list[HabitCategory]:
        categories = [
            HabitCategory(id=generate_id(), name=name, color=color)
            for _, name, color in DEFAULT_CATEGORIES
        ]
        await queries.create_habit_categories(self.session.user_id, categories)
        logger.info(f"Seeded default categories for new user {self.session.user_id}")
        return categories

    async def run_weekly_reset_if_due(self) -> bool:
        """
        Clear this week's completions when a new week boundary is seen.

        Runs at most once per session. The marker is the date key of the
        current week's Sunday.

        Returns:
            True if completions were cleared
        """
        if self._weekly_reset_checked:
            return False
        self._weekly_reset_checked = True

        current_key = week_key(self.today())
        last_checked = await self.cache.get_last_week_checked()
        if last_checked == current_key:
            logger.debug(f"Weekly reset already done for week {current_key}")
            return False

        await self.clear_current_week_completions()
        try:
            await self.cache.set_last_week_checked(current_key)
        except OSError as e:
            logger.error(f"Failed to write weekly-reset marker: {e}", exc_info=True)
        logger.info(f"Weekly reset ran for week {current_key} (previous marker: {last_checked})")
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add_category(self, name: str, color: str) -> HabitCategory:
        """Create a new, empty category"""
        async with self._mutation_lock:
            category = self.store.add_category(name, color)
            await self._mirror("create_habit_category", queries.create_habit_category, category.model_copy(deep=True))
            await self._save_local()
        return category.model_copy(deep=True)

    async def add_habit(self, category_id: str, data: HabitCreate) -> Habit:
        """
        Add a habit to a category

        Raises:
            NotFoundError: If the category does not exist
        """
        async with self._mutation_lock:
            habit = self.store.add_habit(category_id, data)
            await self._mirror("create_habit", queries.create_habit, habit.model_copy(deep=True))
            await self._save_local()
        return habit.model_copy(deep=True)

    async def toggle_completion(self, habit_id: str, day: Union[date, datetime]) -> ToggleResult:
        """
        Toggle a habit's completion for a day

        Args:
            habit_id: Habit to toggle
            day: Day to toggle; datetimes are reduced to the session's local day

        Returns:
            ToggleResult, including whether the week is now fully completed

        Raises:
            NotFoundError: If the habit does not exist
        """
        local_day = parse_date_key(to_date_key(day, tz=self.session.timezone))

        async with self._mutation_lock:
            result = self.store.toggle_completion(habit_id, local_day, today=self.today())
            completion = HabitCompletion(date=local_day, completed=result.completed)
            await self._mirror("upsert_habit_completion", queries.upsert_habit_completion, habit_id, completion)
            await self._save_local()
        return result

    async def delete_habit(self, habit_id: str) -> Habit:
        """
        Delete a habit and all its completions

        Raises:
            NotFoundError: If the habit does not exist
        """
        async with self._mutation_lock:
            habit = self.store.delete_habit(habit_id)
            await self._mirror("delete_habit", queries.delete_habit, habit_id)
            await self._save_local()
        return habit

    async def update_habit(self, habit_id: str, update: Union[HabitUpdate, dict[str, Any]]) -> Habit:
        """
        Merge title and/or frequency into a habit

        Raises:
            NotFoundError: If the habit does not exist
            ValidationError: If the update names other fields (id, category_id)
                or carries an invalid title/frequency
        """
        if not isinstance(update, HabitUpdate):
            try:
                update = HabitUpdate.model_validate(update)
            except PydanticValidationError as e:
                first_error = e.errors()[0]
                raise ValidationError(
                    message=f"Invalid habit update: {first_error['msg']}",
                    field=".".join(str(part) for part in first_error["loc"]) or None,
                    value=first_error.get("input"),
                    user_id=self.session.user_id,
                    operation="update_habit",
                    cause=e
                ) from e

        async with self._mutation_lock:
            habit = self.store.update_habit(habit_id, update)
            await self._mirror("update_habit", queries.update_habit, habit_id, update)
            await self._save_local()
        return habit.model_copy(deep=True)

    async def clear_current_week_completions(self) -> int:
        """
        Delete every completion in the current Sunday-starting week

        Local only: the remote copy keeps its records.

        Returns:
            Number of completion records removed
        """
        async with self._mutation_lock:
            removed = self.store.clear_current_week_completions(today=self.today())
            await self._save_local()
        return removed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def heatmap(
        self,
        window_days: int = HEATMAP_WINDOW_DAYS,
        selected_category_id: Optional[str] = None
    ) -> list[CalendarDayAggregate]:
        """Per-day aggregates for the rolling heatmap window ending today"""
        return build_aggregates(
            self.store.all_habits(),
            self.store.categories,
            window_days=window_days,
            selected_category_id=selected_category_id,
            today=self.today(),
        )

    def weekly_tracker(self) -> list[WeekDayStats]:
        """Progress for each day of the current week"""
        return weekly_tracker_stats(self.store.categories, current_week_dates(today=self.today()))

    def is_weekly_complete(self, habit_id: str) -> bool:
        """
        Check if a habit is done on every scheduled day this week

        Raises:
            NotFoundError: If the habit does not exist
        """
        habit = self.store.find_habit(habit_id)
        return is_weekly_complete(habit, current_week_dates(today=self.today()))

    async def export_data(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> list[CompletionRecord]:
        """
        Completion records with habit/category metadata from the remote database

        Raises:
            UnauthenticatedError: If the session has no user
            RemoteUnavailableError: If the remote query fails
        """
        user_id = self._require_user("export_data")
        try:
            records = await queries.get_completion_records(user_id, start_date, end_date)
        except Exception as e:
            raise wrap_external_exception(
                e,
                operation="export_data",
                user_id=user_id,
                context={"start_date": str(start_date), "end_date": str(end_date)}
            ) from e
        logger.info(f"Exported {len(records)} completion records for user {user_id}")
        return records

    async def get_quarterly_summary(self, year: int, quarter: int) -> QuarterlySummary:
        """
        Completion statistics for a calendar quarter

        Raises:
            UnauthenticatedError: If the session has no user
            ValidationError: If quarter is not 1-4
            RemoteUnavailableError: If the remote query fails
        """
        self._require_user("get_quarterly_summary")
        start, end = quarter_date_range(year, quarter)
        records = await self.export_data(start, end)
        return quarterly_summary(records, year, quarter)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_user(self, operation: str) -> str:
        if not self.session.is_authenticated:
            raise UnauthenticatedError(
                message=f"User must be logged in to {operation.replace('_', ' ')}",
                operation=operation
            )
        return self.session.user_id

    async def _mirror(self, operation: str, query: Callable[..., Awaitable[Any]], *args: Any) -> bool:
        """
        Replicate a local mutation to the remote database.

        Returns:
            True if the remote write succeeded, False if skipped or failed
        """
        if not self.session.is_authenticated:
            return False
        try:
            await query(self.session.user_id, *args)
            return True
        except Exception as e:
            # Local state stays as applied
            error = wrap_external_exception(e, operation=operation, user_id=self.session.user_id)
            logger.warning(f"{operation} not mirrored remotely, kept locally (request_id={error.request_id})")
            return False

    async def _save_local(self) -> None:
        try:
            await self.cache.save_categories(self.store.snapshot())
        except OSError as e:
            logger.error(f"Failed to write local habit cache: {e}", exc_info=True)
