"""Durable local cache for the habit tree

Fallback of last resort when the remote database is unreachable or the
session is anonymous. Per-user directory under DATA_PATH:
- habit_categories.json: the whole category tree
- last_week_checked: date key of the last week boundary processed
"""
import logging
from pathlib import Path
from typing import Optional
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from habit_engine.config import DATA_PATH
from habit_engine.models.habit import HabitCategory

logger = logging.getLogger(__name__)

CATEGORIES_FILE = "habit_categories.json"
LAST_WEEK_CHECKED_FILE = "last_week_checked"

_categories_adapter = TypeAdapter(list[HabitCategory])


class LocalCache:
    """Key-value file store for one user's habit data"""

    def __init__(self, cache_key: str, data_path: Path = DATA_PATH):
        self.cache_key = cache_key
        self.data_path = data_path

    def get_user_dir(self) -> Path:
        """Get this user's cache directory"""
        return self.data_path / self.cache_key

    async def load_categories(self) -> Optional[list[HabitCategory]]:
        """
        Read the cached category tree

        Returns:
            Categories, or None when nothing usable is cached
        """
        filepath = self.get_user_dir() / CATEGORIES_FILE
        if not filepath.exists():
            return None
        try:
            return _categories_adapter.validate_json(filepath.read_bytes())
        except (OSError, PydanticValidationError) as e:
            logger.error(f"Ignoring unreadable habit cache {filepath}: {e}")
            return None

    async def save_categories(self, categories: list[HabitCategory]) -> None:
        """Write the whole category tree"""
        user_dir = self.get_user_dir()
        user_dir.mkdir(parents=True, exist_ok=True)
        filepath = user_dir / CATEGORIES_FILE
        # Atomic replace: readers never see a partial file
        tmp_path = filepath.with_suffix(".tmp")
        tmp_path.write_bytes(_categories_adapter.dump_json(categories, indent=2))
        tmp_path.replace(filepath)
        logger.debug(f"Cached {len(categories)} categories for {self.cache_key}")

    async def get_last_week_checked(self) -> Optional[str]:
        """Read the weekly-reset marker"""
        filepath = self.get_user_dir() / LAST_WEEK_CHECKED_FILE
        if not filepath.exists():
            return None
        try:
            return filepath.read_text().strip() or None
        except OSError as e:
            logger.error(f"Ignoring unreadable week marker {filepath}: {e}")
            return None

    async def set_last_week_checked(self, week_key: str) -> None:
        """Write the weekly-reset marker"""
        user_dir = self.get_user_dir()
        user_dir.mkdir(parents=True, exist_ok=True)
        (user_dir / LAST_WEEK_CHECKED_FILE).write_text(week_key)
        logger.info(f"Updated last week checked to {week_key} for {self.cache_key}")
