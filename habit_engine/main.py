"""Session bootstrap: load a user's habits, run the weekly reset, report the week"""
import logging
import asyncio
from habit_engine.config import validate_config, LOG_LEVEL, HABIT_USER_ID, TIMEZONE
from habit_engine.db.connection import db
from habit_engine.db.schema import init_habit_schema
from habit_engine.exceptions import HabitEngineError
from habit_engine.models.session import UserSession
from habit_engine.services import HabitService

# Configure logging
logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO)
)

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main application entry point"""
    session = UserSession(user_id=HABIT_USER_ID, timezone=TIMEZONE)
    try:
        # Validate configuration
        logger.info("Validating configuration...")
        validate_config()

        if session.is_authenticated:
            logger.info("Initializing database connection pool...")
            try:
                await db.init_pool()
                await init_habit_schema()
            except Exception as e:
                # Session continues on the local cache
                logger.warning(f"Remote database unavailable: {e}")

        service = HabitService(session)
        categories = await service.start()
        habit_count = sum(len(category.habits) for category in categories)
        logger.info(f"Session started: {len(categories)} categories, {habit_count} habits")

        for day in service.weekly_tracker():
            logger.info(
                f"{day.date.isoformat()}: {day.completed_habits}/{day.total_habits} "
                f"habits done ({day.progress:.0f}%)"
            )

    except HabitEngineError as e:
        logger.error(f"Session failed: {e.user_message}")
    finally:
        await db.close_pool()
        logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
