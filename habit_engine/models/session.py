"""User session model"""
from typing import Optional
from pydantic import BaseModel, field_validator
import pytz

from habit_engine.config import TIMEZONE


class UserSession(BaseModel):
    """
    Explicit session context passed into the engine

    Selects the persistence path: an authenticated session mirrors writes
    to the remote database, an anonymous one only uses the local cache.
    """
    user_id: Optional[str] = None
    timezone: str = TIMEZONE  # IANA timezone (e.g., "Europe/Stockholm")

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure valid IANA timezone"""
        try:
            pytz.timezone(v)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(
                f"Invalid timezone: '{v}'. "
                f"Use IANA timezone (e.g., 'Europe/Stockholm', 'America/New_York')"
            )
        return v

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)

    @property
    def cache_key(self) -> str:
        """Directory name for this session's local cache"""
        return self.user_id or "anonymous"
