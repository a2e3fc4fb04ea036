"""
Standardized exception hierarchy for habit-engine
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

import psycopg

logger = logging.getLogger(__name__)


class HabitEngineError(Exception):
    """
    Base exception for all habit-engine errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise HabitEngineError(
            message="Failed to save habit",
            user_id="123456",
            operation="add_habit",
            context={"category_id": "health"}
        )
    """

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(HabitEngineError):
    """
    Raised when input fails validation at the editing boundary

    Examples:
    - Quarter outside 1-4
    - Negative heatmap window

    Example:
        raise ValidationError(
            message="Quarter must be between 1 and 4",
            field="quarter",
            value=5
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Lookup Errors
# ==========================================

class NotFoundError(HabitEngineError):
    """Referenced habit or category does not exist"""

    def __init__(
        self,
        message: str,
        record_type: Optional[str] = None,
        record_id: Optional[str] = None,
        **kwargs
    ):
        self.record_type = record_type
        self.record_id = record_id
        super().__init__(
            message=message,
            user_message=f"{record_type or 'Record'} not found.",
            context={"record_type": record_type, "record_id": record_id},
            **kwargs
        )


# ==========================================
# Scheduling Errors (programming errors)
# ==========================================

class InvalidFrequencyError(HabitEngineError):
    """Unrecognized frequency reached the schedule evaluator"""

    def __init__(
        self,
        message: str,
        frequency: Optional[Any] = None,
        **kwargs
    ):
        self.frequency = frequency
        super().__init__(
            message=message,
            user_message="This habit has an unsupported schedule.",
            context={"frequency": repr(frequency)},
            **kwargs
        )


# ==========================================
# Persistence Errors
# ==========================================

class RemoteUnavailableError(HabitEngineError):
    """
    Remote persistence call failed

    Non-fatal for mutations (local state proceeds), fatal for export/summary.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        **kwargs
    ):
        self.service = service
        super().__init__(
            message=message,
            user_message=(
                f"We're having trouble reaching {service or 'remote storage'}. "
                "Your changes are kept on this device."
            ),
            context={"service": service, **(context or {})},
            **kwargs
        )


# ==========================================
# Authentication
# ==========================================

class UnauthenticatedError(HabitEngineError):
    """Operation requires a logged-in user"""

    def __init__(
        self,
        message: str = "User must be logged in",
        **kwargs
    ):
        super().__init__(
            message=message,
            user_message="Please log in to use this feature.",
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(HabitEngineError):
    """System configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_external_exception(
    error: Exception,
    operation: str,
    user_id: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> HabitEngineError:
    """
    Wrap external exceptions (psycopg, OS errors) into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        user_id: User ID if applicable
        context: Additional context

    Returns:
        Appropriate HabitEngineError subclass

    Example:
        try:
            await queries.create_habit(user_id, habit)
        except Exception as e:
            raise wrap_external_exception(e, operation="create_habit", user_id=user_id)
    """
    if isinstance(error, HabitEngineError):
        return error

    if isinstance(error, psycopg.OperationalError):
        return RemoteUnavailableError(
            message=f"Database connection failed: {str(error)}",
            service="habit database",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, psycopg.Error):
        return RemoteUnavailableError(
            message=f"Database query failed: {str(error)}",
            service="habit database",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
    elif isinstance(error, (OSError, RuntimeError)):
        # Network errors and an uninitialized connection pool
        return RemoteUnavailableError(
            message=f"{operation} failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )

    # Generic fallback
    else:
        return HabitEngineError(
            message=f"{operation} failed: {str(error)}",
            user_id=user_id,
            operation=operation,
            context=context,
            cause=error
        )
