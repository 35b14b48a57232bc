"""
Standardized exception hierarchy for the habit farm
Provides rich context, consistent logging, and user-friendly error messages

Game-rule misuse (checking in twice, overspending, unknown ids) is NOT an
error: those calls return sentinel results. Exceptions here are reserved for
invalid input, storage failures and broken referential integrity.
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import logging

logger = logging.getLogger(__name__)


class HabitFarmError(Exception):
    """
    Base exception for all habit farm errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise HabitFarmError(
            message="Failed to commit check-in",
            animal_id="3f2a9c",
            operation="check_in",
            context={"path": "data/cozy-habit-farm-storage.json"}
        )
    """

    def __init__(
        self,
        message: str,
        animal_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.animal_id = animal_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "Something went wrong on the farm. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "animal_id": self.animal_id,
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
        data = {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "timestamp": self.timestamp.isoformat()
        }
        if self.animal_id:
            data["animal_id"] = self.animal_id
        return data


# ==========================================
# Validation Errors (Caller Input)
# ==========================================

class ValidationError(HabitFarmError):
    """
    Raised when caller input fails validation

    Examples:
    - Negative coin amount
    - Empty animal name or habit description
    - Unknown animal type

    Example:
        raise ValidationError(
            message="Amount must not be negative",
            field="amount",
            value=-5
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
# Storage Errors
# ==========================================

class StorageError(HabitFarmError):
    """Persisted snapshot could not be written"""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        **kwargs
    ):
        self.path = path
        super().__init__(
            message=message,
            user_message="We couldn't save your farm. Your progress in this session is kept.",
            context={"path": path},
            **kwargs
        )


class IntegrityError(HabitFarmError):
    """
    Referential integrity between animals and habits is broken

    Raised for a habit whose owning animal does not exist, or an animal
    pointing at a missing habit. Treated as an integration bug, never
    degraded silently.
    """

    def __init__(
        self,
        message: str,
        animal_id: Optional[str] = None,
        habit_id: Optional[str] = None,
        **kwargs
    ):
        self.habit_id = habit_id
        super().__init__(
            message=message,
            animal_id=animal_id,
            user_message="Your farm data is inconsistent. Please contact support.",
            context={"animal_id": animal_id, "habit_id": habit_id},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_storage_exception(
    error: Exception,
    operation: str,
    path: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> HabitFarmError:
    """
    Wrap low-level I/O exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        path: File involved, if any
        context: Additional context

    Returns:
        Appropriate HabitFarmError subclass

    Example:
        try:
            path.write_text(payload)
        except OSError as e:
            raise wrap_storage_exception(e, operation="save_snapshot", path=str(path))
    """
    if isinstance(error, (OSError, TypeError, ValueError)):
        return StorageError(
            message=f"{operation} failed: {str(error)}",
            path=path,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return HabitFarmError(
        message=f"{operation} failed: {str(error)}",
        operation=operation,
        context=context,
        cause=error
    )
