"""Unit tests for custom exception hierarchy"""
from datetime import datetime
from src.exceptions import (
    HabitFarmError,
    ValidationError,
    StorageError,
    IntegrityError,
    wrap_storage_exception
)


class TestHabitFarmError:
    """Test base exception class"""

    def test_basic_exception(self):
        error = HabitFarmError("Test error")
        assert error.message == "Test error"
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)

    def test_to_dict(self):
        error = HabitFarmError(message="Test error", operation="check_in")
        error_dict = error.to_dict()
        assert error_dict["error"] == "HabitFarmError"
        assert error_dict["message"] == "Test error"
        assert "request_id" in error_dict
        assert "timestamp" in error_dict

    def test_to_dict_carries_animal_id(self):
        error = HabitFarmError("Check-in failed", animal_id="a1")
        assert error.animal_id == "a1"
        assert error.to_dict()["animal_id"] == "a1"
        assert "animal_id" not in HabitFarmError("Other").to_dict()

    def test_logs_on_creation(self, caplog):
        HabitFarmError("Logged error")
        assert "Logged error" in caplog.text


class TestSubclasses:
    """Test specialised errors"""

    def test_validation_error_field(self):
        error = ValidationError("must not be negative", field="amount", value=-3)
        assert error.field == "amount"
        assert error.context == {"field": "amount", "value": -3}
        assert error.user_message == "Invalid amount: must not be negative"
        assert isinstance(error, HabitFarmError)

    def test_integrity_error_ids(self):
        error = IntegrityError("broken", animal_id="a1", habit_id="h1")
        assert error.context == {"animal_id": "a1", "habit_id": "h1"}
        assert error.animal_id == "a1"
        assert error.habit_id == "h1"
        assert error.to_dict()["animal_id"] == "a1"


class TestWrapStorageException:
    """Test wrapping of low-level errors"""

    def test_wraps_os_error(self):
        original = PermissionError("read-only")
        error = wrap_storage_exception(original, operation="save_snapshot", path="/data/farm.json")
        assert isinstance(error, StorageError)
        assert error.path == "/data/farm.json"
        assert error.cause is original

    def test_unknown_error_falls_back_to_base(self):
        error = wrap_storage_exception(RuntimeError("odd"), operation="save_snapshot")
        assert type(error) is HabitFarmError
        assert error.operation == "save_snapshot"
