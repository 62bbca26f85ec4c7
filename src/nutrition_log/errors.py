"""Error taxonomy for food logging operations."""

from uuid import UUID


class FoodLogError(Exception):
    """Base error carrying the HTTP status and machine-readable code."""

    status_code = 500
    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(FoodLogError):
    """Malformed or out-of-range input. Never retried."""

    status_code = 400
    code = "validation_error"


class NotFoundError(FoodLogError):
    """Referenced entry or meal does not exist."""

    status_code = 404
    code = "not_found"


class StorageError(FoodLogError):
    """An underlying store operation failed."""

    status_code = 500
    code = "storage_error"


class PartialBatchFailure(StorageError):
    """One or more bulk updates failed; attributed per meal id."""

    code = "partial_batch_failure"

    def __init__(self, failures: dict[UUID, str], updated: list | None = None) -> None:
        meals = ", ".join(str(meal_id) for meal_id in failures)
        super().__init__(f"Failed to update food logs for meals: {meals}")
        self.failures = failures
        self.updated = updated or []
