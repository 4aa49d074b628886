"""Error hierarchy for the forum core.

Every error carries a machine-readable code, a category and the HTTP status
the boundary maps it to. Authentication absence is not an error: callers get
``None`` from the session lookup and decide for themselves.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"


class ForumError(Exception):
    """Base exception for all forum errors."""

    def __init__(self, message: str, code: str, category: ErrorCategory, http_status: int = 500):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.http_status = http_status

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
            }
        }


class ValidationError(ForumError):
    """Malformed or out-of-range input. Never retried."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message, "VALIDATION_ERROR", ErrorCategory.VALIDATION, 400)
        self.field = field


class ConflictError(ForumError):
    """A uniqueness constraint rejected the write."""

    def __init__(self, message: str):
        super().__init__(message, "CONFLICT", ErrorCategory.CONFLICT, 409)


class NotFoundError(ForumError):
    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class StorageError(ForumError):
    """The store is unavailable or a write failed."""

    def __init__(self, message: str, operation: str):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.DATABASE, 503,
        )
        self.operation = operation
