# tasks/exceptions.py
"""
Task Service Errors
===================

Expected failures of the Task Record Service. Each one carries a
machine-readable ``error_code`` and the message shown to the user; the
service boundary turns them into a failed ``ServiceResult`` instead of
letting them escape.

``ClassificationFailure`` is the exception: it never leaves the classifier,
which absorbs it into the Medium/Medium fallback.
"""

from __future__ import annotations

from typing import Iterable, List


class TaskServiceError(Exception):
    """Base class for failures that map onto a result error."""

    error_code: str = "TASK_ERROR"
    default_message: str = "Task operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthRequired(TaskServiceError):
    """No authenticated actor for the operation."""

    error_code = "AUTH_REQUIRED"
    default_message = "Authentication required"


class RateLimited(TaskServiceError):
    """The actor exceeded the rolling-window request budget."""

    error_code = "RATE_LIMITED"
    default_message = "Rate limit exceeded. Please try again later."


class TaskValidationError(TaskServiceError):
    """One or more input fields failed validation."""

    error_code = "VALIDATION_ERROR"
    default_message = "Invalid task input"

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages: List[str] = list(messages)
        super().__init__(", ".join(self.messages) or None)


class TaskNotFound(TaskServiceError):
    """
    No owned row matches the id.

    Also covers rows that exist but belong to someone else, so the message
    never reveals which of the two happened.
    """

    error_code = "NOT_FOUND"
    default_message = "Task not found"


class StorageError(TaskServiceError):
    """The datastore rejected the statement; message passes through verbatim."""

    error_code = "STORAGE_ERROR"
    default_message = "Storage error"


class ClassificationFailure(Exception):
    """Raised inside the classifier when a response cannot be used."""

    pass
