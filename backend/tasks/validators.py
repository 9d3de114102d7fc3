# tasks/validators.py

import datetime
from typing import List, Optional

from django.utils.html import strip_tags

from .models import Task

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000


def sanitize_input(value: Optional[str]) -> str:
    """Trim and strip markup from user text."""
    if value is None:
        return ""
    return strip_tags(str(value).strip()).strip()


def validate_task_input(title: str, description: Optional[str], priority: Optional[str]) -> List[str]:
    """Return every problem with the fields at once; empty list means valid."""
    errors = []

    if not title or not title.strip():
        errors.append("Title is required")
    elif len(title) > TITLE_MAX_LENGTH:
        errors.append(f"Title must be less than {TITLE_MAX_LENGTH} characters")

    if description and len(description) > DESCRIPTION_MAX_LENGTH:
        errors.append(f"Description must be less than {DESCRIPTION_MAX_LENGTH} characters")

    if priority not in Task.Priority.values:
        errors.append("Invalid priority level")

    return errors


def parse_due_date(value) -> Optional[datetime.date]:
    """
    Accept a date, datetime, ISO 'YYYY-MM-DD' string or empty value.
    Raises ValueError for anything else.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value))


def validate_due_date(value) -> List[str]:
    try:
        parse_due_date(value)
    except (TypeError, ValueError):
        return ["Invalid due date"]
    return []


def validate_status(value) -> List[str]:
    if value not in Task.Status.values:
        return ["Invalid status"]
    return []
