# tasks/services.py
"""
Task Record Service
===================

Owner-scoped task operations. Creation runs the whole pipeline:

    auth -> rate limit -> sanitize/validate -> classify (cache, then API)
         -> score -> persist

Every public method returns a ``ServiceResult`` and never raises. Expected
failures (auth, rate limit, validation, not found) come from
``tasks.exceptions``; database errors surface their message verbatim;
anything else is logged and reported with a generic message.
"""

import functools
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from django.conf import settings
from django.db import DatabaseError
from django.utils import timezone

from .ai_engine.cache import ClassificationCache
from .ai_engine.classifier import TaskClassifier
from .ai_engine.contracts import TaskCategorization
from .ai_engine.matrix import build_task_matrix
from .ai_engine.priority import calculate_priority_score, extract_categorization
from .exceptions import (
    AuthRequired,
    RateLimited,
    StorageError,
    TaskNotFound,
    TaskServiceError,
    TaskValidationError,
)
from .models import Task
from .ratelimit import SlidingWindowRateLimiter
from .validators import (
    parse_due_date,
    sanitize_input,
    validate_due_date,
    validate_status,
    validate_task_input,
)

logger = logging.getLogger(__name__)

CREATE_TASK_ACTION = "create_task"
UNEXPECTED_ERROR = "UNEXPECTED_ERROR"

UPDATABLE_FIELDS = ("title", "description", "priority", "status", "due_date")
OPEN_STATUSES = (Task.Status.TODO, Task.Status.IN_PROGRESS)
MAX_LIST_LIMIT = 500


@dataclass
class ServiceResult:
    """Tagged outcome of a service call: success flag, payload or error."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, error_code: str) -> "ServiceResult":
        return cls(success=False, error=error, error_code=error_code)


def service_boundary(failure_message: str) -> Callable:
    """Wrap a service method so its outcome is always a ServiceResult."""

    def decorator(method: Callable) -> Callable:
        @functools.wraps(method)
        def wrapper(self, *args, **kwargs) -> ServiceResult:
            try:
                return ServiceResult.ok(method(self, *args, **kwargs))
            except TaskServiceError as e:
                return ServiceResult.fail(e.message, e.error_code)
            except DatabaseError as e:
                logger.error(f"{method.__name__}: storage error: {e}")
                return ServiceResult.fail(str(e), StorageError.error_code)
            except Exception as e:
                logger.exception(f"{failure_message}: {e}")
                return ServiceResult.fail(failure_message, UNEXPECTED_ERROR)

        return wrapper

    return decorator


class TaskRecordService:
    """
    CRUD, scoring and rescoring of the actor's own tasks.

    Collaborators are injectable; by default they are built from Django
    settings. The classifier is created lazily so read-only operations never
    touch the OpenAI client.
    """

    def __init__(
        self,
        classifier: Optional[TaskClassifier] = None,
        cache: Optional[ClassificationCache] = None,
        rate_limiter: Optional[SlidingWindowRateLimiter] = None,
        today_func: Optional[Callable] = None,
    ):
        self._classifier = classifier
        self.cache = cache or ClassificationCache()
        self.rate_limiter = rate_limiter or SlidingWindowRateLimiter(
            max_requests=getattr(settings, "TASK_CREATE_RATE_LIMIT", 10),
            window_seconds=getattr(settings, "TASK_CREATE_RATE_WINDOW", 60),
        )
        self.today_func = today_func or timezone.localdate

    @property
    def classifier(self) -> TaskClassifier:
        if self._classifier is None:
            self._classifier = TaskClassifier()
        return self._classifier

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @service_boundary("Failed to create task")
    def create_task(self, actor, data: Mapping[str, Any]) -> Task:
        self._require_actor(actor)

        if not self.rate_limiter.allow(actor.pk, CREATE_TASK_ACTION):
            raise RateLimited()

        title = sanitize_input(data.get("title"))
        description = sanitize_input(data.get("description"))
        priority = data.get("priority") or Task.Priority.MEDIUM.value
        raw_due_date = data.get("due_date")

        errors = validate_task_input(title, description, priority)
        errors += validate_due_date(raw_due_date)
        if errors:
            raise TaskValidationError(errors)
        due_date = parse_due_date(raw_due_date)

        categorization = self.cache.get_or_classify(title, self.classifier.categorize_task)

        scored = calculate_priority_score(
            categorization.impact,
            categorization.effort,
            user_priority=priority,
            due_date=due_date,
            today=self.today_func(),
        )

        # The stored priority is the AI-derived label; the requested one only
        # weighted the score.
        task = Task.objects.create(
            user=actor,
            title=title,
            description=description,
            priority=scored.label,
            due_date=due_date,
            ai_priority_score=scored.score,
            ai_reasoning=scored.reasoning,
        )

        logger.info(
            f"Created Task {task.pk} for user {actor.pk}: "
            f"score {scored.score} ({scored.label}), requested {priority}"
        )
        return task

    @service_boundary("Failed to update task")
    def update_task(self, actor, task_id, updates: Mapping[str, Any]) -> Task:
        self._require_actor(actor)
        task = self._get_owned_task(actor, task_id)

        changes: Dict[str, Any] = {
            name: updates[name] for name in UPDATABLE_FIELDS if name in updates
        }

        errors: List[str] = []
        if "title" in changes:
            changes["title"] = sanitize_input(changes["title"])
        if "description" in changes:
            changes["description"] = sanitize_input(changes["description"])
        if {"title", "description", "priority"} & changes.keys():
            errors += validate_task_input(
                changes.get("title", task.title),
                changes.get("description", task.description),
                changes.get("priority", task.priority),
            )
        if "status" in changes:
            errors += validate_status(changes["status"])
        if "due_date" in changes:
            errors += validate_due_date(changes["due_date"])
        if errors:
            raise TaskValidationError(errors)

        if "due_date" in changes:
            changes["due_date"] = parse_due_date(changes["due_date"])

        for name, value in changes.items():
            setattr(task, name, value)
        task.save(update_fields=[*changes.keys(), "updated_at"])

        logger.info(f"Updated Task {task.pk} fields: {sorted(changes)}")
        return task

    @service_boundary("Failed to toggle task completion")
    def toggle_complete(self, actor, task_id) -> Task:
        self._require_actor(actor)
        task = self._get_owned_task(actor, task_id)

        if task.status == Task.Status.COMPLETED:
            task.status = Task.Status.TODO
        else:
            task.status = Task.Status.COMPLETED
        task.save(update_fields=["status", "updated_at"])
        return task

    @service_boundary("Failed to delete task")
    def delete_task(self, actor, task_id) -> None:
        self._require_actor(actor)
        deleted, _ = self._owned_queryset(actor, task_id).delete()
        if not deleted:
            raise TaskNotFound()
        logger.info(f"Deleted Task {task_id} for user {actor.pk}")
        return None

    @service_boundary("Failed to fetch tasks")
    def get_tasks(
        self,
        actor,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        self._require_actor(actor)
        return self._list_tasks(actor, status=status, priority=priority, limit=limit)

    @service_boundary("Failed to fetch task")
    def get_task_by_id(self, actor, task_id) -> Task:
        self._require_actor(actor)
        return self._get_owned_task(actor, task_id)

    @service_boundary("Failed to build task matrix")
    def get_task_matrix(self, actor, status: Optional[str] = None) -> List[Dict[str, Any]]:
        self._require_actor(actor)
        return build_task_matrix(self._list_tasks(actor, status=status))

    @service_boundary("Failed to rescore tasks")
    def rescore_tasks(self, actor, reclassify: bool = False) -> List[Task]:
        """
        Recompute score and reasoning of the actor's open tasks for today.

        The stored priority weights the new score and is left unchanged.
        With ``reclassify`` the titles are classified again (cache first, the
        rest in one batch call); otherwise, and for titles the classifier
        could not place, impact/effort come from the stored reasoning.
        """
        self._require_actor(actor)
        tasks = list(
            Task.objects.filter(user=actor, status__in=OPEN_STATUSES).order_by("-created_at")
        )
        if not tasks:
            return []

        if reclassify:
            categorizations = self._batch_categorize(task.title for task in tasks)
        else:
            categorizations = {}

        today = self.today_func()
        for task in tasks:
            categorization = categorizations.get(self._title_key(task.title))
            if categorization is None or categorization.is_fallback:
                categorization = extract_categorization(task.ai_reasoning)

            scored = calculate_priority_score(
                categorization.impact,
                categorization.effort,
                user_priority=task.priority,
                due_date=task.due_date,
                today=today,
            )
            task.ai_priority_score = scored.score
            task.ai_reasoning = scored.reasoning
            task.save(update_fields=["ai_priority_score", "ai_reasoning", "updated_at"])

        logger.info(f"Rescored {len(tasks)} open tasks for user {actor.pk} (reclassify={reclassify})")
        return tasks

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_actor(actor) -> None:
        if actor is None or not getattr(actor, "is_authenticated", False):
            raise AuthRequired()

    @staticmethod
    def _owned_queryset(actor, task_id):
        try:
            pk = task_id if isinstance(task_id, uuid.UUID) else uuid.UUID(str(task_id))
        except (TypeError, ValueError, AttributeError):
            raise TaskNotFound()
        return Task.objects.filter(pk=pk, user=actor)

    def _get_owned_task(self, actor, task_id) -> Task:
        task = self._owned_queryset(actor, task_id).first()
        if task is None:
            raise TaskNotFound()
        return task

    def _list_tasks(
        self,
        actor,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        errors: List[str] = []
        if status:
            errors += validate_status(status)
        if priority and priority not in Task.Priority.values:
            errors.append("Invalid priority level")
        if limit is not None:
            try:
                limit = int(limit)
            except (TypeError, ValueError):
                limit = 0
            if limit < 1:
                errors.append("Limit must be a positive integer")
            elif limit > MAX_LIST_LIMIT:
                errors.append(f"Limit must not exceed {MAX_LIST_LIMIT}")
        if errors:
            raise TaskValidationError(errors)

        queryset = Task.objects.filter(user=actor).order_by("-created_at")
        if status:
            queryset = queryset.filter(status=status)
        if priority:
            queryset = queryset.filter(priority=priority)
        if limit is not None:
            queryset = queryset[:limit]
        return list(queryset)

    @staticmethod
    def _title_key(title: str) -> str:
        return title.strip().lower()

    def _batch_categorize(self, titles: Iterable[str]) -> Dict[str, TaskCategorization]:
        """Cached categorizations plus one batch call for the misses, by title key."""
        found: Dict[str, TaskCategorization] = {}
        misses: List[str] = []
        seen = set()

        for title in titles:
            key = self._title_key(title)
            if key in seen:
                continue
            seen.add(key)
            cached = self.cache.get(title)
            if cached is not None:
                found[key] = cached
            else:
                misses.append(title)

        if misses:
            for title, categorization in zip(misses, self.classifier.categorize_tasks(misses)):
                self.cache.put(title, categorization)
                found[self._title_key(title)] = categorization

        return found
