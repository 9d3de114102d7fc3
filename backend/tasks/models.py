import uuid

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Task(models.Model):
    """
    A personal task owned by a single user.

    The AI fields are written once at creation (and by explicit rescoring);
    regular updates never touch them.
    """

    class Priority(models.TextChoices):
        LOW = "low", _("Low")
        MEDIUM = "medium", _("Medium")
        HIGH = "high", _("High")
        URGENT = "urgent", _("Urgent")

    class Status(models.TextChoices):
        TODO = "todo", _("To do")
        IN_PROGRESS = "in_progress", _("In progress")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tasks',
        verbose_name=_("user")
    )

    title = models.CharField(max_length=200, verbose_name=_("title"))
    description = models.TextField(blank=True, default="", verbose_name=_("description"))

    # Holds the AI-derived label for newly created tasks, not the requested one
    priority = models.CharField(
        max_length=10,
        choices=Priority.choices,
        default=Priority.MEDIUM,
        verbose_name=_("priority")
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.TODO,
        verbose_name=_("status")
    )

    ai_priority_score = models.PositiveSmallIntegerField(
        null=True, blank=True,
        verbose_name=_("AI priority score"),
        help_text=_("Priority score from 1 (low) to 5 (urgent).")
    )
    ai_reasoning = models.TextField(
        blank=True, default="",
        verbose_name=_("AI reasoning"),
        help_text=_("Human-readable explanation of the priority score.")
    )

    due_date = models.DateField(
        null=True, blank=True,
        verbose_name=_("due date"),
        help_text=_("The deadline for the task.")
    )

    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("updated at"))

    class Meta:
        verbose_name = _("Task")
        verbose_name_plural = _("Tasks")
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', 'status'], name='tasks_user_status_idx'),
            models.Index(fields=['user', '-created_at'], name='tasks_user_created_idx'),
        ]

    def __str__(self):
        return f"Task for {self.user_id}: {self.title}"
