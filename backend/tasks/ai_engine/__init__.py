# tasks/ai_engine/__init__.py
"""
AI Engine Package
=================

Classification and scoring logic behind task prioritization.

Modules:
--------
- contracts: Shared value types (TaskCategorization, level constants)
- classifier: OpenAI gateway returning impact/effort, Medium/Medium on failure
- cache: Django-cache-backed memo of classifications by normalized title
- priority: Deterministic 1-5 priority scoring and labels
- matrix: 3x3 impact/effort grouping of tasks
- celery_tasks: Background rescoring of a user's open tasks

Scoring:
--------
    base (impact x effort table) x user-priority weight
    + due-date bonus (overdue +2, <=1 day +1.5, <=3 +1, <=7 +0.5), capped at 5
    -> rounded half up, clamped to [1, 5]

Usage:
------
    from tasks.ai_engine import TaskClassifier, calculate_priority_score

    categorization = TaskClassifier().categorize_task("Fix login bug")
    result = calculate_priority_score(
        categorization.impact,
        categorization.effort,
        user_priority="high",
        due_date="2024-01-20",
    )
    result.score, result.label, result.reasoning
"""

from .cache import ClassificationCache
from .celery_tasks import rescore_open_tasks
from .classifier import TaskClassifier
from .contracts import TaskCategorization, fallback_categorization
from .matrix import build_task_matrix
from .priority import (
    PriorityFactors,
    PriorityScore,
    base_score,
    calculate_priority_score,
    extract_categorization,
    score_from_reasoning,
    score_to_priority_level,
)

__all__ = [
    # Core classes
    "TaskClassifier",
    "ClassificationCache",
    "TaskCategorization",
    "PriorityFactors",
    "PriorityScore",
    # Functions
    "base_score",
    "build_task_matrix",
    "calculate_priority_score",
    "extract_categorization",
    "fallback_categorization",
    "rescore_open_tasks",
    "score_from_reasoning",
    "score_to_priority_level",
]
