# tasks/ai_engine/contracts.py
"""Value types shared by the classifier, the cache and the scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

HIGH = "High"
MEDIUM = "Medium"
LOW = "Low"

# Row/column order of the impact/effort matrix
CATEGORY_LEVELS = (HIGH, MEDIUM, LOW)

PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"
PRIORITY_URGENT = "urgent"

PRIORITY_LEVELS = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH, PRIORITY_URGENT)


@dataclass(frozen=True)
class TaskCategorization:
    """
    Impact/effort pair produced by the classifier.

    ``is_fallback`` marks the neutral default returned when classification
    failed. It is excluded from equality, so a fallback still compares equal
    to a genuine Medium/Medium answer.
    """

    impact: str
    effort: str
    is_fallback: bool = field(default=False, compare=False)

    def as_dict(self) -> Dict[str, Any]:
        return {"impact": self.impact, "effort": self.effort}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskCategorization":
        return cls(impact=data["impact"], effort=data["effort"])


def fallback_categorization() -> TaskCategorization:
    return TaskCategorization(impact=MEDIUM, effort=MEDIUM, is_fallback=True)
