# tasks/ai_engine/priority.py
"""
Priority Scoring Engine
=======================

Deterministic mapping from an impact/effort classification, the user's
requested priority and the due date onto an integer score (1-5), a priority
label and a reasoning string.

Pipeline:
    1. base score from the impact x effort table
    2. multiply by the user-priority weight
    3. add the due-date bonus (first matching rule, capped at 5)
    4. round half up and clamp to [1, 5]

Pure module: no Django, no I/O. ``today`` is injectable so callers and
tests control the calendar.
"""

from __future__ import annotations

import datetime
import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from .contracts import (
    CATEGORY_LEVELS,
    HIGH,
    LOW,
    MEDIUM,
    PRIORITY_HIGH,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    PRIORITY_URGENT,
    TaskCategorization,
)

MIN_SCORE = 1
MAX_SCORE = 5

# (impact, effort) -> base score. Pairs not listed score 1.
BASE_SCORES = {
    (HIGH, LOW): 5,     # quick wins
    (HIGH, MEDIUM): 4,
    (MEDIUM, LOW): 3,
    (HIGH, HIGH): 3,    # major strategic work
    (MEDIUM, MEDIUM): 2,
    (LOW, LOW): 2,      # fill-in work
}
DEFAULT_BASE_SCORE = 1

USER_PRIORITY_WEIGHTS = {
    PRIORITY_URGENT: 1.5,
    PRIORITY_HIGH: 1.3,
    PRIORITY_MEDIUM: 1.0,
    PRIORITY_LOW: 0.8,
}

OVERDUE_BONUS = 2.0

# (max days until due, bonus), checked in order after the overdue rule
DUE_SOON_BONUSES = (
    (1, 1.5),
    (3, 1.0),
    (7, 0.5),
)

_IMPACT_PATTERN = re.compile(r"Impact\s*[=:]\s*(High|Medium|Low)\b")
_EFFORT_PATTERN = re.compile(r"Effort\s*[=:]\s*(High|Medium|Low)\b")

DueDate = Union[datetime.date, datetime.datetime, str, None]


@dataclass(frozen=True)
class PriorityFactors:
    impact: str
    effort: str
    user_priority: str
    has_due_date: bool
    days_until_due: Optional[int] = None
    is_overdue: bool = False


@dataclass(frozen=True)
class PriorityScore:
    score: int
    reasoning: str
    factors: PriorityFactors

    @property
    def label(self) -> str:
        return score_to_priority_level(self.score)


def base_score(impact: str, effort: str) -> int:
    """Look up the impact x effort table."""
    return BASE_SCORES.get((impact, effort), DEFAULT_BASE_SCORE)


def score_to_priority_level(score: float) -> str:
    """Map a score onto low/medium/high/urgent."""
    if score >= 5:
        return PRIORITY_URGENT
    if score >= 4:
        return PRIORITY_HIGH
    if score >= 3:
        return PRIORITY_MEDIUM
    return PRIORITY_LOW


def extract_categorization(reasoning: Optional[str]) -> TaskCategorization:
    """
    Recover impact/effort from a reasoning string.

    Understands both the creation stub ("Impact=High, Effort=Low") and the
    stored reasoning ("Impact: High, Effort: Low"). Anything missing or
    unrecognised defaults to Medium.
    """
    impact, effort = MEDIUM, MEDIUM
    if reasoning:
        impact_match = _IMPACT_PATTERN.search(reasoning)
        effort_match = _EFFORT_PATTERN.search(reasoning)
        if impact_match:
            impact = impact_match.group(1)
        if effort_match:
            effort = effort_match.group(1)
    return TaskCategorization(impact=impact, effort=effort)


def _coerce_due_date(due_date: DueDate) -> Optional[datetime.date]:
    if due_date is None or due_date == "":
        return None
    if isinstance(due_date, datetime.datetime):
        return due_date.date()
    if isinstance(due_date, datetime.date):
        return due_date
    try:
        return datetime.date.fromisoformat(str(due_date)[:10])
    except ValueError:
        return None


def _due_date_status(
    due_date: Optional[datetime.date],
    today: datetime.date,
) -> Tuple[Optional[int], bool]:
    """Whole calendar days until the due date, and whether it has passed."""
    if due_date is None:
        return None, False
    days_until = (due_date - today).days
    return days_until, days_until < 0


def _due_date_bonus(factors: PriorityFactors) -> float:
    if not factors.has_due_date or factors.days_until_due is None:
        return 0.0
    if factors.is_overdue:
        return OVERDUE_BONUS
    for max_days, bonus in DUE_SOON_BONUSES:
        if factors.days_until_due <= max_days:
            return bonus
    return 0.0


def _round_half_up(value: float) -> int:
    # round() would send 2.5 to 2
    return int(math.floor(value + 0.5))


def _build_reasoning(factors: PriorityFactors, score: int) -> str:
    parts = [f"Impact: {factors.impact}, Effort: {factors.effort}"]
    if factors.has_due_date and factors.days_until_due is not None:
        if factors.is_overdue:
            parts.append(f"Overdue by {abs(factors.days_until_due)} days")
        else:
            parts.append(f"Due in {factors.days_until_due} days")
    return f"AI Analysis: {', '.join(parts)}. Priority Score: {score}/{MAX_SCORE}"


def calculate_priority_score(
    impact: str,
    effort: str,
    user_priority: Optional[str] = PRIORITY_MEDIUM,
    due_date: DueDate = None,
    today: Optional[datetime.date] = None,
) -> PriorityScore:
    """
    Score a task from its classification, requested priority and due date.

    impact/effort: "High" | "Medium" | "Low"; anything else counts as Medium.
    user_priority: "low" | "medium" | "high" | "urgent"; defaults to medium.
    due_date: date, datetime or ISO 'YYYY-MM-DD' string. An unparseable
              value counts as no due date.
    today: reference date (defaults to the local calendar date).

    Never raises; the returned score is always an int in [1, 5].
    """
    if today is None:
        today = datetime.date.today()

    if impact not in CATEGORY_LEVELS:
        impact = MEDIUM
    if effort not in CATEGORY_LEVELS:
        effort = MEDIUM
    if user_priority not in USER_PRIORITY_WEIGHTS:
        user_priority = PRIORITY_MEDIUM

    due = _coerce_due_date(due_date)
    days_until_due, is_overdue = _due_date_status(due, today)

    factors = PriorityFactors(
        impact=impact,
        effort=effort,
        user_priority=user_priority,
        has_due_date=due is not None,
        days_until_due=days_until_due,
        is_overdue=is_overdue,
    )

    adjusted = base_score(impact, effort) * USER_PRIORITY_WEIGHTS[user_priority]

    bonus = _due_date_bonus(factors)
    if bonus:
        adjusted = min(float(MAX_SCORE), adjusted + bonus)

    score = max(MIN_SCORE, min(MAX_SCORE, _round_half_up(adjusted)))

    return PriorityScore(
        score=score,
        reasoning=_build_reasoning(factors, score),
        factors=factors,
    )


def score_from_reasoning(
    reasoning: Optional[str],
    user_priority: Optional[str] = PRIORITY_MEDIUM,
    due_date: DueDate = None,
    today: Optional[datetime.date] = None,
) -> PriorityScore:
    """Score a task whose classification only survives inside its reasoning text."""
    categorization = extract_categorization(reasoning)
    return calculate_priority_score(
        categorization.impact,
        categorization.effort,
        user_priority=user_priority,
        due_date=due_date,
        today=today,
    )
