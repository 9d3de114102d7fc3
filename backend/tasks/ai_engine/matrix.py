# tasks/ai_engine/matrix.py
"""Groups tasks into the 3x3 impact/effort matrix."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .contracts import CATEGORY_LEVELS, HIGH, LOW, MEDIUM
from .priority import extract_categorization

# (impact, effort) -> suggested action for the cell
CELL_LABELS = {
    (HIGH, LOW): "Do First",
    (HIGH, MEDIUM): "Schedule",
    (HIGH, HIGH): "Delegate",
    (MEDIUM, LOW): "Quick Wins",
    (MEDIUM, MEDIUM): "Consider",
    (MEDIUM, HIGH): "Maybe Later",
    (LOW, LOW): "Fill Time",
    (LOW, MEDIUM): "Avoid",
    (LOW, HIGH): "Don't Do",
}


def build_task_matrix(tasks: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Return nine cells, row-major: impact High/Medium/Low by effort
    High/Medium/Low. Each task lands in the cell named by its reasoning
    string; tasks without one sit in Medium/Medium.
    """
    cells: Dict[tuple, List[Any]] = {
        (impact, effort): [] for impact in CATEGORY_LEVELS for effort in CATEGORY_LEVELS
    }

    for task in tasks:
        categorization = extract_categorization(getattr(task, "ai_reasoning", None))
        cells[(categorization.impact, categorization.effort)].append(task)

    return [
        {
            "impact": impact,
            "effort": effort,
            "label": CELL_LABELS[(impact, effort)],
            "tasks": cells[(impact, effort)],
        }
        for impact in CATEGORY_LEVELS
        for effort in CATEGORY_LEVELS
    ]
