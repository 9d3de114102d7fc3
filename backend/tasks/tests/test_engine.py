# tasks/tests/test_engine.py
"""
Priority Engine Unit Tests
==========================

Tests for the deterministic scoring "Brain" of the prioritization system.

This module tests:
1. The impact x effort base table
2. User-priority weights and the due-date bonus ladder
3. Rounding, clamping and the score -> label mapping
4. Re-extraction of impact/effort from reasoning strings
5. Matrix grouping

Tests are deterministic: the reference date is always passed explicitly.
"""

from __future__ import annotations

import datetime
from types import SimpleNamespace

from django.test import SimpleTestCase

from tasks.ai_engine.contracts import CATEGORY_LEVELS, PRIORITY_LEVELS, TaskCategorization
from tasks.ai_engine.matrix import build_task_matrix
from tasks.ai_engine.priority import (
    base_score,
    calculate_priority_score,
    extract_categorization,
    score_from_reasoning,
    score_to_priority_level,
)


TODAY = datetime.date(2024, 1, 15)


def days_from_today(days: int) -> datetime.date:
    return TODAY + datetime.timedelta(days=days)


# ===========================================================================
# BASE SCORE TESTS
# ===========================================================================


class TestBaseScore(SimpleTestCase):
    """The fixed impact x effort table."""

    EXPECTED = {
        ("High", "Low"): 5,
        ("High", "Medium"): 4,
        ("Medium", "Low"): 3,
        ("High", "High"): 3,
        ("Medium", "Medium"): 2,
        ("Low", "Low"): 2,
        ("Medium", "High"): 1,
        ("Low", "Medium"): 1,
        ("Low", "High"): 1,
    }

    def test_table_matches_for_every_pair(self) -> None:
        for (impact, effort), expected in self.EXPECTED.items():
            with self.subTest(impact=impact, effort=effort):
                self.assertEqual(base_score(impact, effort), expected)

    def test_medium_weight_and_no_due_date_returns_base(self) -> None:
        """With weight 1.0 and no bonus the final score is the base itself."""
        for (impact, effort), expected in self.EXPECTED.items():
            with self.subTest(impact=impact, effort=effort):
                result = calculate_priority_score(impact, effort, "medium", None, today=TODAY)
                self.assertEqual(result.score, expected)


# ===========================================================================
# SCORE COMPUTATION TESTS
# ===========================================================================


class TestCalculatePriorityScore(SimpleTestCase):

    # -----------------------------------------------------------------------
    # Reference scenarios
    # -----------------------------------------------------------------------

    def test_quick_win_without_due_date_is_urgent(self) -> None:
        """High impact, low effort, medium priority, no due date -> 5 / urgent."""
        result = calculate_priority_score("High", "Low", "medium", None, today=TODAY)

        self.assertEqual(result.score, 5)
        self.assertEqual(result.label, "urgent")
        self.assertEqual(
            result.reasoning,
            "AI Analysis: Impact: High, Effort: Low. Priority Score: 5/5",
        )

    def test_low_value_task_due_today_stays_low(self) -> None:
        """1 x 0.8 = 0.8, +1.5 for due today = 2.3 -> 2 / low."""
        result = calculate_priority_score("Low", "High", "low", TODAY, today=TODAY)

        self.assertEqual(result.score, 2)
        self.assertEqual(result.label, "low")
        self.assertIn("Due in 0 days", result.reasoning)
        self.assertEqual(result.factors.days_until_due, 0)
        self.assertFalse(result.factors.is_overdue)

    # -----------------------------------------------------------------------
    # User priority weights
    # -----------------------------------------------------------------------

    def test_user_priority_weights(self) -> None:
        """Base 2 (Medium/Medium) scaled by each weight, then rounded half up."""
        expected = {
            "low": 2,      # 1.6
            "medium": 2,   # 2.0
            "high": 3,     # 2.6
            "urgent": 3,   # 3.0
        }
        for priority, score in expected.items():
            with self.subTest(priority=priority):
                result = calculate_priority_score("Medium", "Medium", priority, None, today=TODAY)
                self.assertEqual(result.score, score)

    def test_unknown_user_priority_defaults_to_medium(self) -> None:
        result = calculate_priority_score("High", "Medium", "critical", None, today=TODAY)

        self.assertEqual(result.score, 4)
        self.assertEqual(result.factors.user_priority, "medium")

    def test_missing_user_priority_defaults_to_medium(self) -> None:
        result = calculate_priority_score("High", "Medium", None, None, today=TODAY)

        self.assertEqual(result.factors.user_priority, "medium")
        self.assertEqual(result.score, 4)

    # -----------------------------------------------------------------------
    # Due date ladder
    # -----------------------------------------------------------------------

    def test_overdue_adds_two(self) -> None:
        """Medium/Medium overdue by 3 days: 2 + 2 = 4."""
        result = calculate_priority_score("Medium", "Medium", "medium", days_from_today(-3), today=TODAY)

        self.assertEqual(result.score, 4)
        self.assertTrue(result.factors.is_overdue)
        self.assertIn("Overdue by 3 days", result.reasoning)
        self.assertNotIn("Due in", result.reasoning)

    def test_due_tomorrow_adds_one_and_a_half(self) -> None:
        """Low/High at medium weight: 1 + 1.5 = 2.5 -> rounds up to 3."""
        result = calculate_priority_score("Low", "High", "medium", days_from_today(1), today=TODAY)

        self.assertEqual(result.score, 3)
        self.assertIn("Due in 1 days", result.reasoning)

    def test_due_in_three_days_adds_one(self) -> None:
        result = calculate_priority_score("Low", "Low", "medium", days_from_today(3), today=TODAY)

        self.assertEqual(result.score, 3)

    def test_due_in_a_week_adds_half(self) -> None:
        """2 + 0.5 = 2.5 must round to 3, not banker's-round to 2."""
        result = calculate_priority_score("Medium", "Medium", "medium", days_from_today(7), today=TODAY)

        self.assertEqual(result.score, 3)

    def test_due_after_a_week_adds_nothing(self) -> None:
        result = calculate_priority_score("Medium", "Medium", "medium", days_from_today(8), today=TODAY)

        self.assertEqual(result.score, 2)
        self.assertIn("Due in 8 days", result.reasoning)

    def test_overdue_never_lowers_the_score(self) -> None:
        for impact in CATEGORY_LEVELS:
            for effort in CATEGORY_LEVELS:
                for priority in PRIORITY_LEVELS:
                    with self.subTest(impact=impact, effort=effort, priority=priority):
                        on_time = calculate_priority_score(impact, effort, priority, None, today=TODAY)
                        overdue = calculate_priority_score(
                            impact, effort, priority, days_from_today(-1), today=TODAY
                        )
                        self.assertGreaterEqual(overdue.score, on_time.score)
                        self.assertGreaterEqual(overdue.score, 3)

    # -----------------------------------------------------------------------
    # Bounds
    # -----------------------------------------------------------------------

    def test_score_is_always_an_int_between_one_and_five(self) -> None:
        due_dates = [None, "", "garbage", days_from_today(-30), TODAY, days_from_today(2), days_from_today(60)]
        for impact in CATEGORY_LEVELS + ("Unknown",):
            for effort in CATEGORY_LEVELS:
                for priority in PRIORITY_LEVELS:
                    for due in due_dates:
                        with self.subTest(impact=impact, effort=effort, priority=priority, due=due):
                            result = calculate_priority_score(impact, effort, priority, due, today=TODAY)
                            self.assertIsInstance(result.score, int)
                            self.assertGreaterEqual(result.score, 1)
                            self.assertLessEqual(result.score, 5)

    def test_high_scores_are_clamped_to_five(self) -> None:
        """5 x 1.5 + 2 would be 9.5; the result is capped at 5."""
        result = calculate_priority_score("High", "Low", "urgent", days_from_today(-10), today=TODAY)

        self.assertEqual(result.score, 5)
        self.assertTrue(result.reasoning.endswith("Priority Score: 5/5"))

    def test_low_scores_never_drop_below_one(self) -> None:
        """1 x 0.8 = 0.8 rounds to 1."""
        result = calculate_priority_score("Low", "Medium", "low", None, today=TODAY)

        self.assertEqual(result.score, 1)
        self.assertEqual(result.label, "low")

    # -----------------------------------------------------------------------
    # Input coercion
    # -----------------------------------------------------------------------

    def test_invalid_impact_and_effort_default_to_medium(self) -> None:
        result = calculate_priority_score("Enormous", None, "medium", None, today=TODAY)

        self.assertEqual(result.factors.impact, "Medium")
        self.assertEqual(result.factors.effort, "Medium")
        self.assertEqual(result.score, 2)

    def test_iso_string_due_date(self) -> None:
        result = calculate_priority_score("Medium", "Medium", "medium", "2024-01-17", today=TODAY)

        self.assertEqual(result.factors.days_until_due, 2)
        self.assertEqual(result.score, 3)

    def test_datetime_due_date_uses_its_calendar_day(self) -> None:
        due = datetime.datetime(2024, 1, 14, 23, 59)
        result = calculate_priority_score("Medium", "Medium", "medium", due, today=TODAY)

        self.assertTrue(result.factors.is_overdue)
        self.assertEqual(result.factors.days_until_due, -1)

    def test_unparseable_due_date_counts_as_none(self) -> None:
        result = calculate_priority_score("Medium", "Medium", "medium", "next tuesday", today=TODAY)

        self.assertFalse(result.factors.has_due_date)
        self.assertEqual(result.score, 2)
        self.assertEqual(result.reasoning, "AI Analysis: Impact: Medium, Effort: Medium. Priority Score: 2/5")


# ===========================================================================
# LABEL TESTS
# ===========================================================================


class TestScoreToPriorityLevel(SimpleTestCase):

    def test_exact_mapping(self) -> None:
        expected = {5: "urgent", 4: "high", 3: "medium", 2: "low", 1: "low"}
        for score, label in expected.items():
            with self.subTest(score=score):
                self.assertEqual(score_to_priority_level(score), label)

    def test_mapping_is_monotonic(self) -> None:
        order = ["low", "medium", "high", "urgent"]
        ranks = [order.index(score_to_priority_level(score)) for score in range(1, 6)]

        self.assertEqual(ranks, sorted(ranks))


# ===========================================================================
# REASONING EXTRACTION TESTS
# ===========================================================================


class TestExtractCategorization(SimpleTestCase):

    def test_reads_creation_stub_format(self) -> None:
        result = extract_categorization("AI Analysis: Impact=High, Effort=Low")

        self.assertEqual(result, TaskCategorization("High", "Low"))

    def test_reads_stored_reasoning_format(self) -> None:
        reasoning = "AI Analysis: Impact: Low, Effort: High, Due in 3 days. Priority Score: 2/5"

        self.assertEqual(extract_categorization(reasoning), TaskCategorization("Low", "High"))

    def test_missing_reasoning_defaults_to_medium(self) -> None:
        self.assertEqual(extract_categorization(None), TaskCategorization("Medium", "Medium"))
        self.assertEqual(extract_categorization(""), TaskCategorization("Medium", "Medium"))

    def test_malformed_values_default_to_medium(self) -> None:
        result = extract_categorization("Impact=Huge, Effort=Low")

        self.assertEqual(result.impact, "Medium")
        self.assertEqual(result.effort, "Low")

    def test_score_from_reasoning_round_trips_stored_text(self) -> None:
        first = calculate_priority_score("High", "Medium", "medium", None, today=TODAY)
        again = score_from_reasoning(first.reasoning, "medium", None, today=TODAY)

        self.assertEqual(again.score, first.score)
        self.assertEqual(again.reasoning, first.reasoning)

    def test_score_from_reasoning_without_pattern_uses_medium_medium(self) -> None:
        result = score_from_reasoning("Something else entirely", "medium", None, today=TODAY)

        self.assertEqual(result.score, 2)


# ===========================================================================
# MATRIX TESTS
# ===========================================================================


class TestBuildTaskMatrix(SimpleTestCase):

    def test_returns_nine_cells_in_row_major_order(self) -> None:
        cells = build_task_matrix([])

        self.assertEqual(len(cells), 9)
        self.assertEqual(
            [(cell["impact"], cell["effort"]) for cell in cells[:3]],
            [("High", "High"), ("High", "Medium"), ("High", "Low")],
        )
        self.assertEqual((cells[8]["impact"], cells[8]["effort"]), ("Low", "Low"))

    def test_cells_carry_action_labels(self) -> None:
        labels = {(cell["impact"], cell["effort"]): cell["label"] for cell in build_task_matrix([])}

        self.assertEqual(labels[("High", "Low")], "Do First")
        self.assertEqual(labels[("High", "Medium")], "Schedule")
        self.assertEqual(labels[("Medium", "Medium")], "Consider")
        self.assertEqual(labels[("Low", "High")], "Don't Do")
        self.assertEqual(len(set(labels.values())), 9)

    def test_tasks_land_in_their_reasoning_cell(self) -> None:
        quick_win = SimpleNamespace(ai_reasoning="AI Analysis: Impact: High, Effort: Low. Priority Score: 5/5")
        chore = SimpleNamespace(ai_reasoning="AI Analysis: Impact: Low, Effort: Low. Priority Score: 2/5")
        unknown = SimpleNamespace(ai_reasoning="")

        cells = build_task_matrix([quick_win, chore, unknown])
        by_key = {(cell["impact"], cell["effort"]): cell["tasks"] for cell in cells}

        self.assertEqual(by_key[("High", "Low")], [quick_win])
        self.assertEqual(by_key[("Low", "Low")], [chore])
        self.assertEqual(by_key[("Medium", "Medium")], [unknown])
