# tasks/ai_engine/classifier.py
"""
Task Classifier
===============

Gateway to the OpenAI Chat Completions API that labels a task title with
its business impact and implementation effort.

Contract:
---------
    categorize_task("Fix production bug") -> TaskCategorization("High", "Low")
    categorize_tasks([...N titles...])    -> [TaskCategorization] * N

Failure Policy:
---------------
Classification is best effort. Missing configuration, API errors, empty or
non-JSON content and values outside High/Medium/Low all degrade to the
neutral Medium/Medium categorization. Nothing is raised to the caller.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from django.conf import settings
from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AuthenticationError,
    OpenAI,
    RateLimitError,
)

from ..exceptions import ClassificationFailure
from .contracts import CATEGORY_LEVELS, TaskCategorization, fallback_categorization

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "You are an expert project manager and business analyst specializing in "
    "task prioritization. Analyze tasks based on their business impact and "
    "implementation effort to provide accurate categorization."
)

CATEGORY_DEFINITIONS = """IMPACT refers to business value/urgency:
- High: Critical to business goals, has immediate consequences, or generates significant value
- Medium: Important but not critical, contributes to goals but with less urgency
- Low: Nice to have, minimal business impact, can be delayed

EFFORT refers to time/complexity:
- High: Takes days/weeks, requires significant resources, complex implementation
- Medium: Takes hours/days, moderate complexity, requires some planning
- Low: Takes minutes/hours, simple, straightforward to implement"""

EXAMPLES = """Examples:
- "Fix critical production bug" -> {"impact": "High", "effort": "Low"}
- "Build new reporting dashboard" -> {"impact": "Medium", "effort": "High"}
- "Update button color" -> {"impact": "Low", "effort": "Low"}
- "Implement user authentication" -> {"impact": "High", "effort": "High"}"""


class TaskClassifier:
    """
    Classifies task titles by impact and effort.

    Uses DEFERRED INITIALIZATION like the rest of the AI engine: a missing
    API key does not raise in ``__init__``. ``is_configured`` stays False and
    every call returns the fallback categorization.

    Attributes:
        model (str): Chat model used for classification.
        timeout (float): Per-request timeout in seconds.
        max_retries (int): Retries performed by the OpenAI client itself.
        client (OpenAI | None): Initialized client, or None if unavailable.
        is_configured (bool): Whether requests will actually be sent.
        configuration_error (str | None): Why the classifier is unavailable.
    """

    DEFAULT_MODEL: str = "gpt-3.5-turbo"
    DEFAULT_TEMPERATURE: float = 0.3
    DEFAULT_MAX_TOKENS: int = 200
    BATCH_MAX_TOKENS: int = 600
    DEFAULT_TIMEOUT: float = 10.0
    DEFAULT_MAX_RETRIES: int = 2

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        **client_kwargs: Any,
    ) -> None:
        self.model: str = model or getattr(settings, "OPENAI_MODEL", None) or self.DEFAULT_MODEL
        self.timeout: float = timeout or getattr(settings, "AI_CLASSIFIER_TIMEOUT", None) or self.DEFAULT_TIMEOUT
        if max_retries is None:
            max_retries = getattr(settings, "AI_CLASSIFIER_MAX_RETRIES", self.DEFAULT_MAX_RETRIES)
        self.max_retries: int = max_retries
        self._client_kwargs: Dict[str, Any] = client_kwargs

        self.client: Optional[OpenAI] = None
        self.is_configured: bool = False
        self.configuration_error: Optional[str] = None

        self._configure(api_key)

    def _configure(self, api_key: Optional[str] = None) -> None:
        resolved_key = api_key or getattr(settings, "OPENAI_API_KEY", None) or ""
        if not resolved_key:
            self.configuration_error = (
                "OPENAI_API_KEY is not configured. "
                "Set the OPENAI_API_KEY environment variable or Django setting."
            )
            logger.warning(f"TaskClassifier: {self.configuration_error}")
            return

        try:
            self.client = OpenAI(
                api_key=resolved_key,
                max_retries=self.max_retries,
                **self._client_kwargs,
            )
            self.is_configured = True
            self.configuration_error = None
            logger.info(f"TaskClassifier initialized with model={self.model}")
        except Exception as e:
            self.configuration_error = f"Failed to initialize OpenAI client: {e}"
            logger.error(f"TaskClassifier: {self.configuration_error}")
            self.client = None
            self.is_configured = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def categorize_task(self, task_title: str) -> TaskCategorization:
        """
        Classify a single task title.

        Returns the model's answer, or Medium/Medium (``is_fallback=True``)
        when anything goes wrong.
        """
        messages = self._build_messages(self._single_prompt(task_title))

        try:
            raw_content = self._complete(messages, self.DEFAULT_MAX_TOKENS)
            categorization = self._parse_categorization(json.loads(raw_content))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode classification for '{task_title}' as JSON: {e}")
            return fallback_categorization()
        except ClassificationFailure as e:
            logger.error(f"Classification failed for '{task_title}': {e}")
            return fallback_categorization()

        logger.info(
            f"TaskClassifier: '{task_title}' -> "
            f"impact={categorization.impact}, effort={categorization.effort}"
        )
        return categorization

    def categorize_tasks(self, task_titles: Sequence[str]) -> List[TaskCategorization]:
        """
        Classify several titles in a single request.

        The model must answer with a JSON array of exactly one object per
        title. A wrong length or unparseable reply falls back for every
        title; an invalid object inside a well-sized array falls back for
        that title only.
        """
        titles = list(task_titles)
        if not titles:
            return []

        messages = self._build_messages(self._batch_prompt(titles))

        try:
            raw_content = self._complete(messages, self.BATCH_MAX_TOKENS)
            parsed = json.loads(raw_content)
            if not isinstance(parsed, list) or len(parsed) != len(titles):
                raise ClassificationFailure(
                    f"Expected a JSON array of {len(titles)} items"
                )
        except json.JSONDecodeError as e:
            logger.error(f"Failed to decode batch classification as JSON: {e}")
            return [fallback_categorization() for _ in titles]
        except ClassificationFailure as e:
            logger.error(f"Batch classification failed: {e}")
            return [fallback_categorization() for _ in titles]

        results: List[TaskCategorization] = []
        for title, item in zip(titles, parsed):
            try:
                results.append(self._parse_categorization(item))
            except ClassificationFailure as e:
                logger.warning(f"Invalid batch item for '{title}': {e}")
                results.append(fallback_categorization())
        return results

    def health_check(self) -> Dict[str, Any]:
        return {
            "is_configured": self.is_configured,
            "model": self.model,
            "timeout": self.timeout,
            "configuration_error": self.configuration_error,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _complete(self, messages: List[Dict[str, str]], max_tokens: int) -> str:
        """
        Send the prompt and return the trimmed reply text.

        Every provider-side failure is re-raised as ClassificationFailure so
        callers only have one thing to catch.
        """
        if not self.is_configured or self.client is None:
            raise ClassificationFailure(
                f"Classifier not configured: {self.configuration_error}"
            )

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.DEFAULT_TEMPERATURE,
                max_tokens=max_tokens,
                timeout=self.timeout,
            )
        except AuthenticationError as e:
            raise ClassificationFailure(f"OpenAI authentication failed: {e}") from e
        except RateLimitError as e:
            raise ClassificationFailure(f"OpenAI rate limit exceeded: {e}") from e
        except APITimeoutError as e:
            raise ClassificationFailure(f"OpenAI API timeout: {e}") from e
        except APIConnectionError as e:
            raise ClassificationFailure(f"OpenAI connection error: {e}") from e
        except APIStatusError as e:
            raise ClassificationFailure(f"OpenAI API error (status {e.status_code}): {e}") from e
        except Exception as e:
            logger.exception(f"Unexpected error calling OpenAI: {e}")
            raise ClassificationFailure(f"Unexpected error: {type(e).__name__}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise ClassificationFailure("Malformed completion payload") from e

        content = (content or "").strip()
        if not content:
            raise ClassificationFailure("No response from OpenAI")

        logger.debug(f"TaskClassifier: Raw response: {content[:200]}")
        return content

    def _parse_categorization(self, data: Any) -> TaskCategorization:
        if not isinstance(data, dict):
            raise ClassificationFailure(f"Expected a JSON object, got {type(data).__name__}")

        impact = data.get("impact")
        effort = data.get("effort")
        if impact not in CATEGORY_LEVELS or effort not in CATEGORY_LEVELS:
            raise ClassificationFailure(f"Invalid response structure: {data!r}")

        return TaskCategorization(impact=impact, effort=effort)

    def _build_messages(self, prompt: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

    def _single_prompt(self, title: str) -> str:
        return (
            "Analyze this task and categorize it based on business impact and "
            "effort required. Return JSON: "
            '{"impact": "High|Medium|Low", "effort": "High|Medium|Low"}.\n\n'
            f"{CATEGORY_DEFINITIONS}\n\n"
            f"{EXAMPLES}\n\n"
            f'Task: "{title}"\n\n'
            "Return only valid JSON with no additional text."
        )

    def _batch_prompt(self, titles: List[str]) -> str:
        numbered = "\n".join(f'{index}. "{title}"' for index, title in enumerate(titles, start=1))
        return (
            "Analyze these tasks and categorize each one based on business "
            "impact and effort required. Return JSON array: "
            '[{"impact": "High|Medium|Low", "effort": "High|Medium|Low"}].\n\n'
            f"{CATEGORY_DEFINITIONS}\n\n"
            f"Tasks:\n{numbered}\n\n"
            "Return only valid JSON array with no additional text."
        )
