# tasks/ai_engine/cache.py

import hashlib
import logging
from typing import Callable, Optional

from django.conf import settings
from django.core.cache import caches

from .contracts import TaskCategorization

logger = logging.getLogger(__name__)


class ClassificationCache:
    """
    Memoizes impact/effort classifications by normalized task title.

    Backed by Django's cache framework, so the store is whatever the alias
    points at: per-process LocMemCache by default, Redis when shared across
    instances. Entries expire ``ttl`` seconds after insertion; the backend
    drops expired keys lazily when they are read.

    Fallback categorizations are never stored, so one failed API call does
    not pin a title to Medium/Medium for the whole TTL.
    """

    DEFAULT_TTL = 3600

    def __init__(
        self,
        ttl: Optional[int] = None,
        version: str = "v1",
        cache_alias: str = "default"
    ):
        """
        Args:
            ttl: Time-to-live in seconds (default: AI_CLASSIFICATION_CACHE_TTL, one hour).
            version: Key prefix version, bump to invalidate after prompt changes.
            cache_alias: The Django cache alias to utilize.
        """
        if ttl is None:
            ttl = getattr(settings, 'AI_CLASSIFICATION_CACHE_TTL', self.DEFAULT_TTL)
        self.ttl = ttl
        self.version = version
        self.cache_alias = cache_alias

    @property
    def backend(self):
        return caches[self.cache_alias]

    def get(self, task_title: str) -> Optional[TaskCategorization]:
        """Return the cached categorization, or None on miss/expiry/backend error."""
        cache_key = self._generate_key(task_title)
        try:
            cached = self.backend.get(cache_key)
        except Exception as e:
            logger.error(f"Classification cache retrieval failure: {str(e)}")
            return None

        if cached is None:
            return None

        logger.debug(f"AI Cache Hit: {cache_key}")
        try:
            return TaskCategorization.from_dict(cached)
        except (KeyError, TypeError):
            logger.warning(f"Discarding malformed cache entry {cache_key}")
            return None

    def put(self, task_title: str, categorization: TaskCategorization) -> None:
        if categorization.is_fallback:
            return

        cache_key = self._generate_key(task_title)
        try:
            self.backend.set(cache_key, categorization.as_dict(), timeout=self.ttl)
        except Exception as e:
            logger.error(f"Classification cache persistence failure: {str(e)}")

    def get_or_classify(
        self,
        task_title: str,
        classify_func: Callable[[str], TaskCategorization]
    ) -> TaskCategorization:
        """
        Return the cached categorization or run ``classify_func`` on a miss
        and cache its answer.
        """
        cached = self.get(task_title)
        if cached is not None:
            return cached

        logger.info(f"AI Cache Miss for '{task_title}'. Invoking classifier.")
        categorization = classify_func(task_title)
        self.put(task_title, categorization)
        return categorization

    def _generate_key(self, title: str) -> str:
        """Case-insensitive, whitespace-trimmed key; hashed to stay backend-safe."""
        normalized = title.strip().lower()
        digest = hashlib.sha256(normalized.encode()).hexdigest()
        return f"ai_category_{self.version}_{digest}"
