# tasks/ai_engine/celery_tasks.py

import logging
from typing import Any, Dict

from celery import shared_task
from django.contrib.auth import get_user_model

# Configure logging for background worker monitoring
logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    time_limit=120,         # Hard limit for the task process
    soft_time_limit=110     # Soft limit to allow cleanup
)
def rescore_open_tasks(self, user_id: int, reclassify: bool = True) -> Dict[str, Any]:
    """
    Worker: refresh score and reasoning of a user's open tasks.
    Input = (user_id, reclassify) only; everything else is read from the DB.
    The service never raises, so failures are reported in the result rather
    than retried.
    """
    from ..services import TaskRecordService

    logger.info(f"Rescoring started for user {user_id} (reclassify={reclassify})")

    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None:
        logger.warning(f"User {user_id} not found. Exiting worker.")
        return {"success": False, "rescored": 0, "error": "User not found"}

    result = TaskRecordService().rescore_tasks(user, reclassify=reclassify)
    if not result.success:
        logger.error(f"Rescoring failed for user {user_id}: {result.error}")
        return {"success": False, "rescored": 0, "error": result.error}

    logger.info(f"Rescored {len(result.data)} tasks for user {user_id}")
    return {"success": True, "rescored": len(result.data), "error": None}
