"""
Celery Worker
=============

Celery app and job definitions for running background tasks out of process.
Each job builds a task service, creates the requested task, and runs it to
completion.
"""

from typing import Any, Dict, Optional

from celery import Celery  # type: ignore
from celery.signals import task_failure, task_postrun, task_prerun, worker_ready  # type: ignore

from contentkit.config.logging import get_logger
from contentkit.config.settings import get_settings
from contentkit.core.tasks.service import TaskService

logger = get_logger(__name__)

settings = get_settings()
celery_app = Celery(  # type: ignore[misc]
    "contentkit_tasks",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["contentkit.core.tasks.worker"],
)

celery_app.conf.update(  # type: ignore[attr-defined]
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=settings.celery_task_timeout,
    task_soft_time_limit=max(settings.celery_task_timeout - 30, 1),
    task_always_eager=settings.task_always_eager,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)


@celery_app.task(bind=True, name="contentkit.run_task")  # type: ignore
def run_task_job(
    self: Any,
    type_name: str,
    description: Optional[str] = None,
    task_settings: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Run a registered task type to completion.

    Args:
        type_name: Registered task type name
        description: Optional description override
        task_settings: Settings passed to the task

    Returns:
        The final task record as a JSON-friendly dict
    """
    service = TaskService()
    record = service.create_task(type_name, description, task_settings)
    logger.info("Running queued task", celery_id=self.request.id, task_id=record.id, type=type_name)
    service.run_task(record)
    return record.model_dump(mode="json")


def queue_task(
    type_name: str,
    description: Optional[str] = None,
    task_settings: Optional[Dict[str, Any]] = None,
) -> str:
    """Send a task to the worker queue and return the Celery task id."""
    result = run_task_job.delay(type_name, description, task_settings)
    logger.info("Task queued", celery_id=result.id, type=type_name)
    return str(result.id)


@task_prerun.connect  # type: ignore[misc]
def task_prerun_handler(sender=None, task_id=None, task=None, **kwargs):  # type: ignore[misc]
    logger.info("Celery task starting", celery_id=task_id, name=getattr(task, "name", None))


@task_postrun.connect  # type: ignore[misc]
def task_postrun_handler(sender=None, task_id=None, task=None, state=None, **kwargs):  # type: ignore[misc]
    logger.info("Celery task finished", celery_id=task_id, name=getattr(task, "name", None), state=state)


@task_failure.connect  # type: ignore[misc]
def task_failure_handler(sender=None, task_id=None, exception=None, **kwargs):  # type: ignore[misc]
    logger.error("Celery task failed", celery_id=task_id, error=str(exception))


@worker_ready.connect  # type: ignore[misc]
def worker_ready_handler(sender=None, **kwargs):  # type: ignore[misc]
    logger.info("Celery worker ready", hostname=getattr(sender, "hostname", None))
