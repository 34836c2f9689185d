"""
Tasks Module
============

Background task base class, task service, and Celery worker entry points.

Components:
- base: BaseTask template class
- service: Task creation, sequencing, and status tracking
- worker: Celery app and queued task execution
"""

from .base import BaseTask, TaskError
from .service import TaskService

__all__ = ["BaseTask", "TaskError", "TaskService"]
