"""
Task Service
============

Create, sequence, and track background tasks. Steps of a task run in order;
the first failing step fails the task.
"""

from typing import Any, Dict, List, Optional, Type, Union
from datetime import datetime, timezone
import threading

from contentkit.config.logging import get_logger
from contentkit.core.tasks.base import BaseTask, TaskError
from contentkit.models.schemas import TaskRecord, TaskStatus

logger = get_logger(__name__)

# Task types known to every service, keyed by name
TASK_TYPES: Dict[str, Type[BaseTask]] = {}


def register_task_type(task_class: Type[BaseTask]) -> Type[BaseTask]:
    """Class decorator that makes a task type available to every service."""
    TASK_TYPES[task_class.__name__] = task_class
    return task_class


class TaskService:
    """
    Task service for creating and running background tasks.
    Used directly in-process and by the Celery worker.
    """

    def __init__(self) -> None:
        self.logger = logger.bind(component="task_service")
        self.types: Dict[str, Type[BaseTask]] = dict(TASK_TYPES)
        self.tasks: Dict[str, TaskRecord] = {}
        self.queue: List[str] = []
        self._lock = threading.RLock()

    def register(self, task_class: Type[BaseTask], name: Optional[str] = None) -> None:
        self.types[name or task_class.__name__] = task_class

    def _resolve_type(self, task_type: Union[str, Type[BaseTask]]) -> str:
        if isinstance(task_type, type):
            if not issubclass(task_type, BaseTask):
                raise TaskError(f"{task_type.__name__} is not a task type")
            for name, registered in self.types.items():
                if registered is task_type:
                    return name
            self.register(task_type)
            return task_type.__name__

        if task_type not in self.types:
            raise TaskError(f"Unknown task type: {task_type}")
        return task_type

    def create_task(
        self,
        task_type: Union[str, Type[BaseTask]],
        description: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
        parent_id: Optional[str] = None,
    ) -> TaskRecord:
        """
        Create a pending task.

        Args:
            task_type: Registered type name or task class
            description: Overrides the task's default description
            settings: Settings passed to the task
            parent_id: Parent task id, for sub-tasks

        Returns:
            The pending task record
        """
        type_name = self._resolve_type(task_type)
        record = TaskRecord(
            type=type_name,
            description=description,
            settings=dict(settings or {}),
            parent_id=parent_id,
        )
        record.description = self.instantiate(record).get_description()

        with self._lock:
            self.tasks[record.id] = record
            # Sub-tasks run inline under their parent, not from the queue
            if parent_id is None:
                self.queue.append(record.id)

        self.logger.info("Task created", task_id=record.id, type=type_name, parent_id=parent_id)
        return record

    def instantiate(self, record: TaskRecord) -> BaseTask:
        task_class = self.types.get(record.type)
        if task_class is None:
            raise TaskError(f"Unknown task type: {record.type}")
        return task_class(
            id=record.id,
            description=record.description,
            settings=record.settings,
            parent_id=record.parent_id,
            service=self,
        )

    def run_task(self, record: TaskRecord) -> bool:
        """
        Run every step of a task in order.

        Returns:
            True if all steps succeeded
        """
        with self._lock:
            if record.id in self.queue:
                self.queue.remove(record.id)
            self.tasks[record.id] = record

        task = self.instantiate(record)

        try:
            total_steps = int(task.get_total_steps())
        except Exception as e:
            return self._fail(record, f"Could not determine step count: {e}")

        record.total_steps = total_steps
        record.current_step = 0
        record.error = None
        record.status = TaskStatus.RUNNING
        record.touch()
        self.logger.info("Task started", task_id=record.id, type=record.type, total_steps=total_steps)

        for step in range(total_steps):
            try:
                result = task.run_step(step)
            except Exception as e:
                self.logger.exception("Task step raised", task_id=record.id, step=step)
                return self._fail(record, str(e) or type(e).__name__)

            if result is not True:
                return self._fail(record, result if isinstance(result, str) else None)

            record.current_step = step + 1
            record.touch()
            self.logger.debug("Task step completed", task_id=record.id, step=step, progress=record.progress)

        record.status = TaskStatus.COMPLETED
        record.completed_at = datetime.now(timezone.utc)
        record.touch()
        self.logger.info("Task completed", task_id=record.id, type=record.type)
        return True

    def _fail(self, record: TaskRecord, error: Optional[str]) -> bool:
        record.status = TaskStatus.FAILED
        record.error = error
        record.touch()
        self.logger.error(
            "Task failed", task_id=record.id, type=record.type, step=record.current_step, error=error
        )
        return False

    def get_task_status(self, task_id: str) -> Optional[TaskRecord]:
        return self.tasks.get(task_id)

    def get_pending_tasks(self) -> List[TaskRecord]:
        with self._lock:
            return [self.tasks[task_id] for task_id in self.queue]

    def get_next_pending_task(self) -> Optional[TaskRecord]:
        with self._lock:
            return self.tasks[self.queue[0]] if self.queue else None

    def get_sub_tasks(self, task_id: str) -> List[TaskRecord]:
        return [record for record in self.tasks.values() if record.parent_id == task_id]

    def run_pending_tasks(self) -> int:
        """Run queued tasks in FIFO order; return how many completed."""
        completed = 0
        while True:
            record = self.get_next_pending_task()
            if record is None:
                return completed
            if self.run_task(record):
                completed += 1

    def rerun_task(self, task_id: str) -> bool:
        record = self.tasks.get(task_id)
        if record is None:
            raise TaskError(f"No task exists with the ID {task_id}")
        if record.status != TaskStatus.FAILED:
            return False
        record.status = TaskStatus.PENDING
        record.current_step = 0
        record.error = None
        record.touch()
        with self._lock:
            if record.parent_id is None and record.id not in self.queue:
                self.queue.append(record.id)
        return True

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            record = self.tasks.pop(task_id, None)
            if record is None:
                return False
            if task_id in self.queue:
                self.queue.remove(task_id)
            for child in self.get_sub_tasks(task_id):
                self.delete_task(child.id)
        return True

    def get_total_tasks(self) -> int:
        return len(self.tasks)
