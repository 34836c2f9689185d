"""
Task base class.

A task is a unit of background work split into numbered steps. The task
service asks for the step count, then calls ``run_step`` for each step in
order.
"""

import re
from typing import Any, Dict, Optional, TYPE_CHECKING, Type, Union

if TYPE_CHECKING:
    from contentkit.core.tasks.service import TaskService

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

StepResult = Union[bool, str]


class TaskError(Exception):
    """Raised for unknown task types or tasks that cannot be run."""

    pass


class BaseTask:
    """
    Base class for background tasks.

    Subclasses override ``get_total_steps`` and ``run_step``. ``run_step``
    returns True on success; False or an error message fails the task.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        description: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
        parent_id: Optional[str] = None,
        service: Optional["TaskService"] = None,
    ) -> None:
        self.id = id
        self.description = description
        self.settings: Dict[str, Any] = settings if settings is not None else {}
        self.parent_id = parent_id
        self.service = service

    @classmethod
    def get_name(cls) -> str:
        name = cls.__name__
        if name.endswith("Task") and name != "Task":
            name = name[: -len("Task")]
        return _CAMEL_BOUNDARY.sub(" ", name)

    def get_description(self) -> str:
        return self.description or self.get_name()

    def get_total_steps(self) -> int:
        return 0

    def run_step(self, step: int) -> StepResult:
        return True

    def run_sub_task(
        self,
        task_type: Union[str, Type["BaseTask"]],
        description: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """Create a task under this one and run it to completion."""
        if self.service is None:
            raise TaskError(f"{type(self).__name__} has no task service to run sub-tasks with")

        record = self.service.create_task(task_type, description, settings, parent_id=self.id)
        return self.service.run_task(record)
