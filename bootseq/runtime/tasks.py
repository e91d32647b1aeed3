"""Named task registry populated by task loaders.

Task loaders registered on the orchestrator receive a ``TaskRegistry``
and define tasks on it. Running a task hands it the application context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from bootseq.runtime.errors import CallbackError, ConfigurationError, DuplicateName

logger = logging.getLogger("bootseq.runtime.tasks")

TaskCallable = Callable[[Any], Any]


@dataclass(frozen=True)
class TaskDefinition:
    name: str
    callback: TaskCallable
    description: str = ""


class TaskRegistry:
    """Ordered collection of named tasks."""

    def __init__(self) -> None:
        self._tasks: Dict[str, TaskDefinition] = {}

    def define(self, name: str, callback: TaskCallable, description: str = "") -> TaskDefinition:
        """Define a task.

        Raises:
            DuplicateName: If a task with ``name`` already exists.
        """
        if name in self._tasks:
            raise DuplicateName(name, kind="task")
        task = TaskDefinition(name=name, callback=callback, description=description)
        self._tasks[name] = task
        logger.debug("Task %s defined", name)
        return task

    def get(self, name: str) -> Optional[TaskDefinition]:
        return self._tasks.get(name)

    def names(self) -> List[str]:
        return list(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def run(self, name: str, context: Any) -> Any:
        """Run a task with the application context.

        Raises:
            ConfigurationError: If no task is named ``name``.
            CallbackError: If the task raises.
        """
        task = self._tasks.get(name)
        if task is None:
            raise ConfigurationError(
                f"Unknown task {name!r} (defined: {', '.join(self._tasks) or 'none'})"
            )
        logger.info("Running task %s", name)
        try:
            return task.callback(context)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise CallbackError("tasks", name, exc, kind="task") from exc


__all__ = ["TaskCallable", "TaskDefinition", "TaskRegistry"]
