"""Task shapes accepted by the pipeline and how each one is invoked."""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import TaskTypeError
from .protocol import Continuation, TaskHandler


class TaskKind(Enum):
    """Calling convention of a registered task.

    Attributes:
        CALLABLE: Invoked as ``task(data, next)``.
        CONSTRUCTIBLE: A class, instantiated as ``task(data, next)``; the
            instance is discarded.
        HANDLER: An object invoked as ``task.handle(data, next)``.
    """

    CALLABLE = "callable"
    CONSTRUCTIBLE = "constructible"
    HANDLER = "handler"


@dataclass(frozen=True)
class TaskEntry:
    """A registered task together with its resolved kind."""

    task: Any
    kind: TaskKind

    @property
    def label(self) -> str:
        """Human readable name used in log records."""
        name = getattr(self.task, "__qualname__", None)
        if name is None:
            name = type(self.task).__qualname__
        return name


def classify_task(task: Any) -> TaskKind:
    """Resolve the calling convention of *task*.

    Classes are checked first so that they are never mistaken for plain
    callables. Callable instances are plain callables even when they also
    define ``handle``.

    Raises:
        TaskTypeError: If *task* is neither callable nor exposes ``handle``.
    """
    if inspect.isclass(task):
        return TaskKind.CONSTRUCTIBLE
    if callable(task):
        return TaskKind.CALLABLE
    if isinstance(task, TaskHandler):
        return TaskKind.HANDLER
    raise TaskTypeError(
        "Task must be a callable, a class, or an object with a "
        f"handle(data, continuation) method; got {type(task).__name__}."
    )


def invoke_task(entry: TaskEntry, data: Any, next: Continuation) -> Any:
    """Call the task held by *entry* and return what the call returned.

    The return value matters only when it is awaitable; the engine awaits it
    to surface exceptions raised by ``async`` tasks. Constructing a
    ``CONSTRUCTIBLE`` task always yields ``None``.

    Raises:
        TaskTypeError: If a ``HANDLER`` no longer has a callable ``handle``.
    """
    if entry.kind is TaskKind.CONSTRUCTIBLE:
        entry.task(data, next)
        return None
    if entry.kind is TaskKind.CALLABLE:
        return entry.task(data, next)

    handle = getattr(entry.task, "handle", None)
    if not callable(handle):
        raise TaskTypeError(
            "Object tasks must implement a handle(data, continuation) method."
        )
    return handle(data, next)
