"""Structural contracts shared by tasks and the engine.

A task is handed the current payload and a :class:`Continuation`.  Calling
the continuation is the only way a task reports back::

    def validate(data, next):
        if "user_id" not in data:
            return next(ValueError("user_id is missing"))
        next(None, {**data, "validated": True})

Handler objects implement :class:`TaskHandler` instead of being callable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Self, runtime_checkable


class _Missing:
    """Marker for a continuation called without replacement data."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class Continuation(Protocol):
    """Callback a task invokes exactly once to continue or abort the run.

    ``continuation(error)`` aborts with *error*; ``continuation(None, data)``
    replaces the payload; ``continuation()`` passes the payload through.
    """

    def __call__(self, error: Any = None, data: Any = MISSING) -> None: ...


@runtime_checkable
class TaskHandler(Protocol):
    """Object task exposing ``handle(data, continuation)``."""

    def handle(self, data: Any, next: Continuation) -> Any: ...


@dataclass(frozen=True)
class StepResult:
    """Outcome of a single task activation.

    Built by the engine from one continuation call: either a success
    carrying the payload for the next task, or a failure carrying the error
    that ends the run.
    """

    index: int
    data: Any = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, index: int, data: Any) -> Self:
        return cls(index=index, data=data)

    @classmethod
    def failure(cls, index: int, error: BaseException) -> Self:
        return cls(index=index, error=error)
