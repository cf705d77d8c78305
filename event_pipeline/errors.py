"""Exceptions raised by the pipeline engine."""

from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base class for every error the engine itself raises."""


class TaskTypeError(PipelineError, TypeError):
    """A task has a shape the engine cannot invoke.

    Raised by :meth:`AsyncEventPipeline.add` for values that are neither
    callable nor handler objects, and at run time for handler objects
    whose ``handle`` attribute is no longer callable.
    """


class ContinuationError(PipelineError, RuntimeError):
    """A task invoked its continuation more than once."""

    def __init__(self, index: int, message: str | None = None) -> None:
        self.index = index
        super().__init__(
            message
            or f"Continuation invoked multiple times for the same task (index {index})."
        )


class TaskSignalError(PipelineError):
    """Wraps a truthy, non-exception error value passed to a continuation.

    The original value is kept on :attr:`error`.
    """

    def __init__(self, error: Any) -> None:
        self.error = error
        super().__init__(str(error))
