"""Sequential asynchronous task runner.

Public surface::

    from event_pipeline import (
        AsyncEventPipeline,
        PipelineConfig,
        Continuation,
        TaskHandler,
        TaskKind,
        TaskEntry,
        StepResult,
        MISSING,
        PipelineError,
        TaskTypeError,
        ContinuationError,
        TaskSignalError,
    )
"""

from .config import PipelineConfig
from .errors import ContinuationError, PipelineError, TaskSignalError, TaskTypeError
from .pipeline import AsyncEventPipeline
from .protocol import MISSING, Continuation, StepResult, TaskHandler
from .tasks import TaskEntry, TaskKind, classify_task

__all__ = [
    "AsyncEventPipeline",
    "PipelineConfig",
    "Continuation",
    "TaskHandler",
    "TaskKind",
    "TaskEntry",
    "StepResult",
    "MISSING",
    "classify_task",
    "PipelineError",
    "TaskTypeError",
    "ContinuationError",
    "TaskSignalError",
]
