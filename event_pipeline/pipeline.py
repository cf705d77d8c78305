"""Ordered task registry and sequential execution engine."""

from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
from typing import Any, Iterable, Self

from .config import PipelineConfig
from .errors import ContinuationError, TaskSignalError
from .protocol import MISSING, Continuation, StepResult
from .tasks import TaskEntry, classify_task, invoke_task

logger = logging.getLogger(__name__)


def _as_exception(error: Any) -> BaseException:
    if isinstance(error, BaseException):
        return error
    return TaskSignalError(error)


class _Execution:
    """State of a single ``execute`` call.

    Holds the cursor (index of the only task allowed to continue), the
    outcome future and any awaitables returned by tasks. Every continuation
    is marshalled onto the owning event loop, so all cursor reads and writes
    happen on one thread.
    """

    def __init__(
        self,
        entries: tuple[TaskEntry, ...],
        config: PipelineConfig,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        self.run_id = uuid.uuid4().hex[:8]
        self._entries = entries
        self._config = config
        self._loop = loop
        self._cursor = 0
        self._outcome: asyncio.Future = loop.create_future()
        self._pending: set[asyncio.Future] = set()

    @property
    def settled(self) -> bool:
        return self._outcome.done()

    def start(self, data: Any) -> asyncio.Future:
        logger.debug(
            f"[{self._config.name}:{self.run_id}] starting run with "
            f"{len(self._entries)} task(s), payload={self._config.format_payload(data)}"
        )
        self._step(0, data)
        return self._outcome

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------

    def _step(self, index: int, data: Any) -> None:
        if self.settled:
            return

        if index >= len(self._entries):
            logger.debug(
                f"[{self._config.name}:{self.run_id}] completed, "
                f"payload={self._config.format_payload(data)}"
            )
            self._outcome.set_result(data)
            return

        entry = self._entries[index]
        logger.debug(
            f"[{self._config.name}:{self.run_id}] task {index} "
            f"({entry.kind.value} {entry.label}) started"
        )
        try:
            result = invoke_task(entry, data, self._continuation(index, data))
        except Exception as exc:
            self._fail(StepResult.failure(index, exc))
            return

        if inspect.isawaitable(result):
            self._watch(index, result)

    def _continuation(self, index: int, current: Any) -> Continuation:
        def continuation(error: Any = None, data: Any = MISSING) -> None:
            if self._loop.is_closed():
                logger.warning(
                    f"[{self._config.name}:{self.run_id}] task {index} continued "
                    "after its event loop was closed; ignoring"
                )
                return
            self._loop.call_soon_threadsafe(
                self._resolve, index, current, error, data
            )

        return continuation

    def _resolve(self, index: int, current: Any, error: Any, data: Any) -> None:
        if self.settled:
            if index != self._cursor:
                logger.warning(
                    f"[{self._config.name}:{self.run_id}] task {index} invoked its "
                    "continuation again after the run settled; ignoring"
                )
            else:
                logger.warning(
                    f"[{self._config.name}:{self.run_id}] task {index} continued "
                    "after the run settled; ignoring"
                )
            return

        if index != self._cursor:
            self._fail(StepResult.failure(index, ContinuationError(index)))
            return

        self._cursor = index + 1
        try:
            failed = bool(error)
        except Exception as exc:
            result = StepResult.failure(index, exc)
        else:
            if failed:
                result = StepResult.failure(index, _as_exception(error))
            else:
                result = StepResult.success(
                    index, current if data is MISSING else data
                )
        self._advance(result)

    def _advance(self, result: StepResult) -> None:
        if not result.ok:
            self._fail(result)
            return
        logger.debug(
            f"[{self._config.name}:{self.run_id}] task {result.index} continued, "
            f"payload={self._config.format_payload(result.data)}"
        )
        self._loop.call_soon(self._step, result.index + 1, result.data)

    # ------------------------------------------------------------------
    # Failure channel
    # ------------------------------------------------------------------

    def _watch(self, index: int, awaitable: Any) -> None:
        future = asyncio.ensure_future(awaitable)
        self._pending.add(future)

        def _on_done(fut: asyncio.Future) -> None:
            self._pending.discard(fut)
            if fut.cancelled():
                return
            exc = fut.exception()
            if exc is None:
                return
            if self.settled:
                logger.warning(
                    f"[{self._config.name}:{self.run_id}] task {index} raised "
                    f"after the run settled: {exc!r}"
                )
                return
            self._fail(StepResult.failure(index, exc))

        future.add_done_callback(_on_done)

    def _fail(self, result: StepResult) -> None:
        error = result.error
        logger.debug(
            f"[{self._config.name}:{self.run_id}] task {result.index} failed: "
            f"{error!r}"
        )
        # Futures refuse StopIteration; it surfaces as a chained RuntimeError.
        if isinstance(error, StopIteration):
            wrapped = RuntimeError(f"task {result.index} raised StopIteration")
            wrapped.__cause__ = error
            error = wrapped
        self._outcome.set_exception(error)


class AsyncEventPipeline:
    """Runs registered tasks one after another, threading a payload through.

    Each task receives ``(data, next)`` and must call ``next`` once:
    ``next(error)`` aborts the run, ``next(None, new_data)`` replaces the
    payload and ``next()`` passes it through unchanged.  Tasks may be plain
    or ``async`` callables, classes, or objects with a ``handle`` method.

    Example::

        pipeline = AsyncEventPipeline()
        pipeline.add(lambda data, next: next(None, {"n": data["n"] + 1}))
        pipeline.use(lambda data, next: next(None, {"n": data["n"] * 10}))
        assert await pipeline.execute({"n": 1}) == {"n": 20}

    Args:
        tasks: Optional tasks to register up front, in order.
        config: Logging settings; defaults to :class:`PipelineConfig`.
    """

    def __init__(
        self,
        tasks: Iterable[Any] | None = None,
        *,
        config: PipelineConfig | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self._entries: list[TaskEntry] = []
        for task in tasks or ():
            self.add(task)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def add(self, task: Any) -> Self:
        """Append *task* to the pipeline and return the pipeline.

        Raises:
            TaskTypeError: If *task* is not a callable, a class, or an
                object with a ``handle`` method.
        """
        entry = TaskEntry(task=task, kind=classify_task(task))
        self._entries.append(entry)
        logger.debug(
            f"[{self.config.name}] registered task {len(self._entries) - 1} "
            f"({entry.kind.value} {entry.label})"
        )
        return self

    def use(self, task: Any) -> Self:
        """Alias of :meth:`add`."""
        return self.add(task)

    @property
    def tasks(self) -> tuple[TaskEntry, ...]:
        """Registered tasks in execution order."""
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.config.name!r}, tasks={len(self)})"

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, initial_data: Any = None) -> Any:
        """Run every task in order and return the final payload.

        Tasks registered while a run is in progress are not part of that run.

        Raising inside a task and calling ``next(error)`` fail the run the
        same way, as long as the task has not continued yet.  After a task
        has continued, the two differ: a later exception still fails the run
        with that exception, while a second ``next(error)`` is a replay and
        fails it with :class:`ContinuationError`.  A ``StopIteration`` is
        raised as a ``RuntimeError`` whose ``__cause__`` is the original.

        Raises:
            Exception: The first error signalled by a task, raised by a task,
                or detected by the engine (:class:`ContinuationError`,
                :class:`TaskTypeError`).
        """
        run = _Execution(tuple(self._entries), self.config, asyncio.get_running_loop())
        return await run.start(initial_data)

    async def exec(self, initial_data: Any = None) -> Any:
        """Alias of :meth:`execute`."""
        return await self.execute(initial_data)

    def run_sync(self, initial_data: Any = None) -> Any:
        """Run :meth:`execute` on a fresh event loop and return its result.

        Must not be called from inside a running event loop.
        """
        return asyncio.run(self.execute(initial_data))
