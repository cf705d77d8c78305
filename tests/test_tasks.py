"""Tests for task classification and invocation."""

from __future__ import annotations

import functools
import inspect
from types import SimpleNamespace

import pytest

from event_pipeline import (
    StepResult,
    TaskEntry,
    TaskHandler,
    TaskKind,
    TaskTypeError,
    classify_task,
)
from event_pipeline.tasks import invoke_task


def plain_task(data, next):
    next(None, data)


async def async_task(data, next):
    next(None, data)


class ClassTask:
    def __init__(self, data, next):
        self.data = data
        next(None, data)


class CallableObject:
    def __call__(self, data, next):
        next(None, data)


class Handler:
    def __init__(self):
        self.seen = []

    def handle(self, data, next):
        self.seen.append(data)
        next(None, data)


# ------------------------------------------------------------------ #
# classify_task
# ------------------------------------------------------------------ #


@pytest.mark.unit
class TestClassifyTask:
    @pytest.mark.parametrize(
        "task",
        [
            plain_task,
            async_task,
            lambda data, next: next(),
            functools.partial(plain_task),
            CallableObject(),
            Handler().handle,
        ],
    )
    def test_callables(self, task):
        assert classify_task(task) is TaskKind.CALLABLE

    def test_class_is_constructible(self):
        assert classify_task(ClassTask) is TaskKind.CONSTRUCTIBLE

    def test_class_with_handle_is_still_constructible(self):
        assert classify_task(Handler) is TaskKind.CONSTRUCTIBLE

    def test_handler_object(self):
        assert classify_task(Handler()) is TaskKind.HANDLER
        assert classify_task(SimpleNamespace(handle=plain_task)) is TaskKind.HANDLER

    def test_callable_object_with_handle_is_callable(self):
        class Both(CallableObject):
            def handle(self, data, next):
                raise AssertionError("should not be used")

        assert classify_task(Both()) is TaskKind.CALLABLE

    @pytest.mark.parametrize("task", ["not a task", None, 42, {"handle": plain_task}, []])
    def test_rejects_other_values(self, task):
        with pytest.raises(TaskTypeError, match="Task must be"):
            classify_task(task)

    def test_error_is_a_type_error(self):
        with pytest.raises(TypeError):
            classify_task("not a task")


# ------------------------------------------------------------------ #
# invoke_task
# ------------------------------------------------------------------ #


@pytest.mark.unit
class TestInvokeTask:
    def test_callable_receives_data_and_continuation(self):
        calls = []
        entry = TaskEntry(plain_task, TaskKind.CALLABLE)
        invoke_task(entry, {"n": 1}, lambda error=None, data=None: calls.append(data))
        assert calls == [{"n": 1}]

    def test_constructible_discards_instance(self):
        calls = []
        entry = TaskEntry(ClassTask, TaskKind.CONSTRUCTIBLE)
        result = invoke_task(entry, 3, lambda error=None, data=None: calls.append(data))
        assert result is None
        assert calls == [3]

    def test_async_callable_returns_awaitable(self):
        entry = TaskEntry(async_task, TaskKind.CALLABLE)
        result = invoke_task(entry, 1, lambda error=None, data=None: None)
        assert inspect.isawaitable(result)
        result.close()

    def test_handler_dispatches_to_handle(self):
        handler = Handler()
        entry = TaskEntry(handler, TaskKind.HANDLER)
        invoke_task(entry, "payload", lambda error=None, data=None: None)
        assert handler.seen == ["payload"]

    def test_handler_without_callable_handle(self):
        obj = SimpleNamespace(handle=None)
        entry = TaskEntry(obj, TaskKind.HANDLER)
        with pytest.raises(TaskTypeError, match="handle\\(data, continuation\\)"):
            invoke_task(entry, None, lambda error=None, data=None: None)


@pytest.mark.unit
class TestTaskEntry:
    def test_label_uses_qualname(self):
        assert TaskEntry(plain_task, TaskKind.CALLABLE).label == "plain_task"
        assert TaskEntry(ClassTask, TaskKind.CONSTRUCTIBLE).label == "ClassTask"

    def test_label_falls_back_to_type(self):
        assert TaskEntry(Handler(), TaskKind.HANDLER).label == "Handler"
        assert TaskEntry(functools.partial(plain_task), TaskKind.CALLABLE).label == "partial"


@pytest.mark.unit
class TestTaskHandlerProtocol:
    def test_handler_objects_satisfy_protocol(self):
        assert isinstance(Handler(), TaskHandler)
        assert isinstance(SimpleNamespace(handle=plain_task), TaskHandler)

    def test_handle_set_to_none_is_rejected(self):
        assert not isinstance(SimpleNamespace(handle=None), TaskHandler)
        with pytest.raises(TaskTypeError):
            classify_task(SimpleNamespace(handle=None))


@pytest.mark.unit
class TestStepResult:
    def test_success_is_ok(self):
        result = StepResult.success(2, {"n": 1})
        assert result.ok
        assert result.index == 2
        assert result.data == {"n": 1}

    def test_failure_is_not_ok(self):
        error = ValueError("bad")
        result = StepResult.failure(0, error)
        assert not result.ok
        assert result.error is error
