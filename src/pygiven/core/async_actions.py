"""Deferred asynchronous actions registered by steps.

A step registers actions with ``do_async()`` while it runs. The actions are
gathered into the ``AsyncActionCollector`` bound to the current step
invocation and awaited by the runner, in registration order, once the
step returned.
"""

from __future__ import annotations

import inspect
from contextvars import ContextVar
from typing import Any, Awaitable, Callable, Generator, Optional

from pygiven.core.errors import ScenarioSetupError

AsyncAction = Callable[[], Awaitable[Any]]

_current_collector: ContextVar[Optional["AsyncActionCollector"]] = ContextVar(
    "pygiven_async_action_collector", default=None
)


class AsyncActionCollector:
    def __init__(self):
        self.actions: list[AsyncAction] = []

    def add(self, action: AsyncAction) -> None:
        self.actions.append(action)


def do_async(action: AsyncAction) -> None:
    """Defer ``action`` until the current step returned.

    Must be called synchronously from within a step.
    """
    collector = _current_collector.get()
    if collector is None:
        raise ScenarioSetupError("do_async() may only be called synchronously within a step")
    collector.add(action)


def execute_step_and_collect_async_actions(execute_step: Callable[[], Any]) -> list[AsyncAction]:
    """Run a step and return the asynchronous actions it left behind.

    A coroutine returned by an ``async def`` step is one more action,
    queued after those registered with ``do_async()``.
    """
    collector = AsyncActionCollector()
    token = _current_collector.set(collector)
    try:
        result = execute_step()
    finally:
        _current_collector.reset(token)

    if inspect.isawaitable(result):
        collector.add(lambda: result)
    return collector.actions


def run_sync_or_async(generator: Generator[Awaitable, Any, None]) -> Optional[Awaitable[None]]:
    """Drive a generator that yields awaitables.

    The generator runs synchronously up to its first yielded awaitable. If it
    finishes before that, ``None`` is returned; otherwise the rest of it runs
    in the returned coroutine, each awaited result (or exception) being sent
    back into the generator.
    """
    try:
        awaitable = next(generator)
    except StopIteration:
        return None
    return _run_async_tail(generator, awaitable)


async def _run_async_tail(generator: Generator[Awaitable, Any, None], awaitable: Awaitable) -> None:
    while True:
        try:
            result = await awaitable
        except Exception as error:
            try:
                awaitable = generator.throw(error)
            except StopIteration:
                return
        else:
            try:
                awaitable = generator.send(result)
            except StopIteration:
                return
