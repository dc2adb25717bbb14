"""Before / after hooks of stages."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Generator, Sequence

from pygiven.core.metadata import MethodMarker, StageMetadataStore
from pygiven.core.state import copy_state_to_other_stages

logger = logging.getLogger(__name__)

before_store: StageMetadataStore[str] = StageMetadataStore("@Before")
after_store: StageMetadataStore[str] = StageMetadataStore("@After")

Before = MethodMarker(before_store, "Before")
After = MethodMarker(after_store, "After")


def is_lifecycle_method(stage: Any, method_name: str) -> bool:
    return Before.is_marked(stage, method_name) or After.is_marked(stage, method_name)


def init_stages(stages: Sequence[Any]) -> Generator[Awaitable, Any, None]:
    """Run the before hooks of each stage in order, sharing state after each stage.

    Yields the awaitables returned by asynchronous hooks.
    """
    for stage in stages:
        yield from _invoke_hooks(stage, before_store.get_properties(stage))
        copy_state_to_other_stages(stage, stages)


def cleanup_stages(stages: Sequence[Any]) -> Generator[Awaitable, Any, None]:
    for stage in stages:
        yield from _invoke_hooks(stage, after_store.get_properties(stage))


def _invoke_hooks(stage: Any, method_names: list[str]) -> Generator[Awaitable, Any, None]:
    for method_name in method_names:
        method = getattr(stage, method_name, None)
        if not callable(method):
            continue
        logger.debug(f"Calling {type(stage).__name__}.{method_name}()")
        result = method()
        # Stages are never awaitable, so a chaining hook returning self is not awaited.
        if inspect.isawaitable(result) and result is not stage:
            yield result
