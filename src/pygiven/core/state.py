"""Shared state between the stages of a case."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Iterable, Optional

from pygiven.core.errors import StageDeclarationError
from pygiven.core.metadata import StageMetadataStore

logger = logging.getLogger(__name__)

state_store: StageMetadataStore[str] = StageMetadataStore("@State")

_state_factories: dict[type, dict[str, Callable[[], Any]]] = {}


class State:
    """Declares a stage field shared with the other stages of a case.

    Used as a class attribute::

        class WhenStage(Stage):
            counter = State(0)
            items = State(default_factory=list)

    or registered explicitly with ``State.add_property(WhenStage, "counter")``.
    """

    def __init__(self, default: Any = None, *, default_factory: Optional[Callable[[], Any]] = None):
        self.default = default
        self.default_factory = default_factory

    @staticmethod
    def add_property(stage_class: type, prop: str) -> None:
        if inspect.isfunction(inspect.getattr_static(stage_class, prop, None)):
            raise StageDeclarationError(
                f"State can only be applied to fields: '{prop}' is a method of "
                f"{stage_class.__name__}."
            )
        state_store.add_property(stage_class, prop)


def register_state_fields(stage_class: type) -> None:
    """Register ``State`` class attributes and replace them by their default."""
    for name, value in list(vars(stage_class).items()):
        if not isinstance(value, State):
            continue
        state_store.add_property(stage_class, name)
        if value.default_factory is not None:
            _state_factories.setdefault(stage_class, {})[name] = value.default_factory
            setattr(stage_class, name, None)
        else:
            setattr(stage_class, name, value.default)


def initialize_state(stage: Any) -> None:
    """Give a fresh stage its own values for factory-backed state fields."""
    for klass in reversed(type(stage).__mro__):
        for name, factory in _state_factories.get(klass, {}).items():
            setattr(stage, name, factory())


def copy_state_properties(source: Any, target: Any) -> None:
    if source is None or target is None:
        return
    target_properties = state_store.get_properties(target)
    for name in state_store.get_properties(source):
        if name in target_properties and hasattr(source, name):
            setattr(target, name, getattr(source, name))


def copy_state_to_other_stages(stage: Any, stages: Iterable[Any]) -> None:
    for other_stage in stages:
        if other_stage is not stage:
            copy_state_properties(stage, other_stage)
