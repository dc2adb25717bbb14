"""Per-class metadata registries for stage classes.

Decorators such as ``@Hidden`` or ``@Before`` cannot see the class they are
applied to, so they only mark the function. ``Stage.__init_subclass__``
later moves those marks into the matching store. The explicit registration
helpers (``Hidden.add_hidden_step`` and friends) write into the very same
store, which makes both paths interchangeable.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from pygiven.core.errors import StageDeclarationError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MARKS_ATTRIBUTE = "__pygiven_marks__"


class StageMetadataStore(Generic[T]):
    """Maps a stage class to the ordered list of properties declared on it."""

    def __init__(self, key: str):
        self.key = key
        self._properties: dict[type, list[T]] = {}

    def add_property(self, stage_class: type, prop: T) -> None:
        properties = self._properties.setdefault(stage_class, [])
        if prop not in properties:
            properties.append(prop)
            logger.debug(f"{self.key}: registered {prop!r} on {stage_class.__name__}")

    def get_properties(self, target: Any) -> list[T]:
        """Properties of a class or instance, base classes first."""
        stage_class = target if isinstance(target, type) else type(target)
        result: list[T] = []
        for klass in reversed(stage_class.__mro__):
            for prop in self._properties.get(klass, []):
                if prop not in result:
                    result.append(prop)
        return result

    def __repr__(self) -> str:
        return f"StageMetadataStore({self.key!r})"


def mark_function(func: Callable, store: StageMetadataStore, prop: Any) -> None:
    """Attach a pending registration to a function defined in a class body."""
    marks = func.__dict__.setdefault(MARKS_ATTRIBUTE, [])
    marks.append((store, prop))


def register_marks(stage_class: type) -> None:
    """Move the marks found on the functions of ``stage_class`` into their stores."""
    for value in vars(stage_class).values():
        func = value.__func__ if isinstance(value, (staticmethod, classmethod)) else value
        for store, prop in getattr(func, MARKS_ATTRIBUTE, ()):
            store.add_property(stage_class, prop)


def get_method(stage_class: type, method_name: str) -> Optional[Callable]:
    method = inspect.getattr_static(stage_class, method_name, None)
    if not inspect.isfunction(method):
        return None
    return method


def check_is_function(target: Any, error_message: str) -> None:
    if not inspect.isfunction(target):
        raise StageDeclarationError(error_message)


def check_is_parameter(func: Callable, parameter_name: str, error_message: str) -> None:
    if parameter_name not in get_parameter_names(func):
        raise StageDeclarationError(error_message)


def get_parameter_names(func: Callable) -> list[str]:
    """Names of the positional parameters of a step function, ``self`` excluded."""
    names = []
    for parameter in inspect.signature(func).parameters.values():
        if parameter.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            names.append(parameter.name)
    if names and names[0] == "self":
        names = names[1:]
    return names


class MethodMarker:
    """A decorator flagging stage methods, backed by a metadata store.

    ``@Before`` on a method and ``Before.add_property(StageClass, "name")``
    register the same thing.
    """

    def __init__(self, store: StageMetadataStore[str], label: str):
        self.store = store
        self.label = label

    def __call__(self, func: Callable) -> Callable:
        check_is_function(
            func,
            f"@{self.label} can only be applied to methods: {func!r} is not a method.",
        )
        mark_function(func, self.store, func.__name__)
        return func

    def add_property(self, stage_class: type, method_name: str) -> None:
        check_is_function(
            get_method(stage_class, method_name),
            f"{self.label}.add_property() can only be applied to methods: "
            f"'{method_name}' is not a method of {stage_class.__name__}.",
        )
        self.store.add_property(stage_class, method_name)

    def is_marked(self, stage: Any, method_name: str) -> bool:
        return method_name in self.store.get_properties(stage)

    def __repr__(self) -> str:
        return f"<{self.label} marker>"
