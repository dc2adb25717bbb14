"""Step templates: the text a step is reported with.

A step is reported from its method name unless a template is registered
for it. Templates may hold ``$`` placeholders, which Python identifiers
cannot, and ``$$`` for a literal dollar sign.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pygiven.core.metadata import (
    StageMetadataStore,
    check_is_function,
    get_method,
    mark_function,
)

template_store: StageMetadataStore[tuple[str, str]] = StageMetadataStore("@StepTemplate")


def step_template(template: str) -> Callable[[Callable], Callable]:
    def decorator(func: Callable) -> Callable:
        check_is_function(
            func, f"@step_template can only be applied to methods: {func!r} is not a method."
        )
        mark_function(func, template_store, (func.__name__, template))
        return func

    return decorator


class StepTemplate:
    @staticmethod
    def add_template(stage_class: type, method_name: str, template: str) -> None:
        check_is_function(
            get_method(stage_class, method_name),
            f"StepTemplate.add_template() can only be applied to methods: "
            f"'{method_name}' is not a method of {stage_class.__name__}.",
        )
        template_store.add_property(stage_class, (method_name, template))


def get_step_template(stage: Any, method_name: str) -> Optional[str]:
    """The last template registered for ``method_name``, subclasses winning."""
    found = None
    for name, template in template_store.get_properties(stage):
        if name == method_name:
            found = template
    return found
