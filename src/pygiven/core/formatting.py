"""Parameter formatting for step reports."""

from __future__ import annotations

import json
import logging
import numbers
from dataclasses import dataclass
from typing import Any, Callable, Union

from pygiven.core.metadata import (
    StageMetadataStore,
    check_is_function,
    check_is_parameter,
    get_method,
    mark_function,
)

logger = logging.getLogger(__name__)

Formatter = Callable[[Any], Any]

REST_PARAMETER_NAME = "PYGIVEN_REST_PARAMETER_NAME"


@dataclass(frozen=True)
class ParameterFormatting:
    """A formatter registered for one parameter of one step method."""
    step_method_name: str
    parameter_name: str
    formatter: Formatter


formatters_store: StageMetadataStore[ParameterFormatting] = StageMetadataStore(
    "@ParameterFormatters"
)


def get_formatters(
    stage: Any,
    requested_step_method_name: str,
    requested_parameter_name: str,
) -> list[Formatter]:
    """Formatters registered for a step parameter, in registration order."""
    return [
        formatting.formatter
        for formatting in formatters_store.get_properties(stage)
        if formatting.step_method_name == requested_step_method_name
        and formatting.parameter_name == requested_parameter_name
    ]


class ParameterFormatter:
    """Decorator factory registering a formatter on step parameters.

    Used as ``@Quoted("value")`` on a step method, or through
    ``Quoted.format_parameter(StageClass, "step_name", "value")``.
    """

    def __init__(self, formatter: Formatter):
        self.formatter = formatter

    def __call__(self, *parameter_names: str) -> Callable[[Callable], Callable]:
        def decorator(func: Callable) -> Callable:
            step_method_name = getattr(func, "__name__", repr(func))
            for parameter_name in parameter_names:
                check_is_function(
                    func,
                    f"Formatter decorators can only be applied to methods: "
                    f"'{step_method_name}' is not a method.",
                )
                check_is_parameter(
                    func,
                    parameter_name,
                    f"Formatter decorator cannot be applied on method: "
                    f"{step_method_name}(): parameter '{parameter_name}' was not found.",
                )
                mark_function(
                    func,
                    formatters_store,
                    ParameterFormatting(step_method_name, parameter_name, self.formatter),
                )
            return func

        return decorator

    def format_parameter(
        self, stage_class: type, step_method_name: str, *parameter_names: str
    ) -> None:
        method = get_method(stage_class, step_method_name)
        for parameter_name in parameter_names:
            check_is_function(
                method,
                f"Formatter.format_parameter() can only be applied to methods: "
                f"'{step_method_name}' is not a method.",
            )
            check_is_parameter(
                method,
                parameter_name,
                f"Formatter.format_parameter() cannot be applied on method: "
                f"{step_method_name}(): parameter '{parameter_name}' was not found.",
            )
            formatters_store.add_property(
                stage_class,
                ParameterFormatting(step_method_name, parameter_name, self.formatter),
            )


def build_parameter_formatter(formatter: Formatter) -> ParameterFormatter:
    return ParameterFormatter(formatter)


Quoted = build_parameter_formatter(lambda value: f'"{value}"')


def QuotedWith(quote_character: str) -> ParameterFormatter:
    return build_parameter_formatter(
        lambda value: f"{quote_character}{value}{quote_character}"
    )


NotFormatter = build_parameter_formatter(lambda value: "" if value else "not")


def format_parameter(parameter: Any, formatters: list[Formatter]) -> str:
    """Render a step argument as report text.

    Formatters run left to right; their result goes through the default
    formatting again, so a formatter may return any value. A formatter
    that raises leaves the value to the default formatting.
    """
    if formatters:
        value = parameter
        try:
            for formatter in formatters:
                value = formatter(value)
        except Exception as e:
            logger.warning(f"Parameter formatter failed, using default formatting: {e}")
            value = parameter
        return format_parameter(value, [])
    return _apply_default_formatter(parameter)


def _apply_default_formatter(parameter: Any) -> str:
    if isinstance(parameter, str):
        return parameter
    if parameter is None or isinstance(parameter, (bool, list, tuple, dict, set, frozenset)):
        return _to_json(parameter)
    if isinstance(parameter, numbers.Number):
        return str(parameter)
    if _has_overridden_str(parameter):
        return str(parameter)
    return _to_json(parameter)


def _has_overridden_str(parameter: Any) -> bool:
    return type(parameter).__str__ is not object.__str__


def _to_json(parameter: Any) -> str:
    try:
        return json.dumps(
            _jsonable(parameter),
            separators=(",", ":"),
            ensure_ascii=False,
            default=_json_default,
        )
    except (TypeError, ValueError):
        # Non-string keys, circular containers
        return repr(parameter)


def _jsonable(parameter: Any) -> Union[list, Any]:
    if isinstance(parameter, (set, frozenset)):
        return sorted(parameter, key=repr)
    return parameter


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    if _has_overridden_str(value) and not hasattr(value, "__dict__"):
        return str(value)
    if hasattr(value, "__dict__"):
        return {k: v for k, v in vars(value).items() if not k.startswith("_")}
    return repr(value)
