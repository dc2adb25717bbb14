"""Instrumented stage instances.

Every public method of a stage built here goes through a dispatcher that
either records the call (while the scenario function is being collected)
or runs the real method (once the case is running).
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

from pygiven.core.formatting import REST_PARAMETER_NAME, format_parameter, get_formatters
from pygiven.core.hidden import is_hidden_step
from pygiven.core.lifecycle import is_lifecycle_method
from pygiven.core.metadata import get_parameter_names
from pygiven.core.parameters import DecodedParameter, WrappedParameter, decode_parameter
from pygiven.core.state import initialize_state
from pygiven.core.templates import get_step_template
from pygiven.core.timer import Timer
from pygiven.report.models import ScenarioPartKind, StepStatus

if TYPE_CHECKING:
    from pygiven.core.runner import ScenarioRunner

logger = logging.getLogger(__name__)

PART_METHODS = {
    "given": ScenarioPartKind.GIVEN,
    "when": ScenarioPartKind.WHEN,
    "then": ScenarioPartKind.THEN,
}


class ScenarioState(str, Enum):
    COLLECTING_STEPS = "COLLECTING_STEPS"
    RUNNING = "RUNNING"


@dataclass
class RecordedStep:
    """A step call captured while collecting, replayed while running."""
    execute_step: Callable[[], Any]
    mark_passed: Callable[[Timer], None]
    mark_failed: Callable[[Timer], None]
    mark_skipped: Callable[[Timer], None]
    stage: Any


@dataclass
class RunningScenario:
    """Execution context of one case."""
    state: ScenarioState = ScenarioState.COLLECTING_STEPS
    stages: list[Any] = field(default_factory=list)
    steps: list[RecordedStep] = field(default_factory=list)
    case_arguments: list[WrappedParameter] = field(default_factory=list)
    formatted_case_arguments: dict[str, str] = field(default_factory=dict)


def get_step_method_names(stage_class: type) -> list[str]:
    """Public plain methods of a class, inherited ones included."""
    names = []
    for name in dir(stage_class):
        if name.startswith("_"):
            continue
        if inspect.isfunction(inspect.getattr_static(stage_class, name, None)):
            names.append(name)
    return names


class StageProxyBuilder:
    """Builds stage instances whose methods are dispatched by case state."""

    def __init__(self, runner: "ScenarioRunner"):
        self.runner = runner

    def build(self, stage_class: type, running_scenario: RunningScenario) -> Any:
        stage = stage_class()
        initialize_state(stage)

        for method_name in get_step_method_names(stage_class):
            dispatcher = self._build_dispatcher(stage, stage_class, method_name, running_scenario)
            setattr(stage, method_name, dispatcher)

        running_scenario.stages.append(stage)
        logger.debug(f"Built stage {stage_class.__name__}")
        return stage

    def _build_dispatcher(
        self,
        stage: Any,
        stage_class: type,
        method_name: str,
        running_scenario: RunningScenario,
    ) -> Callable[..., Any]:
        runner = self.runner
        real_method = getattr(stage_class, method_name)
        step_parameter_names = get_parameter_names(real_method)
        template = get_step_template(stage_class, method_name)

        def insert_new_part_if_required() -> None:
            kind = PART_METHODS.get(method_name)
            if kind is not None:
                runner.add_part(kind)

        def report(status: StepStatus, decoded: list[DecodedParameter], timer: Timer) -> None:
            if not is_hidden_step(stage, method_name):
                runner.step_reported(method_name, decoded, status, timer, template)

        def mark_skipped(decoded: list[DecodedParameter], timer: Timer) -> None:
            insert_new_part_if_required()
            report(StepStatus.SKIPPED, decoded, timer)

        def dispatcher(*args: Any, **kwargs: Any) -> Any:
            if is_lifecycle_method(stage, method_name):
                return real_method(stage, *args, **kwargs)

            positional, keyword_only = _normalize_arguments(real_method, args, kwargs)
            decoded = [
                decode_parameter(
                    arg,
                    parameter_name,
                    get_formatters(stage, method_name, parameter_name),
                )
                for parameter_name, arg in zip(
                    _parameter_names_for(step_parameter_names, len(positional)),
                    positional,
                )
            ]
            decoded_keywords = {
                name: decode_parameter(arg, name, get_formatters(stage, method_name, name))
                for name, arg in keyword_only.items()
            }
            _record_case_arguments(running_scenario, decoded + list(decoded_keywords.values()))

            if running_scenario.state is ScenarioState.COLLECTING_STEPS:
                running_scenario.steps.append(
                    RecordedStep(
                        execute_step=lambda: dispatcher(*args, **kwargs),
                        mark_passed=lambda timer: report(StepStatus.PASSED, decoded, timer),
                        mark_failed=lambda timer: report(StepStatus.FAILED, decoded, timer),
                        mark_skipped=lambda timer: mark_skipped(decoded, timer),
                        stage=stage,
                    )
                )
                return stage

            insert_new_part_if_required()
            values = [parameter.value for parameter in decoded]
            keyword_values = {name: parameter.value for name, parameter in decoded_keywords.items()}
            return real_method(stage, *values, **keyword_values)

        dispatcher.__name__ = method_name
        dispatcher.__qualname__ = f"{stage_class.__qualname__}.{method_name}"
        dispatcher.__doc__ = real_method.__doc__
        return dispatcher


def _parameter_names_for(step_parameter_names: list[str], count: int) -> list[str]:
    return [
        step_parameter_names[index] if index < len(step_parameter_names) else REST_PARAMETER_NAME
        for index in range(count)
    ]


def _normalize_arguments(
    method: Callable, args: tuple, kwargs: dict
) -> tuple[list[Any], dict[str, Any]]:
    """Turn keyword arguments naming positional parameters into positional ones.

    Returns the positional arguments in declaration order and the remaining
    keyword arguments, which reach the step but are not reported as words.
    """
    if not kwargs:
        return list(args), {}

    signature = inspect.signature(method)
    bound = signature.bind(None, *args, **kwargs)
    positional: list[Any] = []
    keyword_only: dict[str, Any] = {}
    # A positional parameter left to its default ends the positional run.
    gap = False
    for parameter in list(signature.parameters.values())[1:]:
        if parameter.name not in bound.arguments:
            if parameter.kind is inspect.Parameter.POSITIONAL_OR_KEYWORD:
                gap = True
            continue
        value = bound.arguments[parameter.name]
        if parameter.kind is inspect.Parameter.VAR_POSITIONAL:
            positional.extend(value)
        elif parameter.kind is inspect.Parameter.VAR_KEYWORD:
            keyword_only.update(value)
        elif parameter.kind is inspect.Parameter.KEYWORD_ONLY or gap:
            keyword_only[parameter.name] = value
        else:
            positional.append(value)
    return positional, keyword_only


def _record_case_arguments(
    running_scenario: RunningScenario, decoded: list[DecodedParameter]
) -> None:
    """Format each case argument the way the first step using it does."""
    formatted = running_scenario.formatted_case_arguments
    for wrapped in running_scenario.case_arguments:
        name = wrapped.scenario_parameter_name
        if name in formatted:
            continue
        found: Optional[DecodedParameter] = next(
            (d for d in decoded if d.scenario_parameter_name == name), None
        )
        if found is not None:
            formatted[name] = format_parameter(wrapped.value, found.formatters)
