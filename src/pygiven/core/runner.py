"""Scenario runner - registers scenarios and executes their cases."""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, Awaitable, Callable, Generator, Optional, Sequence, Union

from rich.text import Text

from pygiven.core.async_actions import execute_step_and_collect_async_actions, run_sync_or_async
from pygiven.core.errors import ScenarioSetupError
from pygiven.core.formatting import format_parameter
from pygiven.core.lifecycle import cleanup_stages, init_stages
from pygiven.core.metadata import get_parameter_names
from pygiven.core.parameters import (
    DecodedParameter,
    ParametrizedScenarioFunc,
    WrappedParameter,
    wrap_parameter,
)
from pygiven.core.proxy import RunningScenario, ScenarioState, StageProxyBuilder
from pygiven.core.state import copy_state_to_other_stages
from pygiven.core.tags import Tag
from pygiven.core.timer import Timer
from pygiven.report.models import (
    ExecutionStatus,
    GroupReport,
    ScenarioCase,
    ScenarioPart,
    ScenarioPartKind,
    ScenarioReport,
    StepStatus,
    humanize,
)

logger = logging.getLogger(__name__)

CaseBody = Callable[[], Optional[Awaitable[None]]]
GroupFunc = Callable[[str, Callable[[], None]], None]
TestFunc = Callable[[str, CaseBody], None]
StagesParam = Union[type, Sequence[type]]
ScenarioFunc = Union[Callable[[], None], ParametrizedScenarioFunc]


@dataclass(frozen=True)
class ScenarioDescription:
    scenario_function: ScenarioFunc
    tags: list[Tag] = field(default_factory=list)


def scenario(scenario_function: ScenarioFunc, tags: Sequence[Tag] = ()) -> ScenarioDescription:
    """Attach options (tags) to a scenario function."""
    return ScenarioDescription(scenario_function, list(tags))


@dataclass
class CaseDescription:
    case_function: Callable[[], None]
    wrapped_args: list[WrappedParameter]


@dataclass
class ScenarioDescriptionWithName:
    property_name: str
    cases: list[CaseDescription]
    argument_names: list[str]
    tags: list[Tag]


@dataclass
class _CurrentStages:
    """Stages of the case being collected, as seen by the given/when/then accessors."""
    given: Any = None
    when: Any = None
    then: Any = None
    active: bool = False


@dataclass
class _CaseCounter:
    total: int
    completed: int = 0


def strip_ansi(text: str) -> str:
    return Text.from_ansi(text).plain


class ScenarioRunner:
    """Registers groups of scenarios against a host test runner and runs them.

    Each case runs in two passes: the scenario function is called once with
    stages in ``COLLECTING_STEPS`` state, which records the step calls, then
    the recorded steps are replayed one at a time in ``RUNNING`` state.
    """

    def __init__(self, reports_destination: Optional[Union[str, Path]] = None):
        self.reports_destination = reports_destination
        self.group_func: Optional[GroupFunc] = None
        self.test_func: Optional[TestFunc] = None

        self.current_case: Optional[ScenarioCase] = None
        self.current_case_timer: Optional[Timer] = None
        self.current_part: Optional[ScenarioPart] = None

        self.proxy_builder = StageProxyBuilder(self)

    def setup(self, group_func: GroupFunc, test_func: TestFunc) -> None:
        self.group_func = group_func
        self.test_func = test_func

    def get_reports_destination(self) -> Path:
        if self.reports_destination is not None:
            return Path(self.reports_destination)

        from pygiven.config.loader import load_config

        return Path(load_config().reports.destination)

    def scenarios(
        self,
        group_name: str,
        stages_param: StagesParam,
        scenarios_descriptions: Callable[..., dict[str, Any]],
    ) -> None:
        """Register a group of scenarios.

        Args:
            group_name: Name of the group, used as the host runner's suite name
            stages_param: A stage class, or a (given, when, then) triple of classes
            scenarios_descriptions: Called with ``given``, ``when`` and ``then``
                accessors; returns a mapping of scenario property name to
                scenario function, ``scenario()`` or ``parametrized()`` value
        """
        if self.group_func is None or self.test_func is None:
            raise ScenarioSetupError(
                "pygiven is not initialized, please call setup_for_rspec(), "
                "setup_for_inline() or setup_for_pytest() in your test code"
            )

        if isinstance(stages_param, (tuple, list)):
            stage_classes = tuple(stages_param)
        else:
            stage_classes = (stages_param,)

        report = GroupReport(group_name)
        current = _CurrentStages()

        def given():
            _check_active(current, "given")
            return current.given.given()

        def when():
            _check_active(current, "when")
            return current.when.when()

        def then():
            _check_active(current, "then")
            return current.then.then()

        def group_body() -> None:
            descriptions = scenarios_descriptions(given=given, when=when, then=then)
            for description in get_scenarios(descriptions):
                self._register_scenario(report, description, stage_classes, current)

        logger.info(f"Registering scenarios of group '{group_name}'")
        self.group_func(group_name, group_body)

    def _register_scenario(
        self,
        report: GroupReport,
        description: ScenarioDescriptionWithName,
        stage_classes: tuple[type, ...],
        current: _CurrentStages,
    ) -> None:
        scenario_name = humanize(description.property_name)
        scenario_report = self.add_scenario(
            report, scenario_name, description.argument_names, description.tags
        )
        counter = _CaseCounter(total=len(description.cases))

        for index, case in enumerate(description.cases):
            case_label = (
                scenario_name if counter.total == 1 else f"{scenario_name} #{index + 1}"
            )
            self.test_func(
                case_label,
                partial(self._run_case, scenario_report, case, stage_classes, current, counter),
            )

    def _run_case(self, *args: Any) -> Optional[Awaitable[None]]:
        return run_sync_or_async(self._execute_case(*args))

    def _execute_case(
        self,
        scenario_report: ScenarioReport,
        case: CaseDescription,
        stage_classes: tuple[type, ...],
        current: _CurrentStages,
        counter: _CaseCounter,
    ) -> Generator[Awaitable, Any, None]:
        running_scenario = RunningScenario(case_arguments=list(case.wrapped_args))
        caught_error: Optional[Exception] = None

        self.begin_case(scenario_report)
        try:
            self._build_stages(stage_classes, running_scenario, current)
            yield from init_stages(running_scenario.stages)

            current.active = True
            try:
                case.case_function()
            finally:
                current.active = False

            self.set_case_arguments(
                running_scenario.case_arguments, running_scenario.formatted_case_arguments
            )
            running_scenario.state = ScenarioState.RUNNING
            caught_error = yield from self._execute_steps(running_scenario)
        except Exception as error:
            caught_error = error

        try:
            yield from cleanup_stages(running_scenario.stages)
        except Exception as error:
            if caught_error is None:
                caught_error = error

        if caught_error is not None:
            self.case_failed(caught_error)
        else:
            self.case_succeeded()

        counter.completed += 1
        if counter.completed == counter.total:
            self.scenario_completed(scenario_report)

        if caught_error is not None:
            raise caught_error

    def _build_stages(
        self,
        stage_classes: tuple[type, ...],
        running_scenario: RunningScenario,
        current: _CurrentStages,
    ) -> None:
        if len(stage_classes) == 1:
            stage = self.proxy_builder.build(stage_classes[0], running_scenario)
            current.given = current.when = current.then = stage
        else:
            given_class, when_class, then_class = stage_classes
            current.given = self.proxy_builder.build(given_class, running_scenario)
            current.when = self.proxy_builder.build(when_class, running_scenario)
            current.then = self.proxy_builder.build(then_class, running_scenario)

    def _execute_steps(
        self, running_scenario: RunningScenario
    ) -> Generator[Awaitable, Any, Optional[Exception]]:
        """Run the recorded steps; the first failure skips all the others."""
        caught_error: Optional[Exception] = None

        for step in running_scenario.steps:
            step_timer = Timer()
            if caught_error is not None:
                step.mark_skipped(step_timer)
                continue

            try:
                async_actions = execute_step_and_collect_async_actions(step.execute_step)
                for async_action in async_actions:
                    yield async_action()
            except Exception as error:
                logger.warning(f"Step failed: {type(error).__name__}: {error}")
                caught_error = error
                step.mark_failed(step_timer)
            else:
                step.mark_passed(step_timer)
                copy_state_to_other_stages(step.stage, running_scenario.stages)

        return caught_error

    def add_scenario(
        self,
        report: GroupReport,
        scenario_name: str,
        argument_names: list[str],
        tags: Sequence[Tag] = (),
    ) -> ScenarioReport:
        return ScenarioReport(report, scenario_name, [], list(argument_names), tags=list(tags))

    def begin_case(self, scenario_report: ScenarioReport) -> None:
        self.current_case = ScenarioCase()
        self.current_part = None
        scenario_report.cases.append(self.current_case)
        self.current_case_timer = Timer()

    def set_case_arguments(
        self,
        case_arguments: list[WrappedParameter],
        formatted_case_arguments: dict[str, str],
    ) -> None:
        self.current_case.args = [
            formatted_case_arguments.get(
                wrapped.scenario_parameter_name, format_parameter(wrapped.value, [])
            )
            for wrapped in case_arguments
        ]

    def case_failed(self, error: Exception) -> None:
        self.current_case.successful = False
        self.current_case.duration_in_nanos = self.current_case_timer.elapsed_time_in_nanoseconds()
        self.current_case.error_message = strip_ansi(str(error) or type(error).__name__)
        stack_trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self.current_case.stack_trace = strip_ansi(stack_trace).splitlines()

    def case_succeeded(self) -> None:
        self.current_case.successful = True
        self.current_case.duration_in_nanos = self.current_case_timer.elapsed_time_in_nanoseconds()

    def add_part(self, kind: ScenarioPartKind) -> None:
        self.current_part = ScenarioPart(kind)
        self.current_case.parts.append(self.current_part)

    def step_reported(
        self,
        method_name: str,
        decoded_parameters: list[DecodedParameter],
        status: StepStatus,
        step_timer: Timer,
        template: Optional[str] = None,
    ) -> None:
        if self.current_part is None:
            self.add_part(ScenarioPartKind.GIVEN)
        logger.debug(f"Step {method_name}: {status.value}")
        self.current_part.stage_method_called(
            method_name,
            decoded_parameters,
            status,
            step_timer.elapsed_time_in_nanoseconds(),
            template,
        )

    def scenario_completed(self, scenario_report: ScenarioReport) -> None:
        if any(not case.successful for case in scenario_report.cases):
            scenario_report.execution_status = ExecutionStatus.FAILED
        else:
            scenario_report.execution_status = ExecutionStatus.SUCCESS
        scenario_report.dump_to_file(self.get_reports_destination())


def _check_active(current: _CurrentStages, accessor: str) -> None:
    if not current.active:
        raise ScenarioSetupError(f"{accessor}() may only be called in scenario")


def get_scenarios(descriptions: dict[str, Any]) -> list[ScenarioDescriptionWithName]:
    """Expand scenario descriptions into their cases."""
    result = []
    for property_name, description in descriptions.items():
        tags: list[Tag] = []
        if isinstance(description, ScenarioDescription):
            tags = description.tags
            description = description.scenario_function

        if isinstance(description, ParametrizedScenarioFunc):
            func = description.func
            argument_names = get_parameter_names(func)
            cases = [
                _parametrized_case(func, parameters_for_case, argument_names)
                for parameters_for_case in description.parameters
            ]
        else:
            argument_names = []
            cases = [CaseDescription(case_function=description, wrapped_args=[])]

        result.append(ScenarioDescriptionWithName(property_name, cases, argument_names, tags))
    return result


def _parametrized_case(
    func: Callable[..., None], parameters_for_case: tuple, argument_names: list[str]
) -> CaseDescription:
    wrapped_args = [
        wrap_parameter(
            parameter,
            argument_names[index] if index < len(argument_names) else f"arg{index}",
        )
        for index, parameter in enumerate(parameters_for_case)
    ]
    return CaseDescription(case_function=lambda: func(*wrapped_args), wrapped_args=wrapped_args)


INSTANCE = ScenarioRunner()


def scenarios(
    group_name: str,
    stages_param: StagesParam,
    scenarios_descriptions: Callable[..., dict[str, Any]],
) -> None:
    return INSTANCE.scenarios(group_name, stages_param, scenarios_descriptions)
