"""Parametrized scenarios and scenario parameter decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from pygiven.core.formatting import Formatter


@dataclass(frozen=True)
class ParametrizedScenarioFunc:
    """A scenario function together with the argument tuples of its cases."""
    parameters: list[tuple]
    func: Callable[..., None]


def parametrized(parameters: Sequence[Sequence[Any]], func: Callable[..., None]) -> ParametrizedScenarioFunc:
    return ParametrizedScenarioFunc([tuple(p) for p in parameters], func)


def parametrized1(parameters: Sequence[Any], func: Callable[[Any], None]) -> ParametrizedScenarioFunc:
    """Single-argument variant: each element of ``parameters`` is one case."""
    return ParametrizedScenarioFunc([(p,) for p in parameters], func)


parametrized2 = parametrized
parametrized3 = parametrized
parametrized4 = parametrized
parametrized5 = parametrized
parametrized6 = parametrized
parametrized7 = parametrized


@dataclass(frozen=True)
class WrappedParameter:
    """A case argument handed to a scenario function in place of the raw value.

    The wrapper travels through the collected step calls so that the
    report can tell which words come from a scenario parameter.
    """
    scenario_parameter_name: str
    value: Any


def wrap_parameter(value: Any, scenario_parameter_name: str) -> WrappedParameter:
    return WrappedParameter(scenario_parameter_name, value)


@dataclass(frozen=True)
class DecodedParameter:
    value: Any
    scenario_parameter_name: Optional[str]
    step_parameter_name: str
    formatters: list[Formatter] = field(default_factory=list)


def decode_parameter(
    parameter: Any,
    step_parameter_name: str,
    formatters: list[Formatter],
) -> DecodedParameter:
    if isinstance(parameter, WrappedParameter):
        return DecodedParameter(
            value=parameter.value,
            scenario_parameter_name=parameter.scenario_parameter_name,
            step_parameter_name=step_parameter_name,
            formatters=list(formatters),
        )
    return DecodedParameter(
        value=parameter,
        scenario_parameter_name=None,
        step_parameter_name=step_parameter_name,
        formatters=list(formatters),
    )
