"""pygiven - given/when/then scenarios with JGiven-style reports."""

__version__ = "0.1.0"

from pygiven.core.async_actions import do_async
from pygiven.core.errors import PyGivenError, ScenarioSetupError, StageDeclarationError
from pygiven.core.formatting import (
    REST_PARAMETER_NAME,
    NotFormatter,
    Quoted,
    QuotedWith,
    build_parameter_formatter,
)
from pygiven.core.hidden import Hidden
from pygiven.core.lifecycle import After, Before
from pygiven.core.parameters import (
    parametrized,
    parametrized1,
    parametrized2,
    parametrized3,
    parametrized4,
    parametrized5,
    parametrized6,
    parametrized7,
)
from pygiven.core.runner import INSTANCE, ScenarioRunner, scenario, scenarios
from pygiven.core.stage import Stage
from pygiven.core.state import State
from pygiven.core.tags import Tag, build_tag
from pygiven.core.templates import StepTemplate, step_template
from pygiven.core.test_runners import setup_for_inline, setup_for_pytest, setup_for_rspec

__all__ = [
    "__version__",
    "After",
    "Before",
    "Hidden",
    "INSTANCE",
    "NotFormatter",
    "PyGivenError",
    "Quoted",
    "QuotedWith",
    "REST_PARAMETER_NAME",
    "ScenarioRunner",
    "ScenarioSetupError",
    "Stage",
    "StageDeclarationError",
    "State",
    "StepTemplate",
    "Tag",
    "build_parameter_formatter",
    "build_tag",
    "do_async",
    "parametrized",
    "parametrized1",
    "parametrized2",
    "parametrized3",
    "parametrized4",
    "parametrized5",
    "parametrized6",
    "parametrized7",
    "scenario",
    "scenarios",
    "setup_for_inline",
    "setup_for_pytest",
    "setup_for_rspec",
    "step_template",
]
