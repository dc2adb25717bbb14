"""Scenario report model and report packaging."""

from pygiven.report.models import (
    ExecutionStatus,
    GroupReport,
    ScenarioCase,
    ScenarioPart,
    ScenarioPartKind,
    ScenarioReport,
    Step,
    StepStatus,
    Word,
    compute_scenario_file_name,
)

__all__ = [
    "ExecutionStatus",
    "GroupReport",
    "ScenarioCase",
    "ScenarioPart",
    "ScenarioPartKind",
    "ScenarioReport",
    "Step",
    "StepStatus",
    "Word",
    "compute_scenario_file_name",
]
