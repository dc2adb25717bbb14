"""Exceptions raised by pygiven."""

from __future__ import annotations


class PyGivenError(Exception):
    """Base class for pygiven errors."""


class ScenarioSetupError(PyGivenError, RuntimeError):
    """A scenario API was used outside of the context it is valid in."""


class StageDeclarationError(PyGivenError, TypeError):
    """Stage metadata was declared on something it cannot apply to."""
