"""Configuration for pygiven."""

from pygiven.config.loader import load_config
from pygiven.config.schema import PyGivenConfig

__all__ = ["load_config", "PyGivenConfig"]
