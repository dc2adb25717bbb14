"""Configuration loader for pygiven."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from pygiven.config.schema import PyGivenConfig


CONFIG_FILENAMES = [".pygiven.yaml", ".pygiven.yml", "pygiven.yaml", "pygiven.yml"]
GLOBAL_CONFIG_DIR = Path.home() / ".config" / "pygiven"
GLOBAL_CONFIG_FILE = GLOBAL_CONFIG_DIR / "config.yaml"
REPORTS_DESTINATION_ENV_VAR = "PYGIVEN_REPORTS_DESTINATION"


def find_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find configuration file in current or parent directories."""
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    # Search upward for config file
    while current != current.parent:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.exists():
                return config_path
        current = current.parent

    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load YAML configuration file."""
    if not path.exists():
        return {}

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
        return data if data else {}


def load_config(
    config_file: Optional[Path] = None,
    project_dir: Optional[Path] = None,
) -> PyGivenConfig:
    """Load and merge configuration from all sources.

    Priority (later overrides earlier):
    1. Built-in defaults
    2. Global config (~/.config/pygiven/config.yaml)
    3. Project config (.pygiven.yaml)
    4. Explicit config file (if provided)
    5. PYGIVEN_REPORTS_DESTINATION environment variable
    """
    config_data: Dict[str, Any] = {}

    if GLOBAL_CONFIG_FILE.exists():
        global_data = load_yaml_file(GLOBAL_CONFIG_FILE)
        config_data = _deep_merge(config_data, global_data)

    if config_file is None:
        config_file = find_config_file(project_dir)

    if config_file and config_file.exists():
        project_data = load_yaml_file(config_file)
        config_data = _deep_merge(config_data, project_data)

    config = PyGivenConfig(**config_data) if config_data else PyGivenConfig()

    destination = os.environ.get(REPORTS_DESTINATION_ENV_VAR)
    if destination:
        config.reports.destination = destination

    return config


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
