"""Pytest configuration and fixtures."""

import json

import pytest
from pathlib import Path

from pygiven import INSTANCE, ScenarioRunner, setup_for_rspec


class FakeRspec:
    """Stands in for a describe/it host: groups run at once, cases are kept."""

    def __init__(self):
        self.groups = []
        self.cases = {}

    def describe(self, name, body):
        self.groups.append(name)
        body()

    def it(self, name, body):
        self.cases[name] = body

    def run(self, name):
        return self.cases[name]()


@pytest.fixture(autouse=True, scope="session")
def default_reports_destination(tmp_path_factory):
    """Keep reports of scenarios registered on the shared runner out of the work tree."""
    INSTANCE.reports_destination = tmp_path_factory.mktemp("pygiven-reports")
    return INSTANCE.reports_destination


@pytest.fixture
def reports_dir(tmp_path):
    return tmp_path / "reports"


@pytest.fixture
def runner(reports_dir):
    return ScenarioRunner(reports_destination=reports_dir)


@pytest.fixture
def rspec(runner):
    fake = FakeRspec()
    setup_for_rspec(fake.describe, fake.it, runner)
    return fake


@pytest.fixture
def read_reports(reports_dir):
    """Return the scenario reports written so far, keyed by scenario name."""

    def read():
        if not reports_dir.exists():
            return {}
        reports = [json.loads(p.read_text(encoding="utf-8")) for p in reports_dir.iterdir()]
        return {report["name"]: report for report in reports}

    return read


@pytest.fixture
def temp_project(tmp_path):
    """Create a temporary project directory with a .pygiven.yaml file."""
    config_file = tmp_path / ".pygiven.yaml"
    config_file.write_text(
        "reports:\n"
        "  destination: build/scenarios\n"
        "html:\n"
        "  title: Project Report\n"
    )
    return tmp_path


@pytest.fixture
def sample_config():
    """Return sample configuration dict."""
    return {
        "version": 1,
        "reports": {
            "destination": "out/reports",
        },
        "html": {
            "directory": "html-report",
        },
    }
