"""JGiven HTML5 report generation from scenario report files."""

from __future__ import annotations

import base64
import gzip
import json
import logging
import shutil
import zipfile
from datetime import datetime
from itertools import groupby
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from pygiven.config.schema import PyGivenConfig

logger = logging.getLogger(__name__)

FileFilter = Callable[[str], bool]

APP_ZIP_PATH = "com/tngtech/jgiven/report/html5/app.zip"


class ReportAppNotFoundError(FileNotFoundError):
    """The JGiven HTML5 report archive could not be located."""


def load_scenario_reports(
    report_files: Iterable[Path],
    file_filter: FileFilter = lambda name: True,
) -> list[dict]:
    """Read the scenario report files whose name passes ``file_filter``."""
    return [
        json.loads(path.read_text(encoding="utf-8"))
        for path in sorted(report_files)
        if file_filter(path.name)
    ]


def aggregate_reports(
    report_files: Iterable[Path],
    file_filter: FileFilter = lambda name: True,
) -> dict:
    """Group scenario reports by group name into the viewer's schema.

    Returns:
        ``{"scenarios": [ReportModel, ...]}``, one report model per group
    """
    scenario_reports = load_scenario_reports(report_files, file_filter)
    report_models = []
    for group_name, group_reports in groupby(
        sorted(scenario_reports, key=_group_name_of), key=_group_name_of
    ):
        report_models.append(to_report_model(group_name, list(group_reports)))
    return {"scenarios": report_models}


def _group_name_of(scenario_report: dict) -> str:
    return scenario_report["groupReport"]["name"]


def encode_scenarios(document: dict) -> str:
    """Gzip and base64 encode an aggregated report document."""
    payload = json.dumps(document, ensure_ascii=False).encode("utf-8")
    return base64.b64encode(gzip.compress(payload)).decode("ascii")


def to_report_model(group_name: str, scenario_reports: list[dict]) -> dict:
    tag_map: dict[str, dict] = {}
    for scenario_report in scenario_reports:
        tag_map.update(_tag_entries(scenario_report.get("tags", [])))

    return {
        "className": group_name,
        "description": group_name,
        "name": group_name,
        "scenarios": [to_scenario_model(report) for report in scenario_reports],
        "tagMap": tag_map,
    }


def to_scenario_model(scenario_report: dict) -> dict:
    cases = scenario_report["cases"]
    return {
        "testMethodName": scenario_report["name"],
        "tagIds": [
            tag_id
            for tag in scenario_report.get("tags", [])
            for tag_id in _tag_ids(tag)
        ],
        "scenarioCases": [
            {
                "caseNr": index + 1,
                "derivedArguments": case["args"],
                "description": "",
                "durationInNanos": case["durationInNanos"],
                "errorMessage": case.get("errorMessage"),
                "explicitParameters": case["args"],
                "explicitArguments": case["args"],
                "stackTrace": case.get("stackTrace"),
                "success": case["successful"],
                "steps": [step for part in case["parts"] for step in to_steps(part)],
            }
            for index, case in enumerate(cases)
        ],
        "casesAsTable": len(cases) > 1,
        "className": scenario_report["groupReport"]["name"],
        "derivedParameters": scenario_report["argumentNames"],
        "description": scenario_report["name"],
        "durationInNanos": sum(case["durationInNanos"] for case in cases),
        "executionStatus": scenario_report["executionStatus"],
        "explicitParameters": scenario_report["argumentNames"],
        "extendedDescription": "",
    }


def to_steps(scenario_part: dict) -> list[dict]:
    return [
        {
            "attachment": None,
            "durationInNanos": step["durationInNanos"],
            "extendedDescription": "",
            "isSectionTitle": False,
            "name": step.get("methodName", step["name"]),
            "nestedSteps": [],
            "status": step["status"],
            "words": [_to_word(word) for word in step["words"]],
        }
        for step in scenario_part["steps"]
    ]


def _to_word(word: dict) -> dict:
    result: dict[str, Any] = {}
    if word.get("isIntroWord"):
        result["isIntroWord"] = True
    result["value"] = word["value"]
    parameter_name = word.get("scenarioParameterName")
    if parameter_name is not None:
        result["argumentInfo"] = {
            "argumentName": parameter_name,
            "parameterName": parameter_name,
            "formattedValue": word["value"],
        }
    return result


def _tag_ids(tag: dict) -> list[str]:
    if not tag["values"]:
        return [tag["name"]]
    return [f"{tag['name']}-{value}" for value in tag["values"]]


def _tag_entries(tags: list[dict]) -> dict[str, dict]:
    entries = {}
    for tag in tags:
        descriptions = tag.get("descriptions", {})
        for tag_id, value in zip(_tag_ids(tag), tag["values"] or [None]):
            entry = {
                "type": tag["name"],
                "description": descriptions.get(tag_id, tag.get("description", "")),
                "style": tag.get("style", ""),
                "prependType": tag.get("prependName", False),
                "tags": tag.get("parentTags", []),
            }
            if value is not None:
                entry["value"] = value
            entries[tag_id] = entry
    return entries


def generate_report_data_files(
    reports_dir: Path,
    report_dir: Path,
    file_filter: FileFilter = lambda name: True,
    title: str = "J(s)Given Report",
) -> Path:
    """Write the viewer's data files for the reports found in ``reports_dir``."""
    data_dir = report_dir / "data"
    data_dir.mkdir(parents=True, exist_ok=True)

    document = aggregate_reports(
        [path for path in reports_dir.iterdir() if path.is_file()], file_filter
    )

    meta_data = {
        "created": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "title": title,
        "data": ["data0.js"],
    }
    (data_dir / "metaData.js").write_text(
        f"jgivenReport.setMetaData({json.dumps(meta_data)} );\n", encoding="utf-8"
    )
    (data_dir / "tags.js").write_text("jgivenReport.setTags({});\n", encoding="utf-8")
    (data_dir / "data0.js").write_text(
        f"jgivenReport.addZippedScenarios('{encode_scenarios(document)}');\n",
        encoding="utf-8",
    )

    logger.info(f"Report data for {len(document['scenarios'])} group(s) written to {data_dir}")
    return data_dir


def find_report_app(app_archive: str, search_dirs: Optional[list[Path]] = None) -> Path:
    """Locate the JGiven HTML5 report archive."""
    candidates = [Path(app_archive)]
    for directory in search_dirs or []:
        candidates.append(directory / Path(app_archive).name)

    for candidate in candidates:
        if candidate.is_file():
            return candidate

    raise ReportAppNotFoundError(f"jgiven html 5 report not found: {app_archive}")


def install_report_app(report_dir: Path, app_archive: Path) -> None:
    """Unpack the viewer application into a fresh ``report_dir``."""
    if report_dir.exists():
        shutil.rmtree(report_dir)
    (report_dir / "data").mkdir(parents=True)

    with zipfile.ZipFile(app_archive) as archive:
        with archive.open(APP_ZIP_PATH) as app_zip:
            with zipfile.ZipFile(app_zip) as app:
                app.extractall(report_dir)

    logger.info(f"Report app installed in {report_dir}")


def generate_report(config: PyGivenConfig, base_dir: Optional[Path] = None) -> Optional[Path]:
    """Install the viewer and generate its data files.

    Returns:
        The report directory, or None when no scenario reports exist
    """
    base_dir = base_dir or Path.cwd()
    reports_dir = base_dir / config.reports.destination
    if not reports_dir.is_dir():
        logger.info("No pygiven reports found, skipping jgiven report generation")
        return None

    report_dir = base_dir / config.html.directory
    app_archive = find_report_app(config.html.app_archive, [base_dir])
    install_report_app(report_dir, app_archive)
    generate_report_data_files(reports_dir, report_dir, title=config.html.title)
    return report_dir


def clean_reports(config: PyGivenConfig, base_dir: Optional[Path] = None) -> bool:
    """Remove the intermediate scenario report files.

    Returns:
        True if a reports directory was removed
    """
    reports_dir = (base_dir or Path.cwd()) / config.reports.destination
    if not reports_dir.exists():
        return False
    shutil.rmtree(reports_dir)
    logger.info(f"Removed {reports_dir}")
    return True
