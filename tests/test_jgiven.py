"""Tests for packaging scenario reports into the JGiven HTML5 report."""

import base64
import gzip
import io
import json
import re
import zipfile

import pytest

from pygiven.config.schema import PyGivenConfig
from pygiven.core.parameters import DecodedParameter
from pygiven.core.tags import build_tag
from pygiven.report.jgiven import (
    APP_ZIP_PATH,
    ReportAppNotFoundError,
    aggregate_reports,
    clean_reports,
    encode_scenarios,
    generate_report,
    generate_report_data_files,
    install_report_app,
)
from pygiven.report.models import (
    ExecutionStatus,
    GroupReport,
    ScenarioCase,
    ScenarioPart,
    ScenarioPartKind,
    ScenarioReport,
    StepStatus,
)


def write_report(reports_dir, group_name, scenario_name, tags=()):
    part = ScenarioPart(ScenarioPartKind.GIVEN)
    part.stage_method_called("given", [], StepStatus.PASSED, 0)
    part.stage_method_called(
        "a_number", [DecodedParameter(1, "value", "value")], StepStatus.PASSED, 5
    )
    case = ScenarioCase(args=["1"], parts=[part], successful=True, duration_in_nanos=5)
    report = ScenarioReport(
        GroupReport(group_name),
        scenario_name,
        [case],
        ["value"],
        ExecutionStatus.SUCCESS,
        list(tags),
    )
    return report.dump_to_file(reports_dir)


def decode_data_file(text):
    encoded = re.search(r"addZippedScenarios\('(.*)'\);", text).group(1)
    return json.loads(gzip.decompress(base64.b64decode(encoded)).decode("utf-8"))


def build_app_archive(path):
    app_buffer = io.BytesIO()
    with zipfile.ZipFile(app_buffer, "w") as app:
        app.writestr("index.html", "<html></html>")
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(APP_ZIP_PATH, app_buffer.getvalue())
    return path


def test_aggregate_groups_scenarios(tmp_path):
    write_report(tmp_path, "Sum", "Adding")
    write_report(tmp_path, "Sum", "Subtracting")
    write_report(tmp_path, "Product", "Multiplying")

    document = aggregate_reports(tmp_path.iterdir())

    groups = {model["name"]: model for model in document["scenarios"]}
    assert sorted(groups) == ["Product", "Sum"]
    assert len(groups["Sum"]["scenarios"]) == 2

    scenario = groups["Product"]["scenarios"][0]
    assert scenario["testMethodName"] == "Multiplying"
    assert scenario["executionStatus"] == "SUCCESS"
    assert scenario["explicitParameters"] == ["value"]
    steps = scenario["scenarioCases"][0]["steps"]
    assert steps[0]["name"] == "a_number"
    assert steps[0]["words"][0] == {"isIntroWord": True, "value": "Given"}
    assert steps[0]["words"][2]["argumentInfo"]["argumentName"] == "value"


def test_aggregate_applies_file_filter(tmp_path):
    kept = write_report(tmp_path, "Sum", "Adding")
    write_report(tmp_path, "Sum", "Subtracting")

    document = aggregate_reports(tmp_path.iterdir(), lambda name: name == kept.name)

    assert [s["testMethodName"] for s in document["scenarios"][0]["scenarios"]] == ["Adding"]


def test_tags_end_up_in_the_tag_map(tmp_path):
    write_report(tmp_path, "Sum", "Adding", tags=[build_tag("Issue", description="Bug")("7")])

    model = aggregate_reports(tmp_path.iterdir())["scenarios"][0]

    assert model["scenarios"][0]["tagIds"] == ["Issue-7"]
    assert model["tagMap"]["Issue-7"]["value"] == "7"
    assert model["tagMap"]["Issue-7"]["description"] == "Bug"


def test_encode_scenarios_is_gzipped_base64():
    document = {"scenarios": [{"name": "é"}]}

    decoded = gzip.decompress(base64.b64decode(encode_scenarios(document)))

    assert json.loads(decoded.decode("utf-8")) == document


def test_generate_report_data_files(tmp_path):
    reports_dir = tmp_path / "reports"
    write_report(reports_dir, "Sum", "Adding")

    data_dir = generate_report_data_files(reports_dir, tmp_path / "html", title="Title")

    assert sorted(p.name for p in data_dir.iterdir()) == ["data0.js", "metaData.js", "tags.js"]
    assert (data_dir / "tags.js").read_text() == "jgivenReport.setTags({});\n"
    assert '"title": "Title"' in (data_dir / "metaData.js").read_text()
    document = decode_data_file((data_dir / "data0.js").read_text())
    assert document["scenarios"][0]["name"] == "Sum"


def test_install_report_app(tmp_path):
    archive = build_app_archive(tmp_path / "report.jar")
    report_dir = tmp_path / "html"
    report_dir.mkdir()
    (report_dir / "stale.txt").write_text("old")

    install_report_app(report_dir, archive)

    assert (report_dir / "index.html").read_text() == "<html></html>"
    assert (report_dir / "data").is_dir()
    assert not (report_dir / "stale.txt").exists()


def test_generate_report(tmp_path):
    build_app_archive(tmp_path / "jgiven-html5-report.jar")
    write_report(tmp_path / ".pygiven-reports", "Sum", "Adding")

    report_dir = generate_report(PyGivenConfig(), base_dir=tmp_path)

    assert report_dir == tmp_path / "jGiven-report"
    assert (report_dir / "index.html").exists()
    assert (report_dir / "data" / "data0.js").exists()


def test_generate_report_without_reports(tmp_path):
    assert generate_report(PyGivenConfig(), base_dir=tmp_path) is None


def test_generate_report_without_app(tmp_path):
    write_report(tmp_path / ".pygiven-reports", "Sum", "Adding")

    with pytest.raises(ReportAppNotFoundError):
        generate_report(PyGivenConfig(), base_dir=tmp_path)


def test_clean_reports(tmp_path):
    write_report(tmp_path / ".pygiven-reports", "Sum", "Adding")
    config = PyGivenConfig()

    assert clean_reports(config, base_dir=tmp_path) is True
    assert not (tmp_path / ".pygiven-reports").exists()
    assert clean_reports(config, base_dir=tmp_path) is False
