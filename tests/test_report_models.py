"""Tests for step words and the scenario report model."""

import hashlib
import json

from pygiven.core.parameters import DecodedParameter
from pygiven.report.models import (
    ExecutionStatus,
    GroupReport,
    ScenarioCase,
    ScenarioPart,
    ScenarioPartKind,
    ScenarioReport,
    Step,
    StepStatus,
    build_words,
    compute_scenario_file_name,
    humanize,
)


def param(value, scenario_parameter_name=None, formatters=()):
    return DecodedParameter(value, scenario_parameter_name, "value", list(formatters))


def values(words):
    return [word.value for word in words]


def test_humanize():
    assert humanize("two_numbers_can_be_added") == "Two numbers can be added"
    assert humanize("aNumberOf_items") == "A number of items"


def test_placeholders_and_escaped_dollar():
    words = build_words("a_$_of_$$", [param(500)], is_first_step=False, intro_word=None)

    assert values(words) == ["a", "500", "of", "$"]


def test_parameters_without_placeholders_are_appended():
    words = build_words("a_number", [param(1), param("x")], is_first_step=False, intro_word=None)

    assert values(words) == ["a number", "1", "x"]


def test_trailing_placeholder():
    words = build_words("the_total_is_$", [param(12)], is_first_step=False, intro_word=None)

    assert values(words) == ["the total is", "12"]


def test_empty_formatted_parameter_is_dropped():
    words = build_words(
        "the_door_is_$_open",
        [param(True, formatters=[lambda value: "" if value else "not"])],
        is_first_step=False,
        intro_word=None,
    )

    assert values(words) == ["the door is", "open"]


def test_intro_word_and_first_step_capitalization():
    words = build_words("a_number", [param(1)], is_first_step=True, intro_word="given")

    assert values(words) == ["Given", "a number", "1"]
    assert words[0].is_intro_word is True
    assert words[1].is_intro_word is False


def test_scenario_parameter_name_is_kept():
    words = build_words("a_number", [param(3, "value")], is_first_step=False, intro_word=None)

    assert words[1].scenario_parameter_name == "value"
    assert words[0].scenario_parameter_name is None


def test_step_name_joins_words():
    step = Step.build("a_number", [param(1)], True, "given", StepStatus.PASSED, 10)

    assert step.name == "Given a number 1"
    assert step.method_name == "a_number"
    assert step.to_dict()["status"] == "PASSED"


def test_part_connectives_set_the_next_intro_word():
    part = ScenarioPart(ScenarioPartKind.GIVEN)
    part.stage_method_called("given", [], StepStatus.PASSED, 0)
    part.stage_method_called("a_number", [param(1)], StepStatus.PASSED, 0)
    part.stage_method_called("and_", [], StepStatus.PASSED, 0)
    part.stage_method_called("another_number", [param(2)], StepStatus.PASSED, 0)

    assert [step.name for step in part.steps] == ["Given a number 1", "and another number 2"]
    assert part.intro_word is None


def test_step_template_overrides_method_name():
    part = ScenarioPart(ScenarioPartKind.THEN)
    part.stage_method_called(
        "price_is", [param(500)], StepStatus.PASSED, 0, template="the_price_is_$_$$"
    )

    assert part.steps[0].name == "The price is 500 $"


def test_file_name_is_sha256_of_group_and_scenario():
    expected = hashlib.sha256("group\nscenario".encode("utf-8")).hexdigest()

    assert compute_scenario_file_name("group", "scenario") == expected


def test_dump_to_file(tmp_path):
    report = ScenarioReport(GroupReport("Sum"), "Two numbers can be added", [ScenarioCase()])
    report.execution_status = ExecutionStatus.SUCCESS

    path = report.dump_to_file(tmp_path / "reports")

    assert path.name == compute_scenario_file_name("Sum", "Two numbers can be added")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["groupReport"] == {"name": "Sum"}
    assert data["executionStatus"] == "SUCCESS"
    assert data["cases"][0]["successful"] is False
    assert data["tags"] == []
