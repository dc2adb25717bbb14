"""Report model of executed scenarios.

A ``ScenarioReport`` holds one ``ScenarioCase`` per executed case; each case
is split into GIVEN / WHEN / THEN ``ScenarioPart`` objects made of ``Step``
objects, themselves made of ``Word`` objects. The whole tree is written as
one JSON file per scenario.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from pygiven.core.formatting import format_parameter
from pygiven.core.parameters import DecodedParameter

if TYPE_CHECKING:
    from pygiven.core.tags import Tag

logger = logging.getLogger(__name__)

INTRO_WORD_METHODS = ("given", "when", "then", "and", "but", "with")

TWO_DOLLAR_PLACEHOLDER = "\x00escapeddollar\x00"

_FRAGMENT_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+|[^\W_]+")


class StepStatus(str, Enum):
    """Step execution status."""
    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class ScenarioPartKind(str, Enum):
    GIVEN = "GIVEN"
    WHEN = "WHEN"
    THEN = "THEN"


class ExecutionStatus(str, Enum):
    """Scenario execution status, set once all of its cases ran."""
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


def intro_word_of(method_name: str) -> Optional[str]:
    """The intro word a connective method stands for (``and_`` -> ``and``)."""
    word = method_name.rstrip("_")
    return word if word in INTRO_WORD_METHODS else None


def humanize_fragment(fragment: str) -> str:
    """``'a_numberOf_items'`` -> ``'a number of items'``."""
    return " ".join(word.lower() for word in _FRAGMENT_WORD_RE.findall(fragment))


def humanize(name: str) -> str:
    """``'two_numbers_can_be_added'`` -> ``'Two numbers can be added'``."""
    text = humanize_fragment(name)
    return text[:1].upper() + text[1:]


@dataclass
class Word:
    value: str
    is_intro_word: bool = False
    scenario_parameter_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "value": self.value,
            "isIntroWord": self.is_intro_word,
            "scenarioParameterName": self.scenario_parameter_name,
        }


def build_words(
    template: str,
    parameters: list[DecodedParameter],
    is_first_step: bool,
    intro_word: Optional[str],
) -> list[Word]:
    """Split a step template on ``$`` placeholders and interleave the arguments.

    Arguments left once every placeholder is filled are appended at the end.
    """
    remaining = list(parameters)
    words: list[Word] = []
    fragments = template.replace("$$", TWO_DOLLAR_PLACEHOLDER).split("$")
    for index, fragment in enumerate(fragments):
        if index > 0 and remaining:
            words.append(_parameter_word(remaining.pop(0)))
        words.extend(_fragment_words(fragment))
    words.extend(_parameter_word(parameter) for parameter in remaining)
    words = [word for word in words if word.value != ""]

    if intro_word:
        words.insert(0, Word(intro_word, is_intro_word=True))

    if is_first_step and words:
        first = words[0]
        words[0] = Word(
            first.value[:1].upper() + first.value[1:],
            first.is_intro_word,
            first.scenario_parameter_name,
        )
    return words


def _fragment_words(fragment: str) -> list[Word]:
    words = []
    for index, piece in enumerate(fragment.split(TWO_DOLLAR_PLACEHOLDER)):
        if index > 0:
            words.append(Word("$"))
        humanized = humanize_fragment(piece)
        if humanized:
            words.append(Word(humanized))
    return words


def _parameter_word(parameter: DecodedParameter) -> Word:
    return Word(
        format_parameter(parameter.value, parameter.formatters),
        scenario_parameter_name=parameter.scenario_parameter_name,
    )


@dataclass
class Step:
    """A reported step."""
    name: str
    method_name: str
    words: list[Word]
    status: StepStatus
    duration_in_nanos: int = 0

    @classmethod
    def build(
        cls,
        method_name: str,
        parameters: list[DecodedParameter],
        is_first_step: bool,
        intro_word: Optional[str],
        status: StepStatus,
        duration_in_nanos: int,
        template: Optional[str] = None,
    ) -> "Step":
        words = build_words(template or method_name, parameters, is_first_step, intro_word)
        return cls(
            name=" ".join(word.value for word in words),
            method_name=method_name,
            words=words,
            status=status,
            duration_in_nanos=duration_in_nanos,
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "methodName": self.method_name,
            "words": [w.to_dict() for w in self.words],
            "status": self.status.value,
            "durationInNanos": self.duration_in_nanos,
        }


@dataclass
class ScenarioPart:
    kind: ScenarioPartKind
    steps: list[Step] = field(default_factory=list)
    intro_word: Optional[str] = None

    def stage_method_called(
        self,
        method_name: str,
        parameters: list[DecodedParameter],
        status: StepStatus,
        duration_in_nanos: int,
        template: Optional[str] = None,
    ) -> None:
        """Record a call; connectives only set the intro word of the next step."""
        intro_word = intro_word_of(method_name)
        if intro_word:
            self.intro_word = intro_word
            return

        self.steps.append(
            Step.build(
                method_name,
                parameters,
                is_first_step=not self.steps,
                intro_word=self.intro_word,
                status=status,
                duration_in_nanos=duration_in_nanos,
                template=template,
            )
        )
        self.intro_word = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "steps": [s.to_dict() for s in self.steps],
            "introWord": self.intro_word,
        }


@dataclass
class ScenarioCase:
    args: list[str] = field(default_factory=list)
    parts: list[ScenarioPart] = field(default_factory=list)
    successful: bool = False
    duration_in_nanos: int = 0
    error_message: Optional[str] = None
    stack_trace: Optional[list[str]] = None

    def to_dict(self) -> dict:
        return {
            "args": list(self.args),
            "parts": [p.to_dict() for p in self.parts],
            "successful": self.successful,
            "durationInNanos": self.duration_in_nanos,
            "errorMessage": self.error_message,
            "stackTrace": self.stack_trace,
        }


@dataclass
class GroupReport:
    name: str

    def to_dict(self) -> dict:
        return {"name": self.name}


@dataclass
class ScenarioReport:
    """Report of one scenario, written to disk once all of its cases ran."""
    group_report: GroupReport
    name: str
    cases: list[ScenarioCase] = field(default_factory=list)
    argument_names: list[str] = field(default_factory=list)
    execution_status: Optional[ExecutionStatus] = None
    tags: list["Tag"] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "groupReport": self.group_report.to_dict(),
            "name": self.name,
            "cases": [c.to_dict() for c in self.cases],
            "argumentNames": list(self.argument_names),
            "executionStatus": self.execution_status.value if self.execution_status else None,
            "tags": [t.to_dict() for t in self.tags],
        }

    def dump_to_file(self, reports_destination: Union[str, Path]) -> Path:
        """Write the report as JSON under its content-addressed file name."""
        destination = Path(reports_destination)
        destination.mkdir(parents=True, exist_ok=True)

        path = destination / compute_scenario_file_name(self.group_report.name, self.name)
        path.write_text(json.dumps(self.to_dict(), ensure_ascii=False), encoding="utf-8")
        logger.info(f"Scenario report written: {path}")
        return path


def compute_scenario_file_name(group_name: str, scenario_name: str) -> str:
    return hashlib.sha256(f"{group_name}\n{scenario_name}".encode("utf-8")).hexdigest()
