"""Tests for stage declarations: state, hidden steps, hooks and templates."""

import pytest

from pygiven import After, Before, Hidden, Stage, StageDeclarationError, State, StepTemplate, step_template
from pygiven.core.hidden import is_hidden_step
from pygiven.core.lifecycle import is_lifecycle_method
from pygiven.core.state import copy_state_properties, initialize_state, state_store
from pygiven.core.templates import get_step_template


def test_state_fields_are_registered_and_defaulted():
    class CounterStage(Stage):
        counter = State(0)
        items = State(default_factory=list)

    assert state_store.get_properties(CounterStage) == ["counter", "items"]
    assert CounterStage.counter == 0

    first, second = CounterStage(), CounterStage()
    initialize_state(first)
    initialize_state(second)
    first.items.append(1)

    assert second.items == []


def test_state_is_copied_only_between_shared_fields():
    class Source(Stage):
        result = State()
        private = 1

    class Target(Stage):
        result = State()
        private = 2

    source, target = Source(), Target()
    source.result = 42
    source.private = 10

    copy_state_properties(source, target)

    assert target.result == 42
    assert target.private == 2


def test_state_on_a_method_is_rejected():
    class MethodStage(Stage):
        def result(self):
            return self

    with pytest.raises(StageDeclarationError, match="State can only be applied to fields"):
        State.add_property(MethodStage, "result")


def test_hidden_steps():
    class HiddenStage(Stage):
        @Hidden
        def setup_things(self):
            return self

        def explicit(self):
            return self

        def visible(self):
            return self

    Hidden.add_hidden_step(HiddenStage, "explicit")

    assert is_hidden_step(HiddenStage(), "setup_things")
    assert is_hidden_step(HiddenStage(), "explicit")
    assert not is_hidden_step(HiddenStage(), "visible")


def test_hidden_on_a_field_is_rejected():
    class FieldStage(Stage):
        value = 1

    with pytest.raises(StageDeclarationError, match="can only be applied to methods"):
        Hidden.add_hidden_step(FieldStage, "value")


def test_marker_on_a_non_function_is_rejected():
    with pytest.raises(StageDeclarationError):
        Before(42)


def test_lifecycle_methods():
    class HookStage(Stage):
        @Before
        def open(self):
            pass

        @After
        def close(self):
            pass

        def step(self):
            return self

    stage = HookStage()

    assert is_lifecycle_method(stage, "open")
    assert is_lifecycle_method(stage, "close")
    assert not is_lifecycle_method(stage, "step")


def test_markers_are_inherited():
    class BaseStage(Stage):
        @Hidden
        def helper(self):
            return self

    class ChildStage(BaseStage):
        pass

    assert is_hidden_step(ChildStage(), "helper")
    assert not is_hidden_step(BaseStage(), "other")


def test_step_templates():
    class PriceStage(Stage):
        @step_template("the_price_is_$_$$")
        def price_is(self, amount):
            return self

        def total_is(self, amount):
            return self

    StepTemplate.add_template(PriceStage, "total_is", "the_total_is_$")

    assert get_step_template(PriceStage, "price_is") == "the_price_is_$_$$"
    assert get_step_template(PriceStage(), "total_is") == "the_total_is_$"
    assert get_step_template(PriceStage, "unknown") is None


def test_subclass_template_wins():
    class BaseStage(Stage):
        @step_template("base_$")
        def step(self, value):
            return self

    class ChildStage(BaseStage):
        @step_template("child_$")
        def step(self, value):
            return self

    assert get_step_template(ChildStage, "step") == "child_$"
    assert get_step_template(BaseStage, "step") == "base_$"
