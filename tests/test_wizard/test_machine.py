"""Tests for the wizard state machine (goback.wizard.machine / goback.wizard.state)."""

from __future__ import annotations

import pytest

from goback.project.models import new_project_configuration
from goback.wizard.machine import next_step, previous_step, run_events, transition
from goback.wizard.state import (
    SKIP_RULES,
    EventKind,
    WizardEvent,
    WizardState,
    WizardStep,
    initial_state,
    should_skip,
    to_configuration,
)

pytestmark = pytest.mark.unit


def ev(kind: EventKind, text: str = "") -> WizardEvent:
    return WizardEvent(kind=kind, text=text)


SELECT = ev(EventKind.SELECT)
NEXT = ev(EventKind.NEXT)
PREVIOUS = ev(EventKind.PREVIOUS)
BACK = ev(EventKind.BACK)
SUBMIT = ev(EventKind.SUBMIT)


@pytest.fixture
def start(tmp_path) -> WizardState:
    config = new_project_configuration(cwd=tmp_path / "demo")
    return initial_state(config, module_prefix="github.com/acme")


def through_choices(state: WizardState, devops: bool = False) -> WizardState:
    """Accept the defaults for the four choice steps and answer the DevOps question."""
    state = run_events(state, [SELECT, SELECT, SELECT, SELECT])
    assert state.step == WizardStep.DEVOPS_OPTIONS
    # Options are yes, no; the cursor starts on the current value (no).
    if devops:
        return run_events(state, [PREVIOUS, SELECT])
    return transition(state, SELECT)


class TestSkipRules:
    def test_table_keys(self):
        assert set(SKIP_RULES) == {
            (WizardStep.DEVOPS_OPTIONS, WizardStep.DEVOPS_TOOLS),
            (WizardStep.PROJECT_DETAILS, WizardStep.DEVOPS_TOOLS),
        }

    def test_skipped_only_when_disabled(self):
        disabled = WizardState(devops_enabled=False)
        enabled = WizardState(devops_enabled=True)
        assert should_skip(disabled, WizardStep.DEVOPS_OPTIONS, WizardStep.DEVOPS_TOOLS)
        assert not should_skip(enabled, WizardStep.DEVOPS_OPTIONS, WizardStep.DEVOPS_TOOLS)
        assert not should_skip(disabled, WizardStep.FRAMEWORK, WizardStep.DATABASE)

    def test_next_and_previous(self):
        disabled = WizardState(devops_enabled=False)
        assert next_step(disabled, WizardStep.DEVOPS_OPTIONS) == WizardStep.PROJECT_DETAILS
        assert previous_step(disabled, WizardStep.PROJECT_DETAILS) == WizardStep.DEVOPS_OPTIONS
        enabled = WizardState(devops_enabled=True)
        assert next_step(enabled, WizardStep.DEVOPS_OPTIONS) == WizardStep.DEVOPS_TOOLS
        assert previous_step(enabled, WizardStep.PROJECT_DETAILS) == WizardStep.DEVOPS_TOOLS
        assert previous_step(enabled, WizardStep.FRAMEWORK) is None


class TestPurity:
    def test_input_state_is_not_mutated(self, start):
        before = start.model_dump()
        transition(start, SELECT)
        transition(start, ev(EventKind.CANCEL))
        assert start.model_dump() == before


class TestChoiceSteps:
    def test_cursor_is_clamped(self, start):
        state = run_events(start, [PREVIOUS, PREVIOUS])
        assert state.cursor == 0
        state = run_events(state, [NEXT] * 10)
        assert state.cursor == 3

    def test_select_commits_and_advances(self, start):
        state = run_events(start, [NEXT, SELECT])
        assert state.framework == "gin"
        assert state.step == WizardStep.DATABASE
        assert state.is_complete(WizardStep.FRAMEWORK)

    def test_initial_cursor_sits_on_default(self, start):
        assert start.cursor == 0
        state = run_events(start, [SELECT, NEXT, NEXT, SELECT, BACK])
        assert state.step == WizardStep.DATABASE
        assert state.cursor == 2

    def test_back_clears_completion_of_left_step(self, start):
        state = run_events(start, [SELECT, SELECT])
        assert state.step == WizardStep.TOOL
        state = run_events(state, [SELECT, SELECT])
        assert state.is_complete(WizardStep.ARCHITECTURE)
        state = run_events(state, [BACK, BACK])
        assert state.step == WizardStep.TOOL
        assert not state.is_complete(WizardStep.DEVOPS_OPTIONS)
        assert not state.is_complete(WizardStep.ARCHITECTURE)

    def test_back_from_first_step_cancels(self, start):
        state = transition(start, BACK)
        assert state.step == WizardStep.CANCELLED
        assert state.cancelled


class TestDevOps:
    def test_disabled_skips_tools(self, start):
        state = through_choices(start, devops=False)
        assert state.step == WizardStep.PROJECT_DETAILS
        assert state.devops_enabled is False
        state = transition(state, BACK)
        assert state.step == WizardStep.DEVOPS_OPTIONS

    def test_enabled_visits_tools(self, start):
        state = through_choices(start, devops=True)
        assert state.devops_enabled
        assert state.step == WizardStep.DEVOPS_TOOLS

    def test_toggle_keeps_canonical_order(self, start):
        state = through_choices(start, devops=True)
        # kubernetes, helm, terraform, ansible
        state = run_events(state, [NEXT, NEXT, NEXT, ev(EventKind.TOGGLE), PREVIOUS, PREVIOUS, PREVIOUS, SELECT])
        assert state.devops_tools == ["kubernetes", "ansible"]
        assert state.step == WizardStep.DEVOPS_TOOLS

    def test_toggle_twice_removes(self, start):
        state = through_choices(start, devops=True)
        state = run_events(state, [ev(EventKind.TOGGLE), ev(EventKind.TOGGLE)])
        assert state.devops_tools == []

    def test_continue_with_no_tools_is_allowed(self, start):
        state = through_choices(start, devops=True)
        state = transition(state, ev(EventKind.CONTINUE))
        assert state.step == WizardStep.PROJECT_DETAILS

    def test_zero_tools_blocked_at_details(self, start):
        state = through_choices(start, devops=True)
        state = run_events(state, [ev(EventKind.CONTINUE), SUBMIT, SUBMIT, SUBMIT, SUBMIT])
        assert state.step == WizardStep.PROJECT_DETAILS
        assert "At least one DevOps tool must be selected when DevOps is enabled." in state.errors


class TestProjectDetails:
    def test_focus_cycles(self, start):
        state = through_choices(start)
        state = transition(state, ev(EventKind.PREVIOUS_FIELD))
        assert state.focused_field == "output_dir"
        state = transition(state, ev(EventKind.NEXT_FIELD))
        assert state.focused_field == "project_name"

    def test_name_updates_derived_fields(self, start):
        state = through_choices(start)
        state = transition(state, ev(EventKind.INPUT, "orders"))
        assert state.module_path == "github.com/acme/orders"
        assert state.output_dir == "./orders"

    def test_edited_fields_stop_following_name(self, start):
        state = through_choices(start)
        state = run_events(state, [
            ev(EventKind.NEXT_FIELD),
            ev(EventKind.INPUT, "example.com/custom/path"),
            ev(EventKind.PREVIOUS_FIELD),
            ev(EventKind.INPUT, "orders"),
        ])
        assert state.module_path == "example.com/custom/path"
        assert state.output_dir == "./orders"

    def test_invalid_input_blocks_and_is_recoverable(self, start):
        state = through_choices(start)
        state = run_events(state, [ev(EventKind.INPUT, "")] + [SUBMIT] * 4)
        assert state.step == WizardStep.PROJECT_DETAILS
        assert "Project name is required and cannot be empty." in state.errors

        state = run_events(state, [ev(EventKind.NEXT_FIELD), ev(EventKind.INPUT, "orders")])
        state = run_events(state, [ev(EventKind.NEXT_FIELD), ev(EventKind.INPUT, "github.com/acme/orders")])
        state = run_events(state, [ev(EventKind.NEXT_FIELD), ev(EventKind.NEXT_FIELD), ev(EventKind.INPUT, "./orders")])
        assert state.focused_field == "output_dir"
        state = transition(state, SUBMIT)
        assert state.step == WizardStep.REVIEW
        assert state.errors == []

    def test_submit_on_non_last_field_moves_focus(self, start):
        state = through_choices(start)
        state = transition(state, SUBMIT)
        assert state.step == WizardStep.PROJECT_DETAILS
        assert state.focused_field == "module_path"


class TestReview:
    def reach_review(self, start) -> WizardState:
        state = through_choices(start)
        state = run_events(state, [SUBMIT] * 4)
        assert state.step == WizardStep.REVIEW
        return state

    def test_confirm(self, start):
        state = transition(self.reach_review(start), ev(EventKind.CONFIRM))
        assert state.step == WizardStep.CONFIRMED
        assert state.confirmed

    def test_edit_rewinds_to_details(self, start):
        state = transition(self.reach_review(start), ev(EventKind.EDIT))
        assert state.step == WizardStep.PROJECT_DETAILS
        assert not state.is_complete(WizardStep.PROJECT_DETAILS)

    def test_terminal_states_ignore_events(self, start):
        state = transition(self.reach_review(start), ev(EventKind.CONFIRM))
        for kind in EventKind:
            assert transition(state, ev(kind)).step == WizardStep.CONFIRMED

    def test_cancel_from_any_step(self, start):
        state = self.reach_review(start)
        assert transition(state, ev(EventKind.CANCEL)).step == WizardStep.CANCELLED
        assert transition(start, ev(EventKind.CANCEL)).cancelled


class TestToConfiguration:
    def test_full_session(self, start):
        state = run_events(start, [NEXT, NEXT, SELECT, NEXT, SELECT, NEXT, SELECT, NEXT, NEXT, NEXT, SELECT])
        state = run_events(state, [PREVIOUS, SELECT])
        state = run_events(state, [NEXT, ev(EventKind.TOGGLE), ev(EventKind.CONTINUE)])
        state = run_events(state, [ev(EventKind.INPUT, "payments")] + [SUBMIT] * 4)
        state = transition(state, ev(EventKind.CONFIRM))

        config = to_configuration(state)
        assert config.framework == "chi"
        assert config.database == "mysql"
        assert config.tool == "sqlc"
        assert config.architecture == "hexagonal"
        assert config.devops.enabled
        assert config.devops.tools == ["helm"]
        assert config.project_name == "payments"
        assert config.module_path == "github.com/acme/payments"

    def test_disabled_devops_drops_tools(self, start):
        state = start.model_copy(update={"devops_enabled": False, "devops_tools": ["helm"]})
        assert to_configuration(state).devops.tools == []
