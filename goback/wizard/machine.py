"""Pure transition function of the configuration wizard.

``transition(state, event)`` never mutates its input: every handler works on
a deep copy and returns it.  Events that mean nothing on the current step are
ignored, and terminal steps ignore everything.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from goback.project.validator import validate_project_config

from .state import (
    CHOICE_AXES,
    DETAIL_FIELDS,
    STEP_ORDER,
    EventKind,
    WizardEvent,
    WizardState,
    WizardStep,
    canonical_tools,
    cursor_for,
    should_skip,
    step_options,
    to_configuration,
)

logger = logging.getLogger(__name__)

Handler = Callable[[WizardState, WizardEvent], WizardState]


# ---------------------------------------------------------------------------
# Step navigation
# ---------------------------------------------------------------------------

def next_step(state: WizardState, current: WizardStep) -> WizardStep:
    """Return the step that follows *current*, honouring the skip rules."""
    index = STEP_ORDER.index(current)
    for candidate in STEP_ORDER[index + 1:]:
        if not should_skip(state, current, candidate):
            return candidate
    return WizardStep.CONFIRMED


def previous_step(state: WizardState, current: WizardStep) -> Optional[WizardStep]:
    """Return the step before *current*, or ``None`` when *current* is the first."""
    index = STEP_ORDER.index(current)
    for candidate in reversed(STEP_ORDER[:index]):
        if not should_skip(state, current, candidate):
            return candidate
    return None


def _enter(state: WizardState, step: WizardStep) -> WizardState:
    state.step = step
    state.cursor = cursor_for(state, step)
    if step == WizardStep.PROJECT_DETAILS:
        state.focus_index = 0
    logger.debug("wizard entered step %s", step.value)
    return state


def _advance(state: WizardState) -> WizardState:
    state.completed[state.step] = True
    return _enter(state, next_step(state, state.step))


def _go_back(state: WizardState) -> WizardState:
    leaving = state.step
    target = previous_step(state, leaving)
    state.completed.pop(leaving, None)
    if target is None:
        return _cancel(state)
    return _enter(state, target)


def _cancel(state: WizardState) -> WizardState:
    state.step = WizardStep.CANCELLED
    state.cancelled = True
    logger.debug("wizard cancelled")
    return state


def _move_cursor(state: WizardState, delta: int) -> WizardState:
    count = len(step_options(state.step))
    if count:
        state.cursor = max(0, min(count - 1, state.cursor + delta))
    return state


# ---------------------------------------------------------------------------
# Per-step handlers
# ---------------------------------------------------------------------------

def _on_choice(state: WizardState, event: WizardEvent) -> WizardState:
    if event.kind == EventKind.NEXT:
        return _move_cursor(state, 1)
    if event.kind == EventKind.PREVIOUS:
        return _move_cursor(state, -1)
    if event.kind == EventKind.SELECT:
        token, _ = step_options(state.step)[state.cursor]
        if state.step == WizardStep.DEVOPS_OPTIONS:
            state.devops_enabled = token == "yes"
        else:
            setattr(state, CHOICE_AXES[state.step].value, token)
        return _advance(state)
    return state


def _on_devops_tools(state: WizardState, event: WizardEvent) -> WizardState:
    if event.kind == EventKind.NEXT:
        return _move_cursor(state, 1)
    if event.kind == EventKind.PREVIOUS:
        return _move_cursor(state, -1)
    if event.kind in (EventKind.TOGGLE, EventKind.SELECT):
        token, _ = step_options(state.step)[state.cursor]
        if token in state.devops_tools:
            state.devops_tools = [t for t in state.devops_tools if t != token]
        else:
            state.devops_tools = canonical_tools(state.devops_tools + [token])
        return state
    if event.kind == EventKind.CONTINUE:
        return _advance(state)
    return state


def derived_module_path(state: WizardState, name: str) -> str:
    return f"{state.module_prefix.rstrip('/')}/{name}"


def derived_output_dir(state: WizardState, name: str) -> str:
    if state.output_root in ("", ".", "./"):
        return f"./{name}"
    return str(Path(state.output_root) / name)


def _set_field(state: WizardState, field: str, text: str) -> WizardState:
    setattr(state, field, text)
    state.edited[field] = True
    if field == "project_name":
        name = text.strip()
        # Follow the name until the user types their own value.
        if not state.edited.get("module_path"):
            state.module_path = derived_module_path(state, name) if name else ""
        if not state.edited.get("output_dir"):
            state.output_dir = derived_output_dir(state, name) if name else ""
    return state


def _on_details(state: WizardState, event: WizardEvent) -> WizardState:
    last = len(DETAIL_FIELDS) - 1
    if event.kind == EventKind.INPUT:
        return _set_field(state, state.focused_field, event.text)
    if event.kind == EventKind.NEXT_FIELD:
        state.focus_index = (state.focus_index + 1) % len(DETAIL_FIELDS)
        return state
    if event.kind == EventKind.PREVIOUS_FIELD:
        state.focus_index = (state.focus_index - 1) % len(DETAIL_FIELDS)
        return state
    if event.kind == EventKind.SUBMIT:
        if state.focus_index < last:
            state.focus_index += 1
            return state
        errors = validate_project_config(to_configuration(state))
        state.errors = errors
        if errors:
            logger.debug("project details rejected: %s", "; ".join(errors))
            return state
        return _advance(state)
    return state


def _on_review(state: WizardState, event: WizardEvent) -> WizardState:
    if event.kind == EventKind.CONFIRM:
        state.completed[WizardStep.REVIEW] = True
        state.step = WizardStep.CONFIRMED
        state.confirmed = True
        logger.debug("wizard confirmed")
        return state
    if event.kind == EventKind.EDIT:
        state.completed.pop(WizardStep.REVIEW, None)
        state.completed.pop(WizardStep.PROJECT_DETAILS, None)
        return _enter(state, WizardStep.PROJECT_DETAILS)
    return state


_HANDLERS: dict[WizardStep, Handler] = {
    WizardStep.FRAMEWORK: _on_choice,
    WizardStep.DATABASE: _on_choice,
    WizardStep.TOOL: _on_choice,
    WizardStep.ARCHITECTURE: _on_choice,
    WizardStep.DEVOPS_OPTIONS: _on_choice,
    WizardStep.DEVOPS_TOOLS: _on_devops_tools,
    WizardStep.PROJECT_DETAILS: _on_details,
    WizardStep.REVIEW: _on_review,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def transition(state: WizardState, event: WizardEvent) -> WizardState:
    """Apply *event* to *state* and return the resulting state.

    Args:
        state: Current wizard state; left untouched.
        event: The input event to apply.

    Returns:
        A new ``WizardState``.  For terminal steps this is an unchanged copy.
    """
    new_state = state.model_copy(deep=True)
    if new_state.is_terminal:
        return new_state
    if event.kind == EventKind.CANCEL:
        return _cancel(new_state)
    if event.kind == EventKind.BACK:
        new_state.errors = []
        return _go_back(new_state)
    return _HANDLERS[new_state.step](new_state, event)


def run_events(state: WizardState, events: list[WizardEvent]) -> WizardState:
    """Fold a sequence of events over *state*."""
    for event in events:
        state = transition(state, event)
    return state
