"""Step-by-step configuration wizard.

Usage::

    from goback.wizard import WizardEvent, EventKind, initial_state, transition

    state = initial_state(new_project_configuration())
    state = transition(state, WizardEvent(kind=EventKind.SELECT))
"""

from goback.wizard.app import WizardApp, key_to_events
from goback.wizard.machine import next_step, previous_step, run_events, transition
from goback.wizard.state import (
    SKIP_RULES,
    STEP_ORDER,
    EventKind,
    WizardEvent,
    WizardState,
    WizardStep,
    initial_state,
    should_skip,
    to_configuration,
)

__all__ = [
    "EventKind",
    "SKIP_RULES",
    "STEP_ORDER",
    "WizardApp",
    "WizardEvent",
    "WizardState",
    "WizardStep",
    "initial_state",
    "key_to_events",
    "next_step",
    "previous_step",
    "run_events",
    "should_skip",
    "to_configuration",
    "transition",
]
