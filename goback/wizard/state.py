"""State, events and skip rules of the configuration wizard.

The wizard walks a fixed sequence of steps.  ``WizardState`` accumulates the
partial configuration as the user moves through them; it is created once per
session and discarded after it reaches ``CONFIRMED`` or ``CANCELLED``.
Transitions live in :mod:`goback.wizard.machine`.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, Field

from goback.project.choices import Axis, DevOpsTool, list_valid
from goback.project.models import DevOpsConfiguration, ProjectConfiguration


class WizardStep(str, Enum):
    """One screen of the wizard."""
    FRAMEWORK = "framework"
    DATABASE = "database"
    TOOL = "tool"
    ARCHITECTURE = "architecture"
    DEVOPS_OPTIONS = "devops_options"
    DEVOPS_TOOLS = "devops_tools"
    PROJECT_DETAILS = "project_details"
    REVIEW = "review"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class EventKind(str, Enum):
    """Kinds of input the wizard reacts to."""
    NEXT = "next"
    PREVIOUS = "previous"
    SELECT = "select"
    TOGGLE = "toggle"
    CONTINUE = "continue"
    INPUT = "input"
    NEXT_FIELD = "next_field"
    PREVIOUS_FIELD = "previous_field"
    SUBMIT = "submit"
    BACK = "back"
    CONFIRM = "confirm"
    EDIT = "edit"
    CANCEL = "cancel"


class WizardEvent(BaseModel):
    """A single input event; ``text`` is only meaningful for ``INPUT``."""
    kind: EventKind
    text: str = ""


STEP_ORDER: list[WizardStep] = [
    WizardStep.FRAMEWORK,
    WizardStep.DATABASE,
    WizardStep.TOOL,
    WizardStep.ARCHITECTURE,
    WizardStep.DEVOPS_OPTIONS,
    WizardStep.DEVOPS_TOOLS,
    WizardStep.PROJECT_DETAILS,
    WizardStep.REVIEW,
]

TERMINAL_STEPS = {WizardStep.CONFIRMED, WizardStep.CANCELLED}

# Single-select steps backed by a registry axis.
CHOICE_AXES: dict[WizardStep, Axis] = {
    WizardStep.FRAMEWORK: Axis.FRAMEWORK,
    WizardStep.DATABASE: Axis.DATABASE,
    WizardStep.TOOL: Axis.TOOL,
    WizardStep.ARCHITECTURE: Axis.ARCHITECTURE,
}

# (token, label) for the DevOps yes/no step.
DEVOPS_OPTIONS: list[tuple[str, str]] = [
    ("yes", "Yes, add DevOps configuration files"),
    ("no", "No, skip DevOps"),
]

DETAIL_FIELDS: list[str] = ["project_name", "module_path", "description", "output_dir"]

DETAIL_LABELS: dict[str, str] = {
    "project_name": "Project name",
    "module_path": "Go module path",
    "description": "Description",
    "output_dir": "Output directory",
}


class WizardState(BaseModel):
    """Everything the wizard knows at one point in a session."""

    step: WizardStep = WizardStep.FRAMEWORK
    cursor: int = 0

    framework: str = ""
    database: str = ""
    tool: str = ""
    architecture: str = ""
    devops_enabled: bool = False
    devops_tools: list[str] = Field(default_factory=list)

    project_name: str = ""
    module_path: str = ""
    description: str = ""
    output_dir: str = ""
    edited: dict[str, bool] = Field(default_factory=dict)
    focus_index: int = 0

    module_prefix: str = "github.com/user"
    output_root: str = "./"

    completed: dict[WizardStep, bool] = Field(default_factory=dict)
    errors: list[str] = Field(default_factory=list)
    confirmed: bool = False
    cancelled: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.step in TERMINAL_STEPS

    @property
    def focused_field(self) -> str:
        return DETAIL_FIELDS[self.focus_index]

    def is_complete(self, step: WizardStep) -> bool:
        return self.completed.get(step, False)


# ---------------------------------------------------------------------------
# Skip rules
# ---------------------------------------------------------------------------

SkipPredicate = Callable[[WizardState], bool]


def _devops_disabled(state: WizardState) -> bool:
    return not state.devops_enabled


# (from_step, to_step) -> predicate; when it holds, to_step is skipped.
SKIP_RULES: dict[tuple[WizardStep, WizardStep], SkipPredicate] = {
    (WizardStep.DEVOPS_OPTIONS, WizardStep.DEVOPS_TOOLS): _devops_disabled,
    (WizardStep.PROJECT_DETAILS, WizardStep.DEVOPS_TOOLS): _devops_disabled,
}


def should_skip(state: WizardState, from_step: WizardStep, to_step: WizardStep) -> bool:
    """Return ``True`` when moving from *from_step* must jump over *to_step*."""
    predicate = SKIP_RULES.get((from_step, to_step))
    return bool(predicate and predicate(state))


# ---------------------------------------------------------------------------
# Options per step
# ---------------------------------------------------------------------------


def step_options(step: WizardStep) -> list[tuple[str, str]]:
    """Return ``(token, label)`` pairs shown on a choice or checkbox step."""
    if step in CHOICE_AXES:
        return [(info.token, info.display) for info in list_valid(CHOICE_AXES[step])]
    if step == WizardStep.DEVOPS_OPTIONS:
        return list(DEVOPS_OPTIONS)
    if step == WizardStep.DEVOPS_TOOLS:
        return [(info.token, info.display) for info in list_valid(Axis.DEVOPS_TOOL)]
    return []


def current_value(state: WizardState, step: WizardStep) -> Optional[str]:
    """Return the token already chosen on a single-select step, if any."""
    if step in CHOICE_AXES:
        return getattr(state, CHOICE_AXES[step].value) or None
    if step == WizardStep.DEVOPS_OPTIONS:
        return "yes" if state.devops_enabled else "no"
    return None


# ---------------------------------------------------------------------------
# Construction / conversion
# ---------------------------------------------------------------------------


def initial_state(config: ProjectConfiguration, module_prefix: str = "github.com/user",
                  output_root: str = "./") -> WizardState:
    """Seed a wizard session from a starting configuration."""
    state = WizardState(
        framework=config.framework,
        database=config.database,
        tool=config.tool,
        architecture=config.architecture,
        devops_enabled=config.devops.enabled,
        devops_tools=list(config.devops.tools),
        project_name=config.project_name,
        module_path=config.module_path,
        description=config.description,
        output_dir=config.output_dir,
        module_prefix=module_prefix,
        output_root=output_root,
    )
    state.cursor = cursor_for(state, WizardStep.FRAMEWORK)
    return state


def cursor_for(state: WizardState, step: WizardStep) -> int:
    """Cursor position on entering *step*: the previously chosen value, else 0."""
    value = current_value(state, step)
    tokens = [token for token, _ in step_options(step)]
    if value in tokens:
        return tokens.index(value)
    return 0


def to_configuration(state: WizardState) -> ProjectConfiguration:
    """Build the ``ProjectConfiguration`` accumulated so far."""
    tools = state.devops_tools if state.devops_enabled else []
    return ProjectConfiguration(
        project_name=state.project_name.strip(),
        module_path=state.module_path.strip(),
        description=state.description.strip(),
        output_dir=state.output_dir.strip(),
        framework=state.framework,
        database=state.database,
        tool=state.tool,
        architecture=state.architecture,
        devops=DevOpsConfiguration(enabled=state.devops_enabled, tools=list(tools)),
    )


def canonical_tools(tools: list[str]) -> list[str]:
    """Order a DevOps tool selection canonically."""
    order = [tool.value for tool in DevOpsTool]
    return sorted(set(tools), key=lambda t: order.index(t) if t in order else len(order))
