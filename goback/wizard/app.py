"""Interactive terminal front-end for the configuration wizard.

A line-oriented loop on top of Rich: every screen is printed, one line of
input is read through an injectable callable and translated into
``WizardEvent``s for :func:`goback.wizard.machine.transition`.  After the
review is confirmed the generator runs behind a live progress bar.

Key map (choice steps)::

    <enter>   select the highlighted option
    j / k     move the cursor down / up
    1..9      jump to an option and select it
    b         back to the previous step
    q         cancel the wizard

DevOps tools use ``<space>`` or ``t`` to toggle and ``c`` to continue.  On the
project-details form any text sets the focused field, an empty line keeps it,
and ``:n`` / ``:p`` / ``:b`` / ``:q`` switch field, go back or cancel.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from goback.config import VERSION, Settings
from goback.project.choices import DATABASE_TRAITS, TOOL_TRAITS, Axis, display_name
from goback.project.models import ProjectConfiguration, new_project_configuration
from goback.scaffolder.generator import STAGE_NAMES, ProjectGenerator, StageError
from goback.scaffolder.reporting import ProgressReporter
from goback.utils import console as default_console

from .machine import transition
from .state import (
    CHOICE_AXES,
    DETAIL_FIELDS,
    DETAIL_LABELS,
    EventKind,
    WizardEvent,
    WizardState,
    WizardStep,
    initial_state,
    step_options,
    to_configuration,
)

logger = logging.getLogger(__name__)

InputFunc = Callable[[str], str]

BANNER = r"""
   ____       ____             _
  / ___| ___ | __ )  __ _  ___| | __
 | |  _ / _ \|  _ \ / _` |/ __| |/ /
 | |_| | (_) | |_) | (_| | (__|   <
  \____|\___/|____/ \__,_|\___|_|\_\
"""

MENU_OPTIONS: list[tuple[str, str]] = [
    ("new", "Start new project"),
    ("version", "Version"),
    ("quit", "Quit"),
]

STEP_TITLES: dict[WizardStep, str] = {
    WizardStep.FRAMEWORK: "Choose a web framework",
    WizardStep.DATABASE: "Choose a database",
    WizardStep.TOOL: "Choose a data-access tool",
    WizardStep.ARCHITECTURE: "Choose an architecture",
    WizardStep.DEVOPS_OPTIONS: "Generate DevOps configuration?",
    WizardStep.DEVOPS_TOOLS: "Select DevOps tools",
    WizardStep.PROJECT_DETAILS: "Project details",
    WizardStep.REVIEW: "Review configuration",
}

STEP_HELP: dict[WizardStep, str] = {
    WizardStep.DEVOPS_TOOLS: "space/t: toggle | c: continue | b: back | q: quit",
    WizardStep.PROJECT_DETAILS: "text: set field | enter: next | :n/:p field | :b back | :q quit",
    WizardStep.REVIEW: "y/enter: generate | e: edit details | b: back | q: quit",
}
DEFAULT_HELP = "enter: select | j/k: move | 1-9: jump | b: back | q: quit"


# ---------------------------------------------------------------------------
# Key mapping
# ---------------------------------------------------------------------------


def _jump(state: WizardState, line: str, final: EventKind) -> list[WizardEvent]:
    target = int(line) - 1
    if not 0 <= target < len(step_options(state.step)):
        return []
    delta = target - state.cursor
    kind = EventKind.NEXT if delta > 0 else EventKind.PREVIOUS
    return [WizardEvent(kind=kind) for _ in range(abs(delta))] + [WizardEvent(kind=final)]


def key_to_events(state: WizardState, line: str) -> list[WizardEvent]:
    """Translate one line of user input into wizard events for *state*'s step.

    Unknown input yields an empty list.
    """
    step = state.step

    if step == WizardStep.PROJECT_DETAILS:
        commands = {
            ":n": EventKind.NEXT_FIELD,
            ":p": EventKind.PREVIOUS_FIELD,
            ":b": EventKind.BACK,
            ":q": EventKind.CANCEL,
        }
        command = line.strip()
        if command in commands:
            return [WizardEvent(kind=commands[command])]
        if not command:
            return [WizardEvent(kind=EventKind.SUBMIT)]
        return [WizardEvent(kind=EventKind.INPUT, text=line.strip()), WizardEvent(kind=EventKind.SUBMIT)]

    if step == WizardStep.REVIEW:
        key = line.strip().lower()
        if key in ("", "y"):
            return [WizardEvent(kind=EventKind.CONFIRM)]
        if key in ("e", "n"):
            return [WizardEvent(kind=EventKind.EDIT)]
        if key == "b":
            return [WizardEvent(kind=EventKind.BACK)]
        if key == "q":
            return [WizardEvent(kind=EventKind.CANCEL)]
        return []

    # Space is significant on the checkbox step.
    key = line.lower() if line.strip() == "" else line.strip().lower()
    common = {
        "j": EventKind.NEXT,
        "k": EventKind.PREVIOUS,
        "b": EventKind.BACK,
        "q": EventKind.CANCEL,
    }
    if key in common:
        return [WizardEvent(kind=common[key])]

    if step == WizardStep.DEVOPS_TOOLS:
        if key in (" ", "t"):
            return [WizardEvent(kind=EventKind.TOGGLE)]
        if key == "c":
            return [WizardEvent(kind=EventKind.CONTINUE)]
        if key == "":
            return [WizardEvent(kind=EventKind.SELECT)]
        if key.isdigit():
            return _jump(state, key, EventKind.TOGGLE)
        return []

    if key == "":
        return [WizardEvent(kind=EventKind.SELECT)]
    if key.isdigit():
        return _jump(state, key, EventKind.SELECT)
    return []


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


class WizardApp:
    """Main menu, wizard loop and generation screen.

    Args:
        settings: Loaded user preferences.
        input_func: Reads one line given a prompt (``input`` by default).
        console: Rich console to draw on.
        config_path: Where preferences are saved when ``auto_save`` is on.
        cwd: Directory the default project name is derived from.
    """

    def __init__(
        self,
        settings: Settings,
        input_func: Optional[InputFunc] = None,
        console: Optional[Console] = None,
        config_path: Optional[Path] = None,
        cwd: Optional[Path] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.input_func = input_func or input
        self.console = console or default_console
        self.config_path = config_path
        self.cwd = cwd
        self._sleep = sleep
        self.last_output: Optional[Path] = None

    # -- Top-level loop ----------------------------------------------------

    def run(self) -> int:
        """Run until the user quits; returns the process exit code."""
        if self.settings.show_splash_screen:
            self.show_splash()

        while True:
            choice = self.main_menu()
            if choice == "quit":
                self.console.print("Bye!")
                return 0
            if choice == "version":
                self.console.print(f"goback version [bold]{VERSION}[/bold]")
                continue

            config = self.run_wizard()
            if config is None:
                self.console.print("[yellow]Wizard cancelled.[/yellow]")
                continue

            if self.generate(config):
                return 0
            if not self._ask_retry():
                return 1

    def show_splash(self) -> None:
        self.console.print(f"[bold cyan]{BANNER}[/bold cyan]")
        self.console.print("Go backend project generator", style="dim")
        if self.settings.animation_speed > 0:
            self._sleep(self.settings.animation_speed / 1000)

    def main_menu(self) -> str:
        """Show the main menu and return the chosen option key."""
        while True:
            self.console.print()
            for index, (_, label) in enumerate(MENU_OPTIONS, start=1):
                self.console.print(f"  [cyan]{index}[/cyan]. {label}")
            answer = self.input_func("Select an option [1]: ").strip().lower()
            if answer == "":
                return MENU_OPTIONS[0][0]
            if answer == "q":
                return "quit"
            if answer.isdigit() and 1 <= int(answer) <= len(MENU_OPTIONS):
                return MENU_OPTIONS[int(answer) - 1][0]
            self.console.print(f"[red]Unknown option: {answer}[/red]")

    # -- Wizard ------------------------------------------------------------

    def new_state(self) -> WizardState:
        config = new_project_configuration(self.settings, cwd=self.cwd)
        return initial_state(
            config,
            module_prefix=self.settings.default_module_prefix,
            output_root=self.settings.default_output_dir,
        )

    def run_wizard(self, state: Optional[WizardState] = None) -> Optional[ProjectConfiguration]:
        """Drive the wizard to a terminal step.

        Returns:
            The confirmed configuration, or ``None`` when cancelled.
        """
        state = state or self.new_state()
        while not state.is_terminal:
            self.render(state)
            line = self.input_func("> ")
            events = key_to_events(state, line)
            if not events:
                self.console.print(f"[red]Unrecognised input: {line.strip()!r}[/red]")
                continue
            for event in events:
                state = transition(state, event)

        if state.cancelled:
            return None
        return to_configuration(state)

    # -- Rendering ---------------------------------------------------------

    def render(self, state: WizardState) -> None:
        self.console.rule(f"[bold]{STEP_TITLES[state.step]}[/bold]")
        if state.step in CHOICE_AXES or state.step == WizardStep.DEVOPS_OPTIONS:
            self._render_choices(state)
        elif state.step == WizardStep.DEVOPS_TOOLS:
            self._render_checkboxes(state)
        elif state.step == WizardStep.PROJECT_DETAILS:
            self._render_form(state)
        elif state.step == WizardStep.REVIEW:
            self._render_review(state)
        self.console.print(STEP_HELP.get(state.step, DEFAULT_HELP), style="dim")

    def _render_choices(self, state: WizardState) -> None:
        for index, (_, label) in enumerate(step_options(state.step)):
            if index == state.cursor:
                self.console.print(f"[bold cyan]> {index + 1}. {label}[/bold cyan]")
            else:
                self.console.print(f"  {index + 1}. {label}")

    def _render_checkboxes(self, state: WizardState) -> None:
        for index, (token, label) in enumerate(step_options(state.step)):
            mark = "[green]x[/green]" if token in state.devops_tools else " "
            pointer = ">" if index == state.cursor else " "
            self.console.print(f"{pointer} [{mark}] {index + 1}. {label}")

    def _render_form(self, state: WizardState) -> None:
        for index, field in enumerate(DETAIL_FIELDS):
            value = getattr(state, field)
            if index == state.focus_index:
                self.console.print(f"[bold cyan]> {DETAIL_LABELS[field]}:[/bold cyan] {value}")
            else:
                self.console.print(f"  {DETAIL_LABELS[field]}: {value}")
        for error in state.errors:
            self.console.print(f"  [red]! {error}[/red]")

    def _render_review(self, state: WizardState) -> None:
        config = to_configuration(state)
        self.console.print(summary_table(config))

    # -- Generation --------------------------------------------------------

    def generate(self, config: ProjectConfiguration) -> bool:
        """Run the generator behind a progress bar; ``True`` on success."""
        with ProgressReporter(len(STAGE_NAMES)) as reporter:
            generator = ProjectGenerator(
                config,
                on_progress=reporter.on_progress,
                on_error=reporter.on_error,
            )
            try:
                output = asyncio.run(generator.generate())
            except StageError as exc:
                logger.debug("generation failed", exc_info=True)
                error = exc
            else:
                error = None

        if error is not None:
            self.console.print(Panel(str(error), title="Generation failed", border_style="red"))
            return False

        self.last_output = output
        if self.settings.auto_save:
            self.settings.add_recent_project(str(output))
            self.settings.save(self.config_path)
        self.show_next_steps(config)
        return True

    def show_next_steps(self, config: ProjectConfiguration) -> None:
        steps = [f"cd {config.output_dir}", "go mod tidy"]
        database = config.database_choice
        if database and DATABASE_TRAITS[database].requires_server:
            steps.append(f"# start {config.display(Axis.DATABASE)} and edit the DB_* values in .env")
        tool = config.tool_choice
        if tool and TOOL_TRAITS[tool].has_code_generation:
            steps.append("sqlc generate")
        steps.append("go run ./cmd/api")
        body = "\n".join(f"  {line}" for line in steps)
        self.console.print(Panel(body, title="Project created! Next steps", border_style="green"))

    def _ask_retry(self) -> bool:
        while True:
            answer = self.input_func("r: retry | q: quit > ").strip().lower()
            if answer == "r":
                return True
            if answer == "q":
                return False


def summary_table(config: ProjectConfiguration) -> Table:
    """Build the review table for *config*."""
    table = Table(show_header=False, box=None)
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")
    table.add_row("Project name", config.project_name)
    table.add_row("Module path", config.module_path)
    table.add_row("Description", config.description or "-")
    table.add_row("Output directory", config.output_dir)
    table.add_row("Framework", config.display(Axis.FRAMEWORK))
    table.add_row("Database", config.display(Axis.DATABASE))
    table.add_row("Tool", config.display(Axis.TOOL))
    table.add_row("Architecture", config.display(Axis.ARCHITECTURE))
    if config.devops.enabled:
        tools = ", ".join(display_name(Axis.DEVOPS_TOOL, t) for t in config.devops.tools) or "-"
        table.add_row("DevOps", tools)
    else:
        table.add_row("DevOps", "disabled")
    return table
