"""Listeners for generator progress.

The generator reports through two plain callables,
``on_progress(step_index, message)`` and ``on_error(step_index, cause)``,
and knows nothing about who listens.  The reporters here adapt those
callbacks to the console: ``ConsoleReporter`` prints one line per step for
the batch ``new`` command, ``ProgressReporter`` drives a Rich progress bar
for the interactive wizard.
"""

from __future__ import annotations

from rich.console import Console
from rich.progress import Progress, TaskID

from goback.utils import console as default_console
from goback.utils import create_progress


class ConsoleReporter:
    """Prints each generation step as a plain console line."""

    def __init__(self, total_steps: int, console: Console | None = None) -> None:
        self.total_steps = total_steps
        self.console = console or default_console
        self.messages: list[str] = []
        self.failed_step: int | None = None

    def on_progress(self, step_index: int, message: str) -> None:
        self.messages.append(message)
        if step_index >= self.total_steps:
            self.console.print(f"[bold green]{message}[/bold green]")
        else:
            self.console.print(f"[cyan]>[/cyan] {message}")

    def on_error(self, step_index: int, cause: BaseException) -> None:
        self.failed_step = step_index
        self.console.print(f"[bold red]x Step {step_index + 1} failed:[/bold red] {cause}")


class ProgressReporter:
    """Drives a Rich progress bar plus a per-step log.

    Use as a context manager around ``await generator.generate()``::

        with ProgressReporter(len(STAGE_NAMES)) as reporter:
            generator = ProjectGenerator(config, on_progress=reporter.on_progress,
                                         on_error=reporter.on_error)
            await generator.generate()
    """

    def __init__(self, total_steps: int, progress: Progress | None = None) -> None:
        self.total_steps = total_steps
        self.progress = progress or create_progress()
        self.log: list[str] = []
        self.failed_step: int | None = None
        self._task: TaskID | None = None

    def __enter__(self) -> "ProgressReporter":
        self.progress.start()
        self._task = self.progress.add_task("Preparing...", total=self.total_steps)
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.progress.stop()

    def on_progress(self, step_index: int, message: str) -> None:
        self.log.append(message)
        if self._task is not None:
            self.progress.update(self._task, completed=step_index, description=message)

    def on_error(self, step_index: int, cause: BaseException) -> None:
        self.failed_step = step_index
        self.log.append(f"Step {step_index + 1} failed: {cause}")
        if self._task is not None:
            self.progress.update(self._task, description=f"[red]Step {step_index + 1} failed[/red]")
