"""Tests for generator progress listeners (goback.scaffolder.reporting)."""

from __future__ import annotations

import io

import pytest
from rich.console import Console
from rich.progress import Progress

from goback.scaffolder.reporting import ConsoleReporter, ProgressReporter

pytestmark = pytest.mark.unit


def make_console() -> Console:
    return Console(file=io.StringIO(), width=100, record=True)


class TestConsoleReporter:
    def test_records_and_prints_messages(self):
        console = make_console()
        reporter = ConsoleReporter(7, console=console)
        reporter.on_progress(0, "Step 1/7: Validating configuration")
        reporter.on_progress(7, "Project generation completed successfully!")
        assert reporter.messages == [
            "Step 1/7: Validating configuration",
            "Project generation completed successfully!",
        ]
        text = console.export_text()
        assert "Validating configuration" in text
        assert "completed successfully" in text

    def test_error(self):
        console = make_console()
        reporter = ConsoleReporter(7, console=console)
        reporter.on_error(2, RuntimeError("disk full"))
        assert reporter.failed_step == 2
        assert "Step 3 failed" in console.export_text()


class TestProgressReporter:
    def test_tracks_progress(self):
        progress = Progress(console=make_console())
        with ProgressReporter(3, progress=progress) as reporter:
            reporter.on_progress(1, "Step 2/3: b")
            task = progress.tasks[0]
            assert task.completed == 1
            assert task.total == 3
            assert task.description == "Step 2/3: b"
        assert reporter.log == ["Step 2/3: b"]

    def test_error(self):
        progress = Progress(console=make_console())
        with ProgressReporter(3, progress=progress) as reporter:
            reporter.on_error(0, ValueError("bad"))
        assert reporter.failed_step == 0
        assert reporter.log == ["Step 1 failed: bad"]
        assert "failed" in progress.tasks[0].description
