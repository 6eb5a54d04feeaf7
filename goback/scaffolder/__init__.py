"""goback scaffolder -- renders Go backend projects from templates.

This module takes a validated ``ProjectConfiguration`` and renders the
matching framework, database, tool, architecture and DevOps templates into
the configured output directory.

Quick usage::

    from goback.project import ProjectConfiguration
    from goback.scaffolder import ProjectGenerator

    config = ProjectConfiguration(
        project_name="acme",
        framework="fiber",
        database="postgresql",
        tool="sqlx",
        architecture="simple",
    ).fill_defaults()
    generator = ProjectGenerator(config, on_progress=lambda i, msg: print(msg))
    project_path = await generator.generate()
"""

from goback.scaffolder.chart import ChartEngine, ChartError, JinjaChartEngine, ReleaseContext
from goback.scaffolder.generator import (
    STAGE_NAMES,
    ConfigValidationError,
    ProjectGenerator,
    StageError,
    build_template_context,
)
from goback.scaffolder.paths import PathKind, destination_for
from goback.scaffolder.reporting import ConsoleReporter, ProgressReporter
from goback.scaffolder.templates import TemplateRenderer

__all__ = [
    "STAGE_NAMES",
    "ChartEngine",
    "ChartError",
    "ConfigValidationError",
    "ConsoleReporter",
    "JinjaChartEngine",
    "PathKind",
    "ProgressReporter",
    "ProjectGenerator",
    "ReleaseContext",
    "StageError",
    "TemplateRenderer",
    "build_template_context",
    "destination_for",
]
