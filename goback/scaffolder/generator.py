"""Main scaffolding orchestrator.

Takes a ``ProjectConfiguration`` and renders a complete Go backend project
into its output directory.  Generation is a fixed sequence of stages; each
stage reports progress before it runs, the first failure stops the run and
is raised as a ``StageError`` naming the stage.  Files already written are
left in place: there is no rollback, and a later stage may overwrite a file
written by an earlier one.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from goback.project.choices import (
    DATABASE_TRAITS,
    DEVOPS_TRAITS,
    TOOL_TRAITS,
    Architecture,
    Axis,
    Database,
    DevOpsTool,
)
from goback.project.models import ProjectConfiguration
from goback.project.validator import validate_project_config

from .chart import ChartEngine, JinjaChartEngine, ReleaseContext, generate_helm_chart
from .paths import (
    FRAMEWORK_FILE_KINDS,
    MAIN_PATH,
    PathKind,
    architecture_paths,
    go_packages,
    resolve_architecture,
)
from .templates import TemplateRenderer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]
ErrorCallback = Callable[[int, BaseException], None]

GO_VERSION = "1.22"
COMPLETION_MESSAGE = "Project generation completed successfully!"

STAGE_NAMES: list[str] = [
    "Validating configuration",
    "Generating base files",
    "Generating framework files",
    "Generating database config",
    "Generating Tool files",
    "Generating architecture files",
    "Generating DevOps files",
]

# (template, output) pairs rendered for every project.
BASE_FILES: list[tuple[str, str]] = [
    ("base/go.mod.tmpl", "go.mod"),
    ("base/gitignore.tmpl", ".gitignore"),
    ("base/README.md.tmpl", "README.md"),
    ("base/Makefile.tmpl", "Makefile"),
    ("base/env.tmpl", ".env"),
    ("base/env.example.tmpl", ".env.example"),
]

VALIDATOR_TEMPLATE = "base/internal/utils/validator.go.tmpl"
CONNECTION_TEMPLATE = "connection.go.tmpl"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigValidationError(Exception):
    """The configuration failed validation; ``errors`` holds every message."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("invalid configuration: " + "; ".join(self.errors))


class StageError(Exception):
    """A generation stage failed.

    Attributes:
        ordinal: 1-based position of the failed stage.
        name: Stage display name.
        cause: The underlying exception.
    """

    def __init__(self, ordinal: int, name: str, cause: BaseException) -> None:
        self.ordinal = ordinal
        self.name = name
        self.cause = cause
        super().__init__(f"step {ordinal} ({name}) failed: {cause}")


# ---------------------------------------------------------------------------
# Template context
# ---------------------------------------------------------------------------


def build_template_context(config: ProjectConfiguration) -> dict[str, Any]:
    """Build the Jinja2 context shared by every project template.

    Besides the configuration itself the context carries display names,
    database driver traits, the architecture's destination table and Go
    package helpers:

    * ``ref(kind, current)``: ``"pkg."`` when *kind* lives in another package
      than *current*, ``""`` otherwise.
    * ``go_imports(current, *kinds)``: import-block lines for the packages of
      *kinds*, skipping *current*'s own package and duplicates.
    * ``db_placeholder(n)``: ``$n`` for PostgreSQL, ``?`` elsewhere.
    """
    database = config.database_choice
    db_traits = DATABASE_TRAITS.get(database) if database else None
    tool = config.tool_choice
    tool_traits = TOOL_TRAITS.get(tool) if tool else None
    architecture = resolve_architecture(config.architecture)

    paths = {kind.value: dest for kind, dest in architecture_paths(config.architecture).items()}
    packages = go_packages(config.module_path, config.architecture)

    def ref(kind: str, current: str = "") -> str:
        target = packages[kind]
        if current and packages[current].dir == target.dir:
            return ""
        return f"{target.qualifier}."

    def go_imports(current: str, *kinds: str) -> str:
        own_dir = packages[current].dir if current else None
        seen: set[str] = set()
        lines: list[str] = []
        for kind in kinds:
            pkg = packages[kind]
            if pkg.dir == own_dir or pkg.dir in seen:
                continue
            seen.add(pkg.dir)
            prefix = f"{pkg.alias} " if pkg.alias else ""
            lines.append(f'\t{prefix}"{pkg.import_path}"')
        return "\n".join(lines)

    def db_placeholder(n: int) -> str:
        return f"${n}" if database == Database.POSTGRESQL else "?"

    return {
        "config": config,
        "project_name": config.project_name,
        "module_path": config.module_path,
        "description": config.description or f"{config.project_name} backend API",
        "output_dir": config.output_dir,
        "framework": config.framework,
        "database": config.database,
        "tool": config.tool,
        "architecture": architecture.value,
        "framework_name": config.display(Axis.FRAMEWORK),
        "database_name": config.display(Axis.DATABASE),
        "tool_name": config.display(Axis.TOOL),
        "architecture_name": config.display(Axis.ARCHITECTURE),
        "devops": config.devops,
        "db": db_traits,
        "driver_name": db_traits.driver_name if db_traits else "",
        "driver_import": db_traits.driver_import if db_traits else "",
        "default_port": db_traits.default_port if db_traits else None,
        "tool_traits": tool_traits,
        "go_version": GO_VERSION,
        "paths": paths,
        "packages": packages,
        "ref": ref,
        "go_imports": go_imports,
        "db_placeholder": db_placeholder,
    }


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Renders a ``ProjectConfiguration`` to disk, one stage at a time.

    Given a configuration, generates into ``config.output_dir``:
    - base project files (go.mod, Makefile, env files, README)
    - framework entry point, routes, handlers, middleware and config
    - the database connection for the chosen database / tool
    - data-access tool files (models, migrations, sqlc config)
    - architecture-specific domain, service and repository layers
    - optional Kubernetes, Helm, Terraform and Ansible files
    """

    def __init__(
        self,
        config: ProjectConfiguration,
        renderer: TemplateRenderer | None = None,
        chart_engine: ChartEngine | None = None,
        on_progress: Optional[ProgressCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or TemplateRenderer()
        self.chart_engine: ChartEngine = chart_engine or JinjaChartEngine()
        self.on_progress = on_progress
        self.on_error = on_error
        self._context: dict[str, Any] | None = None
        self.stages: list[tuple[str, Callable[[], Awaitable[None]]]] = list(
            zip(
                STAGE_NAMES,
                [
                    self._validate,
                    self._generate_base,
                    self._generate_framework,
                    self._generate_database,
                    self._generate_tool,
                    self._generate_architecture,
                    self._generate_devops,
                ],
            )
        )

    @property
    def output_root(self) -> Path:
        return Path(self.config.output_dir)

    @property
    def context(self) -> dict[str, Any]:
        if self._context is None:
            self._context = build_template_context(self.config)
        return self._context

    # -- Public API --------------------------------------------------------

    async def generate(self) -> Path:
        """Run every stage in order.

        Returns:
            Path to the generated project root.

        Raises:
            StageError: The first stage that failed, wrapping its cause.
        """
        total = len(self.stages)
        for index, (name, stage) in enumerate(self.stages):
            self._report_progress(index, f"Step {index + 1}/{total}: {name}")
            try:
                await stage()
            except Exception as exc:
                logger.debug("Stage %d (%s) failed", index + 1, name, exc_info=True)
                if self.on_error is not None:
                    self.on_error(index, exc)
                raise StageError(index + 1, name, exc) from exc

        self._report_progress(total, COMPLETION_MESSAGE)
        return self.output_root

    def _report_progress(self, index: int, message: str) -> None:
        logger.info(message)
        if self.on_progress is not None:
            self.on_progress(index, message)

    # -- Stages ------------------------------------------------------------

    async def _validate(self) -> None:
        errors = validate_project_config(self.config)
        if errors:
            raise ConfigValidationError(errors)

    async def _generate_base(self) -> None:
        root = self.output_root
        await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)
        for template_name, output_name in BASE_FILES:
            await self.renderer.render_to_file(template_name, root / output_name, self.context)

        if resolve_architecture(self.config.architecture) == Architecture.SIMPLE:
            await self.renderer.render_to_file(
                VALIDATOR_TEMPLATE,
                root / self.context["paths"][PathKind.VALIDATOR.value],
                self.context,
            )

    async def _generate_framework(self) -> None:
        if not self.config.framework:
            return
        paths = self.context["paths"]

        def remap(rel: str) -> Optional[str]:
            basename = rel.rsplit("/", 1)[-1]
            if basename == "main.go":
                return MAIN_PATH
            kind = FRAMEWORK_FILE_KINDS.get(basename)
            return paths[kind.value] if kind else None

        await self.renderer.render_tree(
            f"frameworks/{self.config.framework}",
            self.output_root,
            self.context,
            remap=remap,
        )

    async def _generate_database(self) -> None:
        candidates = [
            f"tools/{self.config.tool}/{CONNECTION_TEMPLATE}",
            f"databases/{self.config.database}/{CONNECTION_TEMPLATE}",
        ]
        source = next((c for c in candidates if self.renderer.exists(c)), None)
        if source is None:
            logger.debug("No connection template for %s/%s", self.config.tool, self.config.database)
            return
        destination = self.output_root / self.context["paths"][PathKind.DATABASE.value]
        await self.renderer.render_to_file(source, destination, self.context)

    async def _generate_tool(self) -> None:
        if not self.config.tool:
            return
        paths = self.context["paths"]

        def remap(rel: str) -> Optional[str]:
            basename = rel.rsplit("/", 1)[-1]
            if basename == "model.go":
                return paths[PathKind.MODELS.value]
            if basename == "sqlc.yaml":
                return "sqlc.yaml"
            if basename.endswith("migrate.go"):
                return paths[PathKind.MIGRATE.value]
            return None

        await self.renderer.render_tree(
            f"tools/{self.config.tool}",
            self.output_root,
            self.context,
            skip_names=[CONNECTION_TEMPLATE],
            remap=remap,
        )

    async def _generate_architecture(self) -> None:
        if not self.config.architecture:
            return
        await self.renderer.render_tree(
            f"architectures/{self.config.architecture}",
            self.output_root,
            self.context,
        )

    async def _generate_devops(self) -> None:
        devops = self.config.devops
        if not devops.enabled:
            return

        for tool in devops.tools:
            traits = DEVOPS_TRAITS[DevOpsTool(tool)]
            prefix = f"devops/{tool}"
            target = self.output_root / "devops" / tool

            if not self.renderer.list_templates(prefix, suffix=""):
                logger.warning("No templates for DevOps tool '%s', skipping", tool)
                continue

            if traits.uses_chart_engine:
                release = ReleaseContext.for_install(self.config.project_name)
                await asyncio.to_thread(
                    generate_helm_chart,
                    self.renderer,
                    self.chart_engine,
                    self.context,
                    release,
                    target,
                )
            else:
                await self.renderer.render_tree(
                    prefix, target, self.context, delimiters=traits.delimiters
                )
