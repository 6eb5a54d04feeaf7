"""Pydantic v2 models for the project being scaffolded.

``ProjectConfiguration`` is the single record threaded through the system:
the wizard or the ``new`` command builds it, the validator checks it, and the
generator plus every template consume it.  Choice fields hold raw tokens so a
bad flag value becomes a validation message instead of a construction error;
the ``*_choice`` accessors resolve them against the registry.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .choices import (
    Architecture,
    Axis,
    Database,
    DevOpsTool,
    Framework,
    Tool,
    display_name,
    parse_choice,
)

if TYPE_CHECKING:
    from goback.config import Settings


DEFAULT_PROJECT_NAME = "my-backend-project"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# DevOps
# ---------------------------------------------------------------------------

class DevOpsConfiguration(BaseModel):
    """Which deployment tooling to generate.

    ``tools`` is an ordered set: duplicates are dropped at construction and the
    first occurrence wins.  ``enabled`` with an empty set is representable on
    purpose; the validator reports it.
    """

    enabled: bool = Field(default=False)
    tools: list[str] = Field(default_factory=list)

    @field_validator("tools")
    @classmethod
    def _dedupe_tools(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for tool in value:
            token = tool.strip().lower()
            if token and token not in seen:
                seen.append(token)
        return seen

    @computed_field  # type: ignore[misc]
    @property
    def kubernetes(self) -> bool:
        return DevOpsTool.KUBERNETES.value in self.tools

    @computed_field  # type: ignore[misc]
    @property
    def helm(self) -> bool:
        return DevOpsTool.HELM.value in self.tools

    @computed_field  # type: ignore[misc]
    @property
    def terraform(self) -> bool:
        return DevOpsTool.TERRAFORM.value in self.tools

    @computed_field  # type: ignore[misc]
    @property
    def ansible(self) -> bool:
        return DevOpsTool.ANSIBLE.value in self.tools


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------

class ProjectConfiguration(BaseModel):
    """Everything needed to render one project."""

    # Free text is rendered verbatim into go.mod, manifests and paths.
    model_config = ConfigDict(str_strip_whitespace=True)

    project_name: str = Field(default="", description="Project (and binary) name")
    module_path: str = Field(default="", description="Go module path, e.g. github.com/user/app")
    description: str = Field(default="", description="Short project description")
    output_dir: str = Field(default="", description="Directory the project is written to")
    framework: str = Field(default="", description="Framework token")
    database: str = Field(default="", description="Database token")
    tool: str = Field(default="", description="Data-access tool token")
    architecture: str = Field(default="", description="Architecture token")
    devops: DevOpsConfiguration = Field(default_factory=DevOpsConfiguration)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    # -- Typed accessors ---------------------------------------------------

    @property
    def framework_choice(self) -> Optional[Framework]:
        return parse_choice(Axis.FRAMEWORK, self.framework)

    @property
    def database_choice(self) -> Optional[Database]:
        return parse_choice(Axis.DATABASE, self.database)

    @property
    def tool_choice(self) -> Optional[Tool]:
        return parse_choice(Axis.TOOL, self.tool)

    @property
    def architecture_choice(self) -> Optional[Architecture]:
        return parse_choice(Axis.ARCHITECTURE, self.architecture)

    def display(self, axis: Axis) -> str:
        """Return the display name of the value chosen for *axis*."""
        token = {
            Axis.FRAMEWORK: self.framework,
            Axis.DATABASE: self.database,
            Axis.TOOL: self.tool,
            Axis.ARCHITECTURE: self.architecture,
        }[axis]
        return display_name(axis, token)

    # -- Derived defaults --------------------------------------------------

    def fill_defaults(self, module_prefix: str = "github.com/user") -> "ProjectConfiguration":
        """Fill ``module_path`` and ``output_dir`` from the name when empty.

        This is the only mutation applied after a configuration is created.
        Returns ``self`` for chaining.
        """
        name = self.project_name.strip()
        if name and not self.module_path.strip():
            self.module_path = f"{module_prefix.rstrip('/')}/{name}"
        if name and not self.output_dir.strip():
            self.output_dir = f"./{name}"
        self.updated_at = _utcnow()
        return self

    # -- Serialisation helpers ---------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration as JSON and return the written path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "ProjectConfiguration":
        """Load a configuration previously written by :meth:`save`."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)


def new_project_configuration(
    settings: Optional["Settings"] = None,
    cwd: str | Path | None = None,
) -> ProjectConfiguration:
    """Return the starting configuration offered by the interactive wizard.

    The project name defaults to the basename of *cwd* (the current working
    directory when omitted), the output directory to ``<default_output_dir>/<name>``
    and the choices to Fiber, PostgreSQL, SQLX and the simple architecture.
    """
    base = Path(cwd) if cwd is not None else Path(os.getcwd())
    name = base.name or DEFAULT_PROJECT_NAME

    prefix = settings.default_module_prefix if settings else "github.com/user"
    output_root = settings.default_output_dir if settings else "./"
    if output_root in ("", ".", "./"):
        output_dir = f"./{name}"
    else:
        output_dir = str(Path(output_root) / name)

    return ProjectConfiguration(
        project_name=name,
        module_path=f"{prefix.rstrip('/')}/{name}",
        output_dir=output_dir,
        framework=Framework.FIBER.value,
        database=Database.POSTGRESQL.value,
        tool=Tool.SQLX.value,
        architecture=Architecture.SIMPLE.value,
        devops=DevOpsConfiguration(enabled=False, tools=[]),
    )
