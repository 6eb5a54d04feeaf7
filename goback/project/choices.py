"""Choice registry for every selectable project axis.

Each axis is a closed ``str`` enumeration whose value is the canonical token.
Tokens double as template-directory segments (``frameworks/fiber/``) and as
the serialised value stored in a ``ProjectConfiguration``, so they must never
change.  Display names, descriptions and capability flags live in one lookup
table per axis instead of being spread across call sites.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Axis(str, Enum):
    """A configurable dimension of the generated project."""
    FRAMEWORK = "framework"
    DATABASE = "database"
    TOOL = "tool"
    ARCHITECTURE = "architecture"
    DEVOPS_TOOL = "devops_tool"


class Framework(str, Enum):
    """HTTP framework used by the generated service."""
    FIBER = "fiber"
    GIN = "gin"
    CHI = "chi"
    ECHO = "echo"


class Database(str, Enum):
    """Relational database the generated service connects to."""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


class Tool(str, Enum):
    """Data-access tool layered over ``database/sql``."""
    SQLX = "sqlx"
    SQLC = "sqlc"


class Architecture(str, Enum):
    """Directory/layering convention applied to generated code."""
    SIMPLE = "simple"
    DDD = "ddd"
    CLEAN = "clean"
    HEXAGONAL = "hexagonal"


class DevOpsTool(str, Enum):
    """Deployment tooling that can be generated alongside the service."""
    KUBERNETES = "kubernetes"
    HELM = "helm"
    TERRAFORM = "terraform"
    ANSIBLE = "ansible"


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

class ChoiceInfo(BaseModel):
    """Display metadata for one registry member."""
    axis: Axis
    token: str = Field(..., description="Canonical lowercase identifier")
    display: str = Field(..., description="Human-readable name")
    description: str = Field(default="")


class DatabaseTraits(BaseModel):
    """Capabilities of a database choice consumed by templates."""
    requires_server: bool = True
    supports_relations: bool = True
    default_port: Optional[int] = None
    driver_name: str = Field(..., description="database/sql driver name")
    driver_import: str = Field(..., description="Go import path of the driver")


class ToolTraits(BaseModel):
    """Capabilities of a data-access tool."""
    has_code_generation: bool = False
    has_migrations: bool = False


class DevOpsTraits(BaseModel):
    """Rendering hints for a DevOps tool's template subtree."""
    delimiters: Optional[tuple[str, str]] = Field(
        default=None,
        description="Alternate variable delimiters when the tool's own files use {{ }}",
    )
    uses_chart_engine: bool = False


_FRAMEWORKS: dict[Framework, tuple[str, str]] = {
    Framework.FIBER: ("Go Fiber", "Fast HTTP web framework inspired by Express"),
    Framework.GIN: ("Go Gin", "High-performance HTTP web framework"),
    Framework.CHI: ("Go Chi", "Lightweight, idiomatic HTTP router"),
    Framework.ECHO: ("Go Echo", "High performance, extensible web framework"),
}

_DATABASES: dict[Database, tuple[str, str]] = {
    Database.POSTGRESQL: ("PostgreSQL", "Advanced open-source relational database"),
    Database.MYSQL: ("MySQL", "Popular open-source relational database"),
    Database.SQLITE: ("SQLite", "Lightweight embedded database"),
}

_TOOLS: dict[Tool, tuple[str, str]] = {
    Tool.SQLX: ("SQLX", "Extensions on database/sql for easier usage"),
    Tool.SQLC: ("SQLC", "Generate type-safe code from SQL"),
}

_ARCHITECTURES: dict[Architecture, tuple[str, str]] = {
    Architecture.SIMPLE: (
        "Simple Architecture",
        "Simple layered architecture with handlers, services, and models",
    ),
    Architecture.DDD: (
        "Domain-Driven Design (DDD)",
        "Domain-Driven Design with domain, infrastructure, application layers",
    ),
    Architecture.CLEAN: (
        "Clean Architecture",
        "Clean Architecture with entities, use cases, and adapters",
    ),
    Architecture.HEXAGONAL: (
        "Hexagonal Architecture",
        "Hexagonal Architecture with ports and adapters pattern",
    ),
}

_DEVOPS_TOOLS: dict[DevOpsTool, tuple[str, str]] = {
    DevOpsTool.KUBERNETES: ("Kubernetes", "Container orchestration platform"),
    DevOpsTool.HELM: ("Helm", "Kubernetes package manager"),
    DevOpsTool.TERRAFORM: ("Terraform", "Infrastructure as code tool"),
    DevOpsTool.ANSIBLE: ("Ansible", "IT automation and configuration management"),
}

DATABASE_TRAITS: dict[Database, DatabaseTraits] = {
    Database.POSTGRESQL: DatabaseTraits(
        default_port=5432,
        driver_name="postgres",
        driver_import="github.com/lib/pq",
    ),
    Database.MYSQL: DatabaseTraits(
        default_port=3306,
        driver_name="mysql",
        driver_import="github.com/go-sql-driver/mysql",
    ),
    Database.SQLITE: DatabaseTraits(
        requires_server=False,
        driver_name="sqlite3",
        driver_import="github.com/mattn/go-sqlite3",
    ),
}

TOOL_TRAITS: dict[Tool, ToolTraits] = {
    Tool.SQLX: ToolTraits(),
    Tool.SQLC: ToolTraits(has_code_generation=True),
}

DEVOPS_TRAITS: dict[DevOpsTool, DevOpsTraits] = {
    DevOpsTool.KUBERNETES: DevOpsTraits(),
    DevOpsTool.HELM: DevOpsTraits(uses_chart_engine=True),
    DevOpsTool.TERRAFORM: DevOpsTraits(),
    DevOpsTool.ANSIBLE: DevOpsTraits(delimiters=("<<", ">>")),
}

_AXES: dict[Axis, tuple[type[Enum], dict]] = {
    Axis.FRAMEWORK: (Framework, _FRAMEWORKS),
    Axis.DATABASE: (Database, _DATABASES),
    Axis.TOOL: (Tool, _TOOLS),
    Axis.ARCHITECTURE: (Architecture, _ARCHITECTURES),
    Axis.DEVOPS_TOOL: (DevOpsTool, _DEVOPS_TOOLS),
}


# ---------------------------------------------------------------------------
# Lookup API
# ---------------------------------------------------------------------------

def enum_for(axis: Axis) -> type[Enum]:
    """Return the enumeration class backing *axis*."""
    return _AXES[Axis(axis)][0]


def parse_choice(axis: Axis, token: str) -> Optional[Enum]:
    """Resolve *token* to its enum member, or ``None`` if it is not registered."""
    enum_cls, _ = _AXES[Axis(axis)]
    try:
        return enum_cls(token)
    except ValueError:
        return None


def is_valid(axis: Axis, token: str) -> bool:
    """Return ``True`` when *token* is a member of *axis*."""
    return parse_choice(axis, token) is not None


def lookup(axis: Axis, token: str) -> Optional[ChoiceInfo]:
    """Return the ``ChoiceInfo`` for *token*, or ``None`` if unknown."""
    member = parse_choice(axis, token)
    if member is None:
        return None
    display, description = _AXES[Axis(axis)][1][member]
    return ChoiceInfo(axis=axis, token=member.value, display=display, description=description)


def list_valid(axis: Axis) -> list[ChoiceInfo]:
    """Return every choice of *axis* in canonical order."""
    enum_cls, table = _AXES[Axis(axis)]
    return [
        ChoiceInfo(axis=axis, token=member.value, display=table[member][0], description=table[member][1])
        for member in enum_cls
    ]


def display_name(axis: Axis, token: str) -> str:
    """Return the display name of *token*, falling back to the token itself."""
    info = lookup(axis, token)
    return info.display if info else token


# ---------------------------------------------------------------------------
# Recommendations
# ---------------------------------------------------------------------------

def recommended_tool(database: Database | str) -> Tool:
    """Return the recommended data-access tool for *database*.

    SQLX works with every supported database, so it is always the answer.
    """
    return Tool.SQLX


def recommended_architecture(complexity: str) -> Architecture:
    """Map a rough project complexity label to an architecture."""
    mapping = {
        "simple": Architecture.SIMPLE,
        "small": Architecture.SIMPLE,
        "medium": Architecture.CLEAN,
        "large": Architecture.DDD,
        "enterprise": Architecture.DDD,
    }
    return mapping.get(complexity.lower().strip(), Architecture.SIMPLE)


def is_compatible(framework: str, database: str, tool: str) -> bool:
    """Return ``True`` when the three choices can be generated together.

    Every registered combination is currently supported.
    """
    return (
        is_valid(Axis.FRAMEWORK, framework)
        and is_valid(Axis.DATABASE, database)
        and is_valid(Axis.TOOL, tool)
    )
