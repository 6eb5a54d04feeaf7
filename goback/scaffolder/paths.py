"""Per-architecture destination table for generated Go files.

Framework, database and tool templates are shared by every architecture;
only where their output lands differs.  This module owns that mapping and
the Go package information (directory, import path, package name) that the
templates need to reference one another across packages.
"""

from __future__ import annotations

import posixpath
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from goback.project.choices import Architecture


class PathKind(str, Enum):
    """A remappable generated file."""
    CONFIG = "config"
    DATABASE = "database"
    ROUTES = "routes"
    HANDLERS = "handlers"
    MIDDLEWARE = "middleware"
    MODELS = "models"
    VALIDATOR = "validator"
    MIGRATE = "migrate"


MAIN_PATH = "cmd/api/main.go"

ARCHITECTURE_PATHS: dict[Architecture, dict[PathKind, str]] = {
    Architecture.SIMPLE: {
        PathKind.CONFIG: "internal/config/framework.go",
        PathKind.DATABASE: "internal/database/connection.go",
        PathKind.ROUTES: "internal/routes/routes.go",
        PathKind.HANDLERS: "internal/handlers/handlers.go",
        PathKind.MIDDLEWARE: "internal/middleware/middleware.go",
        PathKind.MODELS: "internal/models/base_model.go",
        PathKind.VALIDATOR: "internal/utils/validator.go",
        PathKind.MIGRATE: "internal/migrate/migrate.go",
    },
    Architecture.DDD: {
        PathKind.CONFIG: "config/framework.go",
        PathKind.DATABASE: "infrastructure/database/connection.go",
        PathKind.ROUTES: "interfaces/routes/routes.go",
        PathKind.HANDLERS: "interfaces/handlers/handlers.go",
        PathKind.MIDDLEWARE: "interfaces/middleware/middleware.go",
        PathKind.MODELS: "domain/models/base_model.go",
        PathKind.VALIDATOR: "internal/utils/validator.go",
        PathKind.MIGRATE: "pkg/migrate/migrate.go",
    },
    Architecture.CLEAN: {
        PathKind.CONFIG: "config/framework.go",
        PathKind.DATABASE: "infrastructure/database/connection.go",
        PathKind.ROUTES: "interfaces/routes/routes.go",
        PathKind.HANDLERS: "interfaces/handlers/handlers.go",
        PathKind.MIDDLEWARE: "interfaces/middleware/middleware.go",
        PathKind.MODELS: "domain/entities/base_model.go",
        PathKind.VALIDATOR: "internal/utils/validator.go",
        PathKind.MIGRATE: "pkg/migrate/migrate.go",
    },
    Architecture.HEXAGONAL: {
        PathKind.CONFIG: "config/framework.go",
        PathKind.DATABASE: "adapters/secondary/database/connection.go",
        PathKind.ROUTES: "adapters/primary/http/routes.go",
        PathKind.HANDLERS: "adapters/primary/http/handlers.go",
        PathKind.MIDDLEWARE: "adapters/primary/http/middleware.go",
        PathKind.MODELS: "domain/model/base_model.go",
        PathKind.VALIDATOR: "internal/utils/validator.go",
        PathKind.MIGRATE: "pkg/migrate/migrate.go",
    },
}

# Template basenames (``.tmpl`` stripped) that are remapped per architecture.
FRAMEWORK_FILE_KINDS: dict[str, PathKind] = {
    "routes.go": PathKind.ROUTES,
    "config.go": PathKind.CONFIG,
    "handlers.go": PathKind.HANDLERS,
    "middleware.go": PathKind.MIDDLEWARE,
}

# Package names that shadow a standard-library import used by the generated
# code; such packages get an import alias.
_SHADOWED_PACKAGES = {"http"}


class GoPackage(BaseModel):
    """The Go package a remapped file belongs to."""
    dir: str
    name: str
    import_path: str
    alias: str = ""

    @property
    def qualifier(self) -> str:
        """Identifier used to reference the package from another package."""
        return self.alias or self.name


def resolve_architecture(token: Optional[str]) -> Architecture:
    """Return the architecture for *token*; unset or unknown means simple."""
    try:
        return Architecture(token)
    except ValueError:
        return Architecture.SIMPLE


def architecture_paths(token: Optional[str]) -> dict[PathKind, str]:
    """Return the full kind -> destination table for an architecture token."""
    return dict(ARCHITECTURE_PATHS[resolve_architecture(token)])


def destination_for(token: Optional[str], kind: PathKind) -> str:
    """Return the destination of *kind* under the architecture *token*."""
    return ARCHITECTURE_PATHS[resolve_architecture(token)][PathKind(kind)]


def go_package(module_path: str, destination: str) -> GoPackage:
    """Describe the package that owns the file at *destination*."""
    directory = posixpath.dirname(destination)
    name = posixpath.basename(directory)
    alias = f"{name}adapter" if name in _SHADOWED_PACKAGES else ""
    return GoPackage(
        dir=directory,
        name=name,
        import_path=f"{module_path.rstrip('/')}/{directory}" if directory else module_path,
        alias=alias,
    )


def go_packages(module_path: str, token: Optional[str]) -> dict[str, GoPackage]:
    """Return ``{kind: GoPackage}`` for every remappable kind, plus ``main``."""
    packages = {
        kind.value: go_package(module_path, dest)
        for kind, dest in architecture_paths(token).items()
    }
    packages["main"] = go_package(module_path, MAIN_PATH).model_copy(update={"name": "main"})
    return packages
