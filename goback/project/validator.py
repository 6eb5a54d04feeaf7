"""Structural and semantic checks on a ``ProjectConfiguration``.

The validator never stops at the first problem: both the wizard and the
``new`` command show every violation at once, so all checks run and their
messages are accumulated into a single list.  An empty list means valid.
"""

from __future__ import annotations

import re

from .choices import Axis, is_compatible, is_valid
from .models import ProjectConfiguration


_MODULE_PATH_RE = re.compile(r"^([\w-]+\.)+[\w-]+(/[\w-]+)+$")

# (axis, attribute, required message, invalid message)
_CHOICE_CHECKS: list[tuple[Axis, str, str, str]] = [
    (Axis.FRAMEWORK, "framework", "A framework selection is required.", "Invalid framework choice."),
    (Axis.DATABASE, "database", "A database selection is required.", "Invalid database choice."),
    (Axis.TOOL, "tool", "A tool selection is required.", "Invalid tool choice."),
    (
        Axis.ARCHITECTURE,
        "architecture",
        "An architecture selection is required.",
        "Invalid architecture choice.",
    ),
]


def is_valid_module_path(module_path: str) -> bool:
    """Return ``True`` if *module_path* looks like ``host.tld/owner/repo``."""
    return bool(_MODULE_PATH_RE.fullmatch(module_path))


def validate_project_config(config: ProjectConfiguration) -> list[str]:
    """Return every violation found in *config*.

    Checks, in order: required free-text fields, module path format, choice
    presence and registry membership, and the DevOps cross-field rules.
    """
    errors: list[str] = []

    if not config.project_name.strip():
        errors.append("Project name is required and cannot be empty.")

    if not config.module_path.strip():
        errors.append("Go module path is required.")
    elif not is_valid_module_path(config.module_path):
        errors.append("Invalid Go module path format. (e.g., github.com/user/project)")

    if not config.output_dir.strip():
        errors.append("Output directory is required.")

    choice_errors = len(errors)
    for axis, attr, required_msg, invalid_msg in _CHOICE_CHECKS:
        token = getattr(config, attr)
        if not token:
            errors.append(required_msg)
        elif not is_valid(axis, token):
            errors.append(invalid_msg)
    if len(errors) == choice_errors and not is_compatible(config.framework, config.database, config.tool):
        errors.append(
            f"{config.display(Axis.FRAMEWORK)} with {config.display(Axis.DATABASE)} and "
            f"{config.display(Axis.TOOL)} is not a supported combination."
        )

    devops = config.devops
    if devops.enabled and not devops.tools:
        errors.append("At least one DevOps tool must be selected when DevOps is enabled.")
    for tool in devops.tools:
        if not is_valid(Axis.DEVOPS_TOOL, tool):
            errors.append(f"Invalid DevOps tool: {tool}.")

    return errors
