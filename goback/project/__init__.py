"""Project model: choice registry, configuration record and validator.

Usage::

    from goback.project import ProjectConfiguration, validate_project_config

    config = ProjectConfiguration(project_name="acme", framework="fiber", ...)
    config.fill_defaults()
    errors = validate_project_config(config)
"""

from goback.project.choices import (
    Architecture,
    Axis,
    ChoiceInfo,
    Database,
    DevOpsTool,
    Framework,
    Tool,
    is_valid,
    list_valid,
    lookup,
)
from goback.project.models import (
    DevOpsConfiguration,
    ProjectConfiguration,
    new_project_configuration,
)
from goback.project.validator import validate_project_config

__all__ = [
    "Architecture",
    "Axis",
    "ChoiceInfo",
    "Database",
    "DevOpsConfiguration",
    "DevOpsTool",
    "Framework",
    "ProjectConfiguration",
    "Tool",
    "is_valid",
    "list_valid",
    "lookup",
    "new_project_configuration",
    "validate_project_config",
]
