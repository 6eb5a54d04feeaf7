"""goback user preferences.

Typed settings for the CLI and the interactive wizard.  Values are stored as
YAML in ``~/.goback.yaml`` (or wherever ``--config`` / ``GOBACK_CONFIG``
points) and may be overridden per-invocation with ``GOBACK_*`` environment
variables.  A ``Settings`` instance is loaded once at startup and passed down
explicitly.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

VERSION = "0.1.0"

CONFIG_FILENAME = ".goback.yaml"
CONFIG_ENV_VAR = "GOBACK_CONFIG"
ENV_PREFIX = "GOBACK_"
MAX_RECENT_PROJECTS = 10


class SettingsError(Exception):
    """Raised when the settings file cannot be read, parsed or updated."""


def default_config_path() -> Path:
    """Return the settings file location, honouring ``GOBACK_CONFIG``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_FILENAME


class Settings(BaseModel):
    """Persistent goback preferences.

    ``recent_projects`` is kept most-recent-first and capped at
    ``MAX_RECENT_PROJECTS`` entries.
    """

    default_output_dir: str = Field(default="./")
    default_module_prefix: str = Field(default="github.com/user")
    default_author: str = Field(default="")
    animation_speed: int = Field(default=100, ge=0, description="Splash animation delay in ms")
    show_splash_screen: bool = Field(default=True)
    auto_save: bool = Field(default=True)
    theme: str = Field(default="default")
    recent_projects: list[str] = Field(default_factory=list)

    @field_validator("recent_projects")
    @classmethod
    def _cap_recent(cls, value: list[str]) -> list[str]:
        return value[:MAX_RECENT_PROJECTS]

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the settings as YAML.

        Args:
            path: Destination file. Defaults to :func:`default_config_path`.

        Returns:
            The path where the file was written.
        """
        target = Path(path) if path else default_config_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        content = yaml.safe_dump(self.model_dump(), sort_keys=False, default_flow_style=False)
        target.write_text(content, encoding="utf-8")
        logger.debug("Settings written to %s", target)
        return target

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from YAML, then apply ``GOBACK_*`` overrides.

        A missing file is not an error: defaults are used.

        Raises:
            SettingsError: If the file exists but is not a valid settings mapping.
        """
        source = Path(path) if path else default_config_path()
        data: dict[str, Any] = {}
        if source.is_file():
            try:
                loaded = yaml.safe_load(source.read_text(encoding="utf-8"))
            except yaml.YAMLError as exc:
                raise SettingsError(f"Cannot parse {source}: {exc}") from exc
            if loaded is None:
                loaded = {}
            if not isinstance(loaded, dict):
                raise SettingsError(f"{source} must contain a mapping, got {type(loaded).__name__}")
            data = {k: v for k, v in loaded.items() if k in cls.model_fields}
        else:
            logger.debug("No settings file at %s, using defaults", source)

        data.update(_env_overrides())
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise SettingsError(f"Invalid settings in {source}: {exc}") from exc

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from defaults plus environment variables only.

        Recognised variables (all optional): GOBACK_DEFAULT_OUTPUT_DIR,
        GOBACK_DEFAULT_MODULE_PREFIX, GOBACK_DEFAULT_AUTHOR,
        GOBACK_ANIMATION_SPEED, GOBACK_SHOW_SPLASH_SCREEN, GOBACK_AUTO_SAVE,
        GOBACK_THEME.
        """
        return cls.model_validate(_env_overrides())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_value(self, key: str, value: str) -> None:
        """Set a known key from its string form, coercing to the field type.

        Raises:
            SettingsError: On an unknown key, a list-valued key or a value that
                does not coerce.
        """
        if key not in type(self).model_fields:
            valid = ", ".join(sorted(type(self).model_fields))
            raise SettingsError(f"Unknown setting '{key}'. Valid keys: {valid}")
        if key == "recent_projects":
            raise SettingsError("recent_projects is managed automatically and cannot be set")

        candidate = self.model_dump()
        candidate[key] = _coerce(key, value)
        try:
            updated = type(self).model_validate(candidate)
        except ValidationError as exc:
            raise SettingsError(f"Invalid value for '{key}': {value}") from exc
        setattr(self, key, getattr(updated, key))

    def add_recent_project(self, path: str | Path) -> None:
        """Move *path* to the front of ``recent_projects``."""
        entry = str(path)
        projects = [p for p in self.recent_projects if p != entry]
        projects.insert(0, entry)
        self.recent_projects = projects[:MAX_RECENT_PROJECTS]

    def summary(self) -> dict[str, str]:
        """Return a flat ``{label: value}`` mapping for display."""
        return {
            "Default output directory": self.default_output_dir,
            "Default module prefix": self.default_module_prefix,
            "Default author": self.default_author or "(not set)",
            "Animation speed": f"{self.animation_speed} ms",
            "Show splash screen": "yes" if self.show_splash_screen else "no",
            "Auto save": "yes" if self.auto_save else "no",
            "Theme": self.theme,
            "Recent projects": str(len(self.recent_projects)),
        }


def _coerce(key: str, value: str) -> Any:
    """Turn a CLI / environment string into the type of field *key*.

    Only boolean fields interpret yes/no, on/off and true/false; every other
    field gets the raw string and pydantic converts it.
    """
    if Settings.model_fields[key].annotation is bool:
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "on", "1"):
            return True
        if lowered in ("false", "no", "off", "0"):
            return False
    return value


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for name in Settings.model_fields:
        if name == "recent_projects":
            continue
        raw = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
        if raw:
            overrides[name] = _coerce(name, raw)
    return overrides
