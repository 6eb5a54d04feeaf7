"""Shared pytest fixtures for the goback test suite.

Provides reusable fixtures for:
- Temporary output directories and settings files
- Sample project configurations (valid, invalid, DevOps-enabled)
- A template renderer over a small throwaway template tree
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from goback.config import Settings
from goback.project.models import DevOpsConfiguration, ProjectConfiguration
from goback.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep tests away from the real ``~/.goback.yaml`` and ``GOBACK_*`` vars."""
    for name in list(os.environ):
        if name.startswith("GOBACK_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GOBACK_CONFIG", str(tmp_path / "settings" / ".goback.yaml"))


@pytest.fixture(autouse=True)
def reset_goback_logger():
    """Undo ``configure_logging`` so caplog sees records from every test."""
    yield
    logger = logging.getLogger("goback")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Settings file location inside the test's temp directory."""
    return tmp_path / "settings" / ".goback.yaml"


@pytest.fixture
def quiet_settings() -> Settings:
    """Settings with the splash screen and auto-save switched off."""
    return Settings(show_splash_screen=False, auto_save=False, animation_speed=0)


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Target directory for a generated project (not created)."""
    return tmp_path / "out" / "my-api"


@pytest.fixture
def sample_config(output_dir: Path) -> ProjectConfiguration:
    """Fiber + PostgreSQL + SQLX, simple architecture, no DevOps."""
    return ProjectConfiguration(
        project_name="my-api",
        module_path="github.com/acme/my-api",
        description="Sample service",
        output_dir=str(output_dir),
        framework="fiber",
        database="postgresql",
        tool="sqlx",
        architecture="simple",
    )


@pytest.fixture
def devops_config(output_dir: Path) -> ProjectConfiguration:
    """Gin + MySQL + SQLC, clean architecture, every DevOps tool."""
    return ProjectConfiguration(
        project_name="shop",
        module_path="github.com/acme/shop",
        description="Shop service",
        output_dir=str(output_dir),
        framework="gin",
        database="mysql",
        tool="sqlc",
        architecture="clean",
        devops=DevOpsConfiguration(
            enabled=True,
            tools=["kubernetes", "helm", "terraform", "ansible"],
        ),
    )


@pytest.fixture
def invalid_config() -> ProjectConfiguration:
    """A configuration with several independent violations."""
    return ProjectConfiguration(
        project_name="",
        module_path="not a module",
        output_dir="",
        framework="rails",
        database="",
        tool="sqlx",
        architecture="simple",
        devops=DevOpsConfiguration(enabled=True, tools=[]),
    )


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A tiny template tree used to exercise the renderer in isolation."""
    root = tmp_path / "templates"
    (root / "demo" / "nested").mkdir(parents=True)
    (root / "demo" / "hello.txt.tmpl").write_text(
        "Hello {{ name | title }}!\n", encoding="utf-8"
    )
    (root / "demo" / "nested" / "info.md.tmpl").write_text(
        "{{ name | snake_case }} / {{ name | kebab_case }}\n", encoding="utf-8"
    )
    (root / "demo" / "raw.txt").write_text("{{ untouched }}\n", encoding="utf-8")
    (root / "alt" / "play.yml.tmpl").parent.mkdir(parents=True)
    (root / "alt" / "play.yml.tmpl").write_text(
        "app: << name >>\nvar: \"{{ ansible_var }}\"\n", encoding="utf-8"
    )
    return root


@pytest.fixture
def renderer(template_dir: Path) -> TemplateRenderer:
    """``TemplateRenderer`` rooted at :func:`template_dir`."""
    return TemplateRenderer(template_dir)
