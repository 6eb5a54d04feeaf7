"""Tests for ProjectConfiguration and DevOpsConfiguration (goback.project.models)."""

from __future__ import annotations

from pathlib import Path

import pytest

from goback.config import Settings
from goback.project.choices import Architecture, Axis, Database, Framework, Tool
from goback.project.models import (
    DEFAULT_PROJECT_NAME,
    DevOpsConfiguration,
    ProjectConfiguration,
    new_project_configuration,
)

pytestmark = pytest.mark.unit


class TestDevOpsConfiguration:
    def test_defaults(self):
        devops = DevOpsConfiguration()
        assert devops.enabled is False
        assert devops.tools == []

    def test_tools_are_deduplicated_first_wins(self):
        devops = DevOpsConfiguration(enabled=True, tools=["helm", "Kubernetes", "helm", " kubernetes "])
        assert devops.tools == ["helm", "kubernetes"]

    def test_derived_flags(self):
        devops = DevOpsConfiguration(enabled=True, tools=["kubernetes", "ansible"])
        assert devops.kubernetes
        assert devops.ansible
        assert not devops.helm
        assert not devops.terraform

    def test_enabled_without_tools_is_representable(self):
        assert DevOpsConfiguration(enabled=True).tools == []


class TestProjectConfiguration:
    def test_choice_accessors(self, sample_config):
        assert sample_config.framework_choice is Framework.FIBER
        assert sample_config.database_choice is Database.POSTGRESQL
        assert sample_config.tool_choice is Tool.SQLX
        assert sample_config.architecture_choice is Architecture.SIMPLE

    def test_unknown_token_accessor_is_none(self, sample_config):
        sample_config.framework = "rails"
        assert sample_config.framework_choice is None

    def test_display(self, devops_config):
        assert devops_config.display(Axis.FRAMEWORK) == "Go Gin"
        assert devops_config.display(Axis.ARCHITECTURE) == "Clean Architecture"

    def test_free_text_is_stripped(self):
        config = ProjectConfiguration(
            project_name=" orders ",
            module_path="github.com/acme/orders \n",
            output_dir="  ./orders",
        )
        assert config.project_name == "orders"
        assert config.module_path == "github.com/acme/orders"
        assert config.output_dir == "./orders"

    def test_fill_defaults_derives_module_and_output(self):
        config = ProjectConfiguration(project_name="orders").fill_defaults("gitlab.com/acme/")
        assert config.module_path == "gitlab.com/acme/orders"
        assert config.output_dir == "./orders"

    def test_fill_defaults_keeps_explicit_values(self):
        config = ProjectConfiguration(
            project_name="orders",
            module_path="example.com/x/orders",
            output_dir="/srv/orders",
        ).fill_defaults()
        assert config.module_path == "example.com/x/orders"
        assert config.output_dir == "/srv/orders"

    def test_fill_defaults_without_name_is_noop(self):
        config = ProjectConfiguration().fill_defaults()
        assert config.module_path == ""
        assert config.output_dir == ""

    def test_save_and_load(self, devops_config, tmp_path: Path):
        target = devops_config.save(tmp_path / "nested" / "project.json")
        loaded = ProjectConfiguration.load(target)
        assert loaded.project_name == "shop"
        assert loaded.devops.tools == ["kubernetes", "helm", "terraform", "ansible"]
        assert loaded.created_at == devops_config.created_at


class TestNewProjectConfiguration:
    def test_defaults_from_cwd(self, tmp_path: Path):
        cwd = tmp_path / "billing"
        config = new_project_configuration(cwd=cwd)
        assert config.project_name == "billing"
        assert config.module_path == "github.com/user/billing"
        assert config.output_dir == "./billing"
        assert config.framework == "fiber"
        assert config.database == "postgresql"
        assert config.tool == "sqlx"
        assert config.architecture == "simple"
        assert config.devops.enabled is False

    def test_uses_settings(self, tmp_path: Path):
        settings = Settings(default_module_prefix="gitlab.com/acme", default_output_dir=str(tmp_path))
        config = new_project_configuration(settings, cwd=tmp_path / "svc")
        assert config.module_path == "gitlab.com/acme/svc"
        assert config.output_dir == str(tmp_path / "svc")

    def test_root_directory_falls_back_to_default_name(self):
        config = new_project_configuration(cwd=Path("/"))
        assert config.project_name == DEFAULT_PROJECT_NAME
