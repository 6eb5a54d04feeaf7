"""Helm chart generation through a pluggable chart engine.

The chart stage never interprets chart templates itself.  It prepares a
chart directory in a scratch location, then drives a ``ChartEngine`` through
exactly three operations::

    chart = engine.load_chart(directory)
    render_values = engine.coalesce_values(chart, values, release)
    rendered = engine.render(chart, render_values)   # {"<chart>/templates/x.yaml": "..."}

``JinjaChartEngine`` is the built-in engine.  Its templates are Jinja2 files
with Helm-flavoured names in scope (``Values``, ``Release``, ``Chart``,
``Capabilities``) and a handful of Helm-like filters.
"""

from __future__ import annotations

import copy
import logging
import tempfile
from pathlib import Path
from typing import Any, Protocol

import yaml
from jinja2 import DictLoader, Environment, select_autoescape
from pydantic import BaseModel, Field

from .templates import TemplateRenderer, write_file

logger = logging.getLogger(__name__)

RenderValues = dict[str, Any]

CHART_TEMPLATE_PREFIX = "devops/helm"
DEFAULT_KUBE_VERSION = "v1.29.0"


# ---------------------------------------------------------------------------
# Errors and models
# ---------------------------------------------------------------------------


class ChartError(Exception):
    """A chart engine operation failed."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"chart {operation} failed: {cause}")


class Chart(BaseModel):
    """A loaded chart: metadata, declared default values and template sources."""

    name: str
    version: str = Field(default="0.1.0")
    app_version: str = Field(default="")
    description: str = Field(default="")
    metadata: dict[str, Any] = Field(default_factory=dict)
    values: dict[str, Any] = Field(default_factory=dict)
    templates: dict[str, str] = Field(
        default_factory=dict,
        description="Template sources keyed by path relative to the templates/ directory",
    )


class ReleaseContext(BaseModel):
    """Release options a chart is rendered for."""

    name: str
    namespace: str = Field(default="default")
    revision: int = Field(default=1)
    is_install: bool = Field(default=True)
    is_upgrade: bool = Field(default=False)
    service: str = Field(default="Helm")

    @classmethod
    def for_install(cls, name: str) -> "ReleaseContext":
        """A first install of *name* into the default namespace."""
        return cls(name=name)


class ChartEngine(Protocol):
    """The three operations the chart stage needs from an engine."""

    def load_chart(self, directory: Path) -> Chart: ...

    def coalesce_values(
        self, chart: Chart, values: dict[str, Any], release: ReleaseContext
    ) -> RenderValues: ...

    def render(self, chart: Chart, render_values: RenderValues) -> dict[str, str]: ...


# ---------------------------------------------------------------------------
# Value coalescing
# ---------------------------------------------------------------------------


def coalesce(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge *overrides* onto *defaults* and return a new mapping.

    Nested mappings merge key by key; any other override replaces the default
    outright.  An override of ``None`` deletes the key.
    """
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if value is None:
            merged.pop(key, None)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = coalesce(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


# ---------------------------------------------------------------------------
# Helm-like filters
# ---------------------------------------------------------------------------


def _to_yaml(value: Any) -> str:
    if value is None or value == {} or value == []:
        return ""
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False).rstrip("\n")


def _nindent(value: Any, width: int) -> str:
    pad = " " * width
    return "\n" + "\n".join(pad + line if line else line for line in str(value).splitlines())


def _quote(value: Any) -> str:
    text = "" if value is None else str(value)
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _trunc(value: Any, length: int) -> str:
    return str(value)[:length]


def _trim_suffix(value: Any, suffix: str) -> str:
    text = str(value)
    return text[: -len(suffix)] if suffix and text.endswith(suffix) else text


def _default(value: Any, fallback: Any = "") -> Any:
    return value if value else fallback


CHART_FILTERS = {
    "to_yaml": _to_yaml,
    "nindent": _nindent,
    "quote": _quote,
    "trunc": _trunc,
    "trim_suffix": _trim_suffix,
    "default": _default,
}


# ---------------------------------------------------------------------------
# Built-in engine
# ---------------------------------------------------------------------------


class JinjaChartEngine:
    """Chart engine whose templates are Jinja2 sources.

    Files under ``templates/`` whose basename starts with ``_`` are partials:
    other templates may ``{% import %}`` them, but they are never emitted.
    """

    kube_version: str = DEFAULT_KUBE_VERSION

    def load_chart(self, directory: Path) -> Chart:
        root = Path(directory)
        metadata = yaml.safe_load((root / "Chart.yaml").read_text(encoding="utf-8"))
        if not isinstance(metadata, dict) or not metadata.get("name"):
            raise ValueError(f"{root / 'Chart.yaml'} must be a mapping with a 'name'")

        values: dict[str, Any] = {}
        values_file = root / "values.yaml"
        if values_file.is_file():
            loaded = yaml.safe_load(values_file.read_text(encoding="utf-8"))
            if loaded is not None and not isinstance(loaded, dict):
                raise ValueError(f"{values_file} must contain a mapping")
            values = loaded or {}

        templates: dict[str, str] = {}
        templates_dir = root / "templates"
        if templates_dir.is_dir():
            for source in sorted(templates_dir.rglob("*")):
                if source.is_file():
                    rel = source.relative_to(templates_dir).as_posix()
                    templates[rel] = source.read_text(encoding="utf-8")

        return Chart(
            name=str(metadata["name"]),
            version=str(metadata.get("version", "0.1.0")),
            app_version=str(metadata.get("appVersion", "")),
            description=str(metadata.get("description", "")),
            metadata=metadata,
            values=values,
            templates=templates,
        )

    def coalesce_values(
        self, chart: Chart, values: dict[str, Any], release: ReleaseContext
    ) -> RenderValues:
        major, minor = self.kube_version.lstrip("v").split(".")[:2]
        return {
            "Values": coalesce(chart.values, values),
            "Release": {
                "Name": release.name,
                "Namespace": release.namespace,
                "Revision": release.revision,
                "IsInstall": release.is_install,
                "IsUpgrade": release.is_upgrade,
                "Service": release.service,
            },
            "Chart": {
                "Name": chart.name,
                "Version": chart.version,
                "AppVersion": chart.app_version,
                "Description": chart.description,
            },
            "Capabilities": {
                "KubeVersion": {"Version": self.kube_version, "Major": major, "Minor": minor},
            },
        }

    def render(self, chart: Chart, render_values: RenderValues) -> dict[str, str]:
        env = Environment(
            loader=DictLoader(chart.templates),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.filters.update(CHART_FILTERS)

        rendered: dict[str, str] = {}
        for rel in sorted(chart.templates):
            if rel.rsplit("/", 1)[-1].startswith("_"):
                continue
            content = env.get_template(rel).render(**render_values)
            rendered[f"{chart.name}/templates/{rel}"] = content
        return rendered


# ---------------------------------------------------------------------------
# Chart stage
# ---------------------------------------------------------------------------


def generate_helm_chart(
    renderer: TemplateRenderer,
    engine: ChartEngine,
    context: dict[str, Any],
    release: ReleaseContext,
    output_dir: Path,
) -> list[Path]:
    """Render the packaged Helm chart into *output_dir*.

    ``Chart.yaml.tmpl`` and ``values.yaml.tmpl`` are project templates
    rendered with *context*; everything else is handed to *engine*.  Empty
    outputs, ``NOTES.txt`` and chart tests are not written.  The scratch
    directory is removed on every exit path.

    Raises:
        ChartError: If loading, coalescing or rendering fails.
    """
    written: list[Path] = []
    with tempfile.TemporaryDirectory(prefix="goback-helm-") as scratch:
        chart_dir = Path(scratch)
        renderer.extract(CHART_TEMPLATE_PREFIX, chart_dir)

        chart_tmpl = chart_dir / "Chart.yaml.tmpl"
        if chart_tmpl.is_file():
            content = renderer.render_string(chart_tmpl.read_text(encoding="utf-8"), context)
            write_file(chart_dir / "Chart.yaml", content)
            chart_tmpl.unlink()

        try:
            chart = engine.load_chart(chart_dir)
        except ChartError:
            raise
        except Exception as exc:
            raise ChartError("load", exc) from exc

        values: dict[str, Any] = {}
        values_tmpl = chart_dir / "values.yaml.tmpl"
        if values_tmpl.is_file():
            buffer = renderer.render_string(values_tmpl.read_text(encoding="utf-8"), context)
            try:
                parsed = yaml.safe_load(buffer)
            except yaml.YAMLError as exc:
                raise ChartError("values", exc) from exc
            if parsed is not None and not isinstance(parsed, dict):
                raise ChartError("values", ValueError("values.yaml.tmpl must render a mapping"))
            values = parsed or {}

        try:
            render_values = engine.coalesce_values(chart, values, release)
        except ChartError:
            raise
        except Exception as exc:
            raise ChartError("coalesce", exc) from exc

        try:
            rendered = engine.render(chart, render_values)
        except ChartError:
            raise
        except Exception as exc:
            raise ChartError("render", exc) from exc

        prefix = f"{chart.name}/"
        for name in sorted(rendered):
            content = rendered[name]
            if not content.strip():
                continue
            if name.endswith("NOTES.txt") or "/tests/" in name:
                continue
            rel = name[len(prefix):] if name.startswith(prefix) else name
            target = Path(output_dir) / rel
            write_file(target, content)
            written.append(target)

    logger.debug("Helm chart rendered: %d file(s)", len(written))
    return written
