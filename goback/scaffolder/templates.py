"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which reads the ``.tmpl`` asset tree
shipped in ``goback/scaffolder/templates/`` and renders it with the
project-specific context.  Supports single-file rendering, batch tree
rendering, string rendering for buffers that never touch the asset tree, and
raw extraction of a subtree (used by the Helm chart stage).

Every environment carries the same function set, exposed both as globals
(``snake_case(config.project_name)``) and as filters
(``config.project_name | snake_case``).  Templates whose target files use
``{{ }}`` themselves render through an alternate-delimiter environment.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from goback.utils import kebab_case, snake_case, title_case

logger = logging.getLogger(__name__)


TEMPLATE_SUFFIX = ".tmpl"

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

# variable pair -> (block start, block end, comment start, comment end)
_DELIMITER_SETS: dict[tuple[str, str], tuple[str, str, str, str]] = {
    ("{{", "}}"): ("{%", "%}", "{#", "#}"),
    ("<<", ">>"): ("<%", "%>", "<#", "#>"),
}

DEFAULT_DELIMITERS: tuple[str, str] = ("{{", "}}")


# ---------------------------------------------------------------------------
# Function set
# ---------------------------------------------------------------------------

def _upper(value: Any) -> str:
    return str(value).upper()


def _lower(value: Any) -> str:
    return str(value).lower()


def _replace_all(value: Any, old: str, new: str) -> str:
    return str(value).replace(old, new)


def _b64enc(value: Any) -> str:
    return base64.b64encode(str(value).encode("utf-8")).decode("ascii")


def _default(value: Any, fallback: Any = "") -> Any:
    """Return *fallback* when *value* is empty (``None``, ``""``, ``0``, ``[]``)."""
    return value if value else fallback


TEMPLATE_FUNCTIONS: dict[str, Callable[..., Any]] = {
    "upper": _upper,
    "lower": _lower,
    "snake_case": snake_case,
    "kebab_case": kebab_case,
    "title": title_case,
    "replace_all": _replace_all,
    "b64enc": _b64enc,
    "default": _default,
}


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the ``.tmpl`` template tree for project scaffolding.

    Template paths are always POSIX-style and relative to the template root,
    e.g. ``"frameworks/fiber/main.go.tmpl"``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self._environments: dict[tuple[str, str], Environment] = {}

    # -- Environments ------------------------------------------------------

    def environment(self, delimiters: Optional[tuple[str, str]] = None) -> Environment:
        """Return the (cached) environment for a variable delimiter pair."""
        pair = tuple(delimiters) if delimiters else DEFAULT_DELIMITERS
        env = self._environments.get(pair)
        if env is None:
            env = self._build_environment(pair)
            self._environments[pair] = env
        return env

    def _build_environment(self, pair: tuple[str, str]) -> Environment:
        if pair not in _DELIMITER_SETS:
            raise ValueError(f"Unsupported template delimiters: {pair[0]} {pair[1]}")
        block_start, block_end, comment_start, comment_end = _DELIMITER_SETS[pair]
        env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            variable_start_string=pair[0],
            variable_end_string=pair[1],
            block_start_string=block_start,
            block_end_string=block_end,
            comment_start_string=comment_start,
            comment_end_string=comment_end,
        )
        env.filters.update(TEMPLATE_FUNCTIONS)
        env.globals.update(TEMPLATE_FUNCTIONS)
        return env

    # -- Asset access ------------------------------------------------------

    def read(self, template_path: str) -> str:
        """Return the raw, unrendered text of a template.

        Raises:
            FileNotFoundError: If the template does not exist.
        """
        return (self.template_dir / template_path).read_text(encoding="utf-8")

    def exists(self, template_path: str) -> bool:
        """Return ``True`` if *template_path* is a file in the template tree."""
        return (self.template_dir / template_path).is_file()

    def list_templates(self, prefix: str = "", suffix: str = TEMPLATE_SUFFIX) -> list[str]:
        """Return a sorted list of template paths under *prefix* (recursive).

        Paths are relative to the template root.  Only files ending with
        *suffix* are returned; pass ``""`` to list every file.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*")
            if p.is_file() and p.name.endswith(suffix)
        )

    def extract(self, prefix: str, dest: str | Path) -> list[Path]:
        """Copy the raw files under *prefix* into *dest*, preserving layout.

        Returns:
            List of copied file paths.
        """
        source_dir = self.template_dir / prefix
        if not source_dir.is_dir():
            raise FileNotFoundError(f"Template directory not found: {prefix}")
        dest_dir = Path(dest)
        copied: list[Path] = []
        for source in sorted(source_dir.rglob("*")):
            if not source.is_file():
                continue
            target = dest_dir / source.relative_to(source_dir)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            copied.append(target)
        logger.debug("Extracted %d file(s) from %s to %s", len(copied), prefix, dest_dir)
        return copied

    # -- Single template rendering -----------------------------------------

    def render(
        self,
        template_path: str,
        context: dict[str, Any],
        delimiters: Optional[tuple[str, str]] = None,
    ) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"base/go.mod.tmpl"``).
            context: Dictionary of variables available inside the template.
            delimiters: Optional alternate variable delimiters, e.g. ``("<<", ">>")``.

        Returns:
            The rendered template content as a string.
        """
        template = self.environment(delimiters).get_template(template_path)
        return template.render(**context)

    def render_string(
        self,
        template_string: str,
        context: dict[str, Any],
        delimiters: Optional[tuple[str, str]] = None,
    ) -> str:
        """Render an inline template string with the provided context."""
        template = self.environment(delimiters).from_string(template_string)
        return template.render(**context)

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
        delimiters: Optional[tuple[str, str]] = None,
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically and an existing file is
        overwritten.  Returns the output path.
        """
        content = self.render(template_path, context, delimiters)
        out = Path(output_path)
        await asyncio.to_thread(write_file, out, content)
        logger.debug("Rendered %s -> %s", template_path, out)
        return out

    async def render_tree(
        self,
        template_prefix: str,
        output_dir: str | Path,
        context: dict[str, Any],
        *,
        delimiters: Optional[tuple[str, str]] = None,
        skip_names: list[str] | None = None,
        remap: Callable[[str], Optional[str]] | None = None,
    ) -> list[Path]:
        """Render every ``.tmpl`` file under *template_prefix* to *output_dir*.

        The directory structure is preserved: a template at
        ``devops/kubernetes/deployment.yaml.tmpl`` rendered with
        ``template_prefix="devops/kubernetes"`` and
        ``output_dir="/tmp/acme/devops/kubernetes"`` writes to
        ``/tmp/acme/devops/kubernetes/deployment.yaml``.

        Args:
            template_prefix: Subdirectory inside the template root to scan.
            output_dir: Target directory where rendered files are written.
            context: Template context variables.
            delimiters: Optional alternate variable delimiters.
            skip_names: Template basenames to leave out.
            remap: Optional callback mapping the ``.tmpl``-stripped relative
                path to a different output-relative path.  Returning ``None``
                keeps the original path.

        Returns:
            List of written file paths.
        """
        skip_names = skip_names or []
        out_base = Path(output_dir)
        written: list[Path] = []

        for template_key in self.list_templates(template_prefix):
            rel = template_key[len(template_prefix):].lstrip("/")
            if rel.rsplit("/", 1)[-1] in skip_names:
                continue
            target_rel = output_name(rel)
            if remap is not None:
                target_rel = remap(target_rel) or target_rel
            path = await self.render_to_file(
                template_key, out_base / target_rel, context, delimiters
            )
            written.append(path)

        return written


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def output_name(template_path: str) -> str:
    """Strip one trailing ``.tmpl`` from a template path."""
    if template_path.endswith(TEMPLATE_SUFFIX):
        return template_path[: -len(TEMPLATE_SUFFIX)]
    return template_path


def write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
