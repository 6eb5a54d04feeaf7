"""Command-line entry point for ``goback``.

Usage::

    goback                      # interactive wizard (same as ``goback tui``)
    goback new my-api -f gin -d mysql -a clean --devops-tools kubernetes,helm
    goback list
    goback config show
    goback config set default_module_prefix github.com/acme
    goback version
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from goback.config import VERSION, Settings, SettingsError, default_config_path
from goback.project.choices import (
    Axis,
    Database,
    Framework,
    list_valid,
    recommended_architecture,
    recommended_tool,
)
from goback.project.models import DevOpsConfiguration, ProjectConfiguration
from goback.project.validator import validate_project_config
from goback.scaffolder.generator import STAGE_NAMES, ProjectGenerator, StageError
from goback.scaffolder.reporting import ConsoleReporter
from goback.utils import (
    configure_logging,
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)
from goback.wizard.app import WizardApp

logger = logging.getLogger(__name__)

AXIS_TITLES: dict[Axis, str] = {
    Axis.FRAMEWORK: "Frameworks",
    Axis.DATABASE: "Databases",
    Axis.TOOL: "Tools",
    Axis.ARCHITECTURE: "Architectures",
    Axis.DEVOPS_TOOL: "DevOps tools",
}

COMPLEXITY_LEVELS = ["simple", "small", "medium", "large", "enterprise"]


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goback",
        description="goback -- Go backend project generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  goback\n"
            "  goback new my-api --framework gin --database mysql\n"
            "  goback new my-api -a hexagonal --devops-tools kubernetes,helm\n"
            "  goback config set default_module_prefix github.com/acme\n"
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings file (default: $GOBACK_CONFIG or ~/.goback.yaml)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("tui", help="Run the interactive wizard (default)")

    new = sub.add_parser("new", help="Generate a project without the wizard")
    new.add_argument("name", help="Project name")
    new.add_argument("--framework", "-f", default=Framework.FIBER.value, help="Web framework (default: fiber)")
    new.add_argument("--database", "-d", default=Database.POSTGRESQL.value, help="Database (default: postgresql)")
    new.add_argument(
        "--tool", "-t",
        default=None,
        help="Data-access tool (default: the one recommended for the database)",
    )
    new.add_argument(
        "--architecture", "-a",
        default=None,
        help="Architecture (default: picked from --complexity)",
    )
    new.add_argument(
        "--complexity",
        default="simple",
        choices=COMPLEXITY_LEVELS,
        help="Expected project size, used when --architecture is omitted (default: simple)",
    )
    new.add_argument("--output", "-O", default=None, help="Output directory (default: ./<name>)")
    new.add_argument("--module", "-m", default=None, help="Go module path (default: <prefix>/<name>)")
    new.add_argument("--devops", action="store_true", help="Generate DevOps configuration")
    new.add_argument(
        "--devops-tools",
        default="",
        help="Comma-separated DevOps tools: kubernetes,helm,terraform,ansible (implies --devops)",
    )

    sub.add_parser("list", help="List every available choice")

    config = sub.add_parser("config", help="Show or change preferences")
    config_sub = config.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Show the current preferences")
    set_cmd = config_sub.add_parser("set", help="Change one preference")
    set_cmd.add_argument("key")
    set_cmd.add_argument("value")

    sub.add_parser("version", help="Print the version")
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def config_from_args(args: argparse.Namespace, settings: Settings) -> ProjectConfiguration:
    """Build the configuration requested by ``goback new``."""
    name = args.name.strip()
    tools = [t.strip() for t in args.devops_tools.split(",") if t.strip()]
    config = ProjectConfiguration(
        project_name=name,
        module_path=args.module or "",
        description=f"{name} backend API",
        output_dir=args.output or "",
        framework=args.framework.lower(),
        database=args.database.lower(),
        tool=(args.tool or recommended_tool(args.database.lower()).value).lower(),
        architecture=(args.architecture or recommended_architecture(args.complexity).value).lower(),
        devops=DevOpsConfiguration(enabled=args.devops or bool(tools), tools=tools),
    )
    return config.fill_defaults(settings.default_module_prefix)


def cmd_new(args: argparse.Namespace, settings: Settings, config_path: Optional[Path]) -> int:
    config = config_from_args(args, settings)

    errors = validate_project_config(config)
    if errors:
        print_error("Invalid configuration:")
        for error in errors:
            console.print(f"  [red]- {error}[/red]")
        return 1

    target = Path(config.output_dir)
    if target.is_dir() and any(target.iterdir()):
        print_warning(f"Output directory is not empty, overlapping files will be overwritten: {target}")

    reporter = ConsoleReporter(len(STAGE_NAMES))
    generator = ProjectGenerator(config, on_progress=reporter.on_progress, on_error=reporter.on_error)
    try:
        output = asyncio.run(generator.generate())
    except StageError as exc:
        print_error(f"Error: {exc}")
        return 1

    print_success(f"Project created at {output}")
    if settings.auto_save:
        settings.add_recent_project(str(output))
        settings.save(config_path)
    return 0


def cmd_list() -> int:
    for axis, title in AXIS_TITLES.items():
        console.print(f"[bold cyan]{title}[/bold cyan]")
        for info in list_valid(axis):
            console.print(f"  [green]{info.token:<12}[/green] {info.display} - {info.description}")
        console.print()
    return 0


def cmd_config(args: argparse.Namespace, settings: Settings, config_path: Optional[Path]) -> int:
    if args.config_command == "set":
        try:
            settings.set_value(args.key, args.value)
        except SettingsError as exc:
            print_error(f"Error: {exc}")
            return 1
        target = settings.save(config_path)
        print_success(f"Set {args.key} = {getattr(settings, args.key)} ({target})")
        return 0

    print_summary_table(settings.summary(), title=f"Settings ({config_path or default_config_path()})")
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for ``goback`` and ``python -m goback.cli``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = Settings.load(args.config)
    except SettingsError as exc:
        print_error(f"Error: {exc}")
        return 1

    command = args.command or "tui"
    logger.debug("Running command %s", command)

    if command == "version":
        console.print(f"goback version {VERSION}")
        return 0
    if command == "list":
        return cmd_list()
    if command == "config":
        return cmd_config(args, settings, args.config)
    if command == "new":
        return cmd_new(args, settings, args.config)

    app = WizardApp(settings, config_path=args.config)
    try:
        return app.run()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return 0


if __name__ == "__main__":
    sys.exit(main())
