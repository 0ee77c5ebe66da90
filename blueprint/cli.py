"""Command-line entry point.

Usage::

    blueprint generate --name my-api --plugin cors --plugin jwt --docker
    blueprint generate --name my-api --template drizzle -o ./services
    blueprint plugins
    blueprint templates
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from rich.table import Table

from blueprint import __version__
from blueprint.catalog import Catalog, default_catalog
from blueprint.config import Config
from blueprint.scaffolder import GenerationRequest, ProjectGenerator
from blueprint.utils import ConsoleReporter, console, print_error, print_summary_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="blueprint",
        description="Generate Fastify + TypeScript projects from templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  blueprint generate --name my-api\n"
            "  blueprint generate --name my-api --template drizzle --plugin cors\n"
            "  blueprint plugins\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    gen = subparsers.add_parser("generate", help="Generate a new project")
    gen.add_argument("--name", required=True, help="Project name (directory to create)")
    gen.add_argument(
        "--template", "--orm",
        dest="template",
        default="base",
        help="Template variant, e.g. base or drizzle (default: base)",
    )
    gen.add_argument(
        "--plugin", "-p",
        dest="plugins",
        action="append",
        default=[],
        help="Plugin to include; repeat for several",
    )
    gen.add_argument("--author", default="", help="Author written to package.json")
    gen.add_argument("--description", default="", help="Project description")
    gen.add_argument("--docker", action="store_true", help="Include Docker support")
    gen.add_argument("--output", "-o", default=None, help="Parent directory (default: .)")
    gen.add_argument("--package-manager", default=None, help="Package manager (default: pnpm)")
    gen.add_argument("--quiet", "-q", action="store_true", help="Only report the outcome")

    subparsers.add_parser("plugins", help="List available plugins")
    subparsers.add_parser("templates", help="List available template variants")
    return parser


def _print_plugins(catalog: Catalog) -> None:
    table = Table(title="Plugins", show_header=True, header_style="bold cyan")
    table.add_column("Id", no_wrap=True)
    table.add_column("Package")
    table.add_column("Version")
    table.add_column("Fragment", style="dim")
    for plugin in catalog.plugins.values():
        table.add_row(plugin.id, plugin.package, plugin.version, plugin.target if plugin.fragment else "-")
    console.print(table)


def _print_templates(catalog: Catalog) -> None:
    table = Table(title="Templates", show_header=True, header_style="bold cyan")
    table.add_column("Id", no_wrap=True)
    table.add_column("Directory")
    table.add_column("Dependencies", justify="right")
    for template in catalog.templates.values():
        table.add_row(template.id, template.directory, str(len(template.dependencies)))
    console.print(table)


def _run_generate(args: argparse.Namespace) -> int:
    config = Config.from_env()
    if args.output is not None:
        config.output_dir = Path(args.output)
    if args.package_manager:
        config.package_manager = args.package_manager

    request = GenerationRequest(
        project_name=args.name,
        template=args.template,
        plugins=frozenset(args.plugins),
        author=args.author,
        description=args.description,
        docker=args.docker,
    )
    generator = ProjectGenerator(config, reporter=ConsoleReporter(verbose=not args.quiet))
    result = asyncio.run(generator.generate(request))

    if not result.success:
        failure = result.failure
        print_error(f"Generation failed in stage {failure.stage.value}: {failure.message}")
        return 1

    print_summary_table(
        {
            "Project": str(result.project_path),
            "Template": request.template,
            "Plugins": ", ".join(sorted(request.plugins)) or "-",
            "Files": str(len(result.files)),
            "Commands": " && ".join(result.commands),
        },
        title="Generated",
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``blueprint`` / ``python -m blueprint``."""
    args = build_parser().parse_args(argv)

    if args.command == "plugins":
        _print_plugins(default_catalog())
        return
    if args.command == "templates":
        _print_templates(default_catalog())
        return

    sys.exit(_run_generate(args))


if __name__ == "__main__":
    main()
