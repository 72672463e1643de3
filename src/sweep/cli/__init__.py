"""
CLI for sweep.

Finds unused assets (and, with Knip, unused files, dependencies and exports)
in a single app, a project directory, or every app of a monorepo.
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

from sweep import __version__
from sweep.cli.ui import (
    render_aggregated_summary,
    render_app_report,
    render_error,
    render_invalid_patterns,
    render_success,
    render_usage,
    setup_logging,
)
from sweep.core.config import load_config
from sweep.core.errors import AppValidationError, InvalidWhitelistError
from sweep.services import CleanupService, resolve_target

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="sweep",
    help="Find unused assets, files, dependencies and exports in JS/TS projects",
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"sweep {__version__}")
        raise typer.Exit()


@app.command()
def main(
    target: Optional[str] = typer.Argument(
        None, help="App name, project path, '.' for the current directory, or 'all'"
    ),
    cwd: Optional[Path] = typer.Option(
        None, "--cwd", "-C", help="Directory to resolve the target from"
    ),
    json_output: bool = typer.Option(
        False, "--json", "-j", help="Print the JSON report instead of tables"
    ),
    knip: bool = typer.Option(
        False, "--knip", help="Also run Knip for unused files, dependencies and exports"
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
):
    """Analyze an app (or every app) for unused code and assets."""
    base = (cwd or Path.cwd()).absolute()
    if not base.is_dir():
        render_error(f"Directory not found: {base}", console)
        raise typer.Exit(1)

    load_dotenv(base / ".env")
    resolution = resolve_target(target, base)

    try:
        config = load_config(resolution.root_dir)
    except (OSError, ValueError) as e:
        render_error(f"Failed to load configuration: {e}", console)
        raise typer.Exit(1)

    if knip:
        config.knip.enabled = True
    setup_logging(config.logging, quiet=json_output)

    service = CleanupService(config)

    if resolution.all_apps:
        batch = asyncio.run(service.analyze_all())
        if not batch.analyzed and not batch.failed:
            render_error(f"No valid apps found in {Path(config.root_dir) / config.apps_dir}", console)
            raise typer.Exit(1)

        if json_output:
            typer.echo(service.aggregator.to_json())
        else:
            for name in batch.analyzed:
                render_app_report(service.aggregator.get(name), console)
            render_aggregated_summary(service.aggregator, console)
            saved = service.save_report()
            if saved is not None:
                render_success(f"Report saved to {saved}", console)

        if not batch.success:
            raise typer.Exit(1)
        return

    try:
        report = asyncio.run(service.analyze_app(resolution.app_name, resolution.app_dir))
    except InvalidWhitelistError as e:
        render_invalid_patterns(e.invalid_patterns, console)
        raise typer.Exit(1)
    except AppValidationError as e:
        render_error(str(e), console)
        if resolution.app_dir is None:
            render_usage(Path(config.apps_dir), service.list_apps(), console)
        raise typer.Exit(1)

    if json_output:
        typer.echo(service.aggregator.to_json())
    else:
        render_app_report(report, console)


if __name__ == "__main__":
    app()
