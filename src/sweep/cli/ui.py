"""
UI components module for the sweep CLI.

Provides styled terminal output using the Rich library for per-app
reports, the cross-app summary, usage help and error rendering.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sweep.core.config import LoggingConfig
from sweep.core.models import finding_label, format_file_size
from sweep.core.patterns import InvalidPattern
from sweep.services.report import STATUS_SKIPPED, AppReport, ReportAggregator

# Findings shown per Knip category before truncating
MAX_FINDINGS_SHOWN = 20


def setup_logging(config: LoggingConfig, quiet: bool = False) -> None:
    """
    Route sweep's log records to stderr through Rich.

    Args:
        config: Logging configuration (level and format)
        quiet: Only show errors (used for JSON output)
    """
    logger = logging.getLogger("sweep")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(config.format))
    logger.addHandler(handler)
    logger.setLevel(logging.ERROR if quiet else config.level.upper())


def render_app_report(report: AppReport, console: Console) -> None:
    """
    Render one app's report: unused assets, Knip findings and a closing line.

    Args:
        report: The app's report
        console: Rich Console instance for output.
    """
    console.print()
    console.rule(f"[bold cyan]CLEANUP REPORT: {report.app_name.upper()}[/bold cyan]")
    render_whitelisted(report, console)
    render_unused_assets(report, console)
    render_findings(report, console)
    if report.total_findings == 0:
        console.print("\n[green]No cleanup needed![/green]")


def render_whitelisted(report: AppReport, console: Console) -> None:
    if not report.whitelisted_assets:
        return
    console.print(
        f"[yellow]Skipped {len(report.whitelisted_assets)} whitelisted asset(s):[/yellow]"
    )
    for path in report.whitelisted_assets:
        console.print(f"   - {path}", style="yellow", markup=False, highlight=False)


def render_unused_assets(report: AppReport, console: Console) -> None:
    console.print("\n[bold cyan]UNUSED ASSETS[/bold cyan]")
    if not report.unused_assets:
        console.print("[green]No unused assets found![/green]")
        return

    table = Table(border_style="blue", show_header=True, header_style="bold white")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Path", style="cyan")
    table.add_column("Size", justify="right", style="yellow")

    for i, asset in enumerate(report.assets_by_size(), 1):
        table.add_row(str(i), asset.path, asset.formatted_size)

    console.print(table)
    console.print(
        f"Total: [bold]{len(report.unused_assets)}[/bold] assets | {report.total_asset_size}"
    )


def render_findings(report: AppReport, console: Console) -> None:
    console.print("\n[bold cyan]KNIP CODE ANALYSIS[/bold cyan]")
    findings = report.findings
    if report.knip_status == STATUS_SKIPPED:
        console.print("[dim]Knip: skipped (enable with --knip)[/dim]")
        return
    if findings.error:
        console.print(f"[yellow]Knip: {findings.error}[/yellow]")
        return
    if findings.total == 0:
        console.print("[green]No unused files, deps, or exports[/green]")
        return

    for key, items in findings.items():
        if not items:
            continue
        console.print(f"\n[magenta]{key} ({len(items)}):[/magenta]")
        for i, item in enumerate(items[:MAX_FINDINGS_SHOWN], 1):
            console.print(f"  {i}. {finding_label(item)}", markup=False, highlight=False)
        if len(items) > MAX_FINDINGS_SHOWN:
            console.print(f"  ... and {len(items) - MAX_FINDINGS_SHOWN} more")


def render_aggregated_summary(aggregator: ReportAggregator, console: Console) -> None:
    """
    Render the cross-app summary table.

    Args:
        aggregator: Report store holding every analyzed app
        console: Rich Console instance for output.
    """
    if not len(aggregator):
        return

    table = Table(title="Summary", title_style="bold cyan", border_style="blue")
    table.add_column("App", style="green", no_wrap=True)
    table.add_column("Assets", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("Deps", justify="right")
    table.add_column("Exports", justify="right")
    table.add_column("Size", justify="right", style="yellow")

    for name, report in sorted(aggregator.reports.items()):
        data = report.to_dict()
        table.add_row(
            name,
            str(data["unused_assets"]["count"]),
            str(data["unused_files"]["count"]),
            str(data["unused_dependencies"]["count"]),
            str(data["unused_exports"]["count"]),
            data["unused_assets"]["total_size_formatted"],
        )

    console.print()
    console.print(table)
    totals = aggregator.totals()
    console.print(
        f"\nTotal: {totals['assets']} assets, {totals['files']} files, "
        f"{totals['dependencies']} deps | {format_file_size(totals['size_bytes'])}"
    )


def render_usage(apps_dir: Path, available_apps: list[str], console: Console) -> None:
    """
    Render usage help with the apps found in the apps directory.

    Args:
        apps_dir: Configured apps directory
        available_apps: App names found there
        console: Rich Console instance for output.
    """
    table = Table(
        title="Usage",
        title_style="bold cyan",
        border_style="blue",
        show_header=False,
    )
    table.add_column("Command", style="green", no_wrap=True)
    table.add_column("Description", style="white")
    table.add_row("sweep", "Analyze the current directory")
    table.add_row("sweep <path>", "Analyze a project by path")
    table.add_row("sweep <app-name>", f"Analyze {apps_dir / '<app-name>'}")
    table.add_row("sweep all", "Analyze every app in the apps directory")
    console.print(table)

    if available_apps:
        console.print("[bold cyan]Available apps:[/bold cyan]")
        for name in available_apps:
            console.print(f"  - {name}")


def render_invalid_patterns(patterns: list[InvalidPattern], console: Console) -> None:
    """Render rejected whitelist patterns with their reasons."""
    console.print("[bold red]Error:[/bold red] Invalid whitelist pattern(s):")
    for invalid in patterns:
        console.print(f"  - {invalid.pattern} ({invalid.reason})", style="red", markup=False, highlight=False)


def render_error(message: str, console: Console) -> None:
    """
    Render an error message in a visually distinct red panel.

    Args:
        message: Error message to display.
        console: Rich Console instance for output.
    """
    error_text = Text()
    error_text.append("Error: ", style="bold red")
    error_text.append(message, style="red")

    console.print(
        Panel(
            error_text,
            border_style="red",
            title="[bold red]Error[/bold red]",
            expand=False,
        )
    )


def render_success(message: str, console: Console) -> None:
    """
    Render a success message in green.

    Args:
        message: Success message to display.
        console: Rich Console instance for output.
    """
    console.print(Text(message, style="green"))
