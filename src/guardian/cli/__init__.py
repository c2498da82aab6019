"""
CLI for Code Guardian.

Provides command-line interface for scanning workspaces and single files.
"""

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
)
from rich.syntax import Syntax

from guardian.analysis import UNKNOWN_CONTEXT
from guardian.cli.ui import (
    render_file_report,
    render_rule_set_report,
    render_scan_results,
    render_scan_summary,
)
from guardian.core.config import GuardianConfig, load_config
from guardian.core.findings import ScanResult, classify_file_severity
from guardian.services import ServicesContainer, WorkspaceScanner, create_services

# Initialize Rich Console
console = Console()

app = typer.Typer(
    name="guardian",
    help="Code Guardian - Static security and quality analysis",
    add_completion=False,
)


def configure_logging(level: str) -> None:
    """Route log records through rich at the configured level."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


def get_services(config_path: Optional[Path] = None) -> ServicesContainer:
    """
    Load .env and configuration, set up logging and build the services.

    Args:
        config_path: Optional YAML or JSON configuration file
    """
    load_dotenv()
    container = create_services(config_path=config_path)
    configure_logging(container.config.logging.level)
    return container


def _apply_scan_overrides(
    config: GuardianConfig,
    include: Optional[list[str]],
    exclude: Optional[list[str]],
    max_size: Optional[int],
    depth: Optional[int],
    workers: Optional[int],
) -> None:
    if include:
        config.scan.include_patterns = list(include)
    if exclude:
        config.scan.exclude_patterns = [*config.scan.exclude_patterns, *exclude]
    if max_size is not None:
        config.scan.max_file_size = max_size
    if depth is not None:
        config.scan.scan_depth = depth
    if workers is not None:
        config.scan.max_workers = workers


@app.command()
def scan(
    path: Path = typer.Argument(..., help="Workspace directory to scan"),
    output_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
    include: Optional[list[str]] = typer.Option(
        None, "--include", "-i", help="Include glob pattern. Can be specified multiple times."
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-e", help="Extra exclude glob pattern. Can be specified multiple times."
    ),
    max_size: Optional[int] = typer.Option(
        None, "--max-size", help="Skip files larger than this many bytes"
    ),
    depth: Optional[int] = typer.Option(
        None, "--depth", help="Directory levels to descend below the root"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", help="Files scanned concurrently"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (YAML or JSON)"
    ),
):
    """Scan a workspace for vulnerabilities, secrets and quality issues."""
    try:
        services = get_services(config_path)
        _apply_scan_overrides(services.config, include, exclude, max_size, depth, workers)

        if output_json:
            scanner = services.create_workspace_scanner([path], enable_real_time_scanning=False)
            results = asyncio.run(scanner.scan_workspace())
            payload = {
                "summary": scanner.get_summary().to_dict(),
                "results": [result.to_dict() for result in results],
            }
            typer.echo(json.dumps(payload, indent=2))
            return

        console.print(f"[bold blue]Scanning[/bold blue] {path}...")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Initializing...", total=None)

            def update_progress(current: int, total: int, message: str) -> None:
                progress.update(task, completed=current, total=total or None, description=message)

            scanner = services.create_workspace_scanner(
                [path],
                enable_real_time_scanning=False,
                progress_callback=update_progress,
            )
            results = asyncio.run(scanner.scan_workspace())

        summary = scanner.get_summary()
        render_scan_summary(summary, console)
        render_scan_results(results, console)

        if summary.failed_files:
            console.print("\n[bold red]Failed Files:[/bold red]")
            for f in summary.failed_files[:5]:
                console.print(f"  - {f}")
            if len(summary.failed_files) > 5:
                console.print(f"  ... and {len(summary.failed_files) - 5} more")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    file: Path = typer.Argument(..., help="File to analyze"),
    output_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (YAML or JSON)"
    ),
):
    """Run every analyzer on a single file, including suggestions and metrics."""
    if not file.is_file():
        console.print(f"[bold red]Error:[/bold red] Not a file: {file}")
        raise typer.Exit(1)

    try:
        services = get_services(config_path)
        code = file.read_text(encoding="utf-8")

        vulnerabilities = services.security_scanner.analyze(code)
        secrets = services.secret_detector.detect(code)
        metrics = services.quality_scorer.analyze(code)
        suggestions = services.suggestion_engine.get_suggestions(code)
        code_analysis = services.suggestion_engine.analyze_code(code)

        result = ScanResult(
            file_path=str(file),
            vulnerabilities=vulnerabilities,
            secrets=secrets,
            quality_issues=list(metrics.issues),
            severity=classify_file_severity(vulnerabilities, secrets, metrics.issues),
        )

        if output_json:
            payload = {
                **result.to_dict(),
                "metrics": metrics.to_dict(),
                "suggestions": suggestions,
                "analysis": {
                    "complexity": code_analysis.complexity,
                    "maintainability": code_analysis.maintainability,
                },
            }
            typer.echo(json.dumps(payload, indent=2))
            return

        render_file_report(str(file), result, metrics, code_analysis, suggestions, console)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


class RuleSetKind(str, Enum):
    DATABASE = "database"
    DEVOPS = "devops"
    FULLSTACK = "fullstack"


@app.command()
def audit(
    file: Path = typer.Argument(..., help="File to analyze"),
    kind: RuleSetKind = typer.Option(..., "--kind", "-k", help="Rule set to run"),
    context: str = typer.Option(
        UNKNOWN_CONTEXT,
        "--context",
        help="Database engine, file type or framework that narrows the rules",
    ),
    output_json: bool = typer.Option(False, "--json", help="Print the report as JSON"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (YAML or JSON)"
    ),
):
    """Run the database, DevOps or full-stack rule set on a single file."""
    if not file.is_file():
        console.print(f"[bold red]Error:[/bold red] Not a file: {file}")
        raise typer.Exit(1)

    try:
        services = get_services(config_path)
        analyzer = services.get_rule_set_analyzer(kind.value)
        report = analyzer.analyze(file.read_text(encoding="utf-8"), context)

        if output_json:
            typer.echo(json.dumps({"file_path": str(file), **report.to_dict()}, indent=2))
        else:
            render_rule_set_report(str(file), kind.value, report, console)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if report.error:
        raise typer.Exit(1)


async def _watch_workspace(scanner: WorkspaceScanner) -> None:
    try:
        results = await scanner.scan_workspace()
        render_scan_results(results, console)
        await scanner.start_watching()
        console.print("[dim]Watching for changes. Press Ctrl+C to stop.[/dim]")
        while True:
            await asyncio.sleep(1)
    finally:
        await scanner.dispose()


@app.command()
def watch(
    path: Path = typer.Argument(..., help="Workspace directory to watch"),
    debounce: Optional[int] = typer.Option(
        None, "--debounce", "-d", help="Debounce window in milliseconds"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (YAML or JSON)"
    ),
):
    """Scan a workspace, then re-scan files as they change until interrupted."""
    try:
        services = get_services(config_path)
        if debounce is not None:
            services.config.watch.debounce_ms = debounce

        # Findings from re-scans are shown through the log
        if services.config.logging.level.upper() == "WARNING":
            configure_logging("INFO")

        scanner = services.create_workspace_scanner([path], enable_real_time_scanning=True)
        console.print(f"[bold blue]Watching[/bold blue] {path}...")
        asyncio.run(_watch_workspace(scanner))

    except KeyboardInterrupt:
        console.print("\n[cyan]Stopped watching.[/cyan]")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command("config")
def show_config(
    output_json: bool = typer.Option(False, "--json", help="Print as JSON instead of YAML"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Configuration file (YAML or JSON)"
    ),
):
    """Print the effective configuration."""
    try:
        load_dotenv()
        cfg = load_config(config_path)

        if output_json:
            typer.echo(cfg.to_json())
        else:
            console.print(Syntax(cfg.to_yaml(), "yaml"))

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
