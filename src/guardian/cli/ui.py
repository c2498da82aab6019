"""
Rendering helpers for the Code Guardian CLI.

Turns scan results and single-file reports into rich tables and panels.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from guardian.core.findings import (
    CodeAnalysis,
    FileSeverity,
    QualityMetrics,
    RuleSetReport,
    ScanResult,
)
from guardian.services.scan_models import ScanSummary

SEVERITY_STYLES = {
    FileSeverity.CRITICAL: "bold red",
    FileSeverity.HIGH: "red",
    FileSeverity.MEDIUM: "yellow",
    FileSeverity.LOW: "green",
}

FINDING_STYLES = {
    "CRITICAL": "bold red",
    "HIGH": "red",
    "MEDIUM": "yellow",
    "LOW": "green",
}


def style_finding(finding: str) -> str:
    """Wrap the leading ``[SEVERITY]`` tag of a finding in rich markup."""
    for tag, style in FINDING_STYLES.items():
        prefix = f"[{tag}]"
        if finding.startswith(prefix):
            return f"[{style}]{escape(prefix)}[/{style}]{escape(finding[len(prefix):])}"
    return escape(finding)


def render_scan_summary(summary: ScanSummary, console: Console) -> None:
    grid = Table.grid(padding=1)
    grid.add_column(style="bold")
    grid.add_column()
    grid.add_row("Total Files:", str(summary.total_files))
    grid.add_row("Scanned:", str(summary.scanned_files))
    grid.add_row("Skipped:", str(summary.skipped_files))
    grid.add_row("Files With Issues:", str(summary.files_with_issues))
    grid.add_row("Duration:", f"{summary.duration_seconds:.2f}s")

    if summary.failed_files:
        grid.add_row("Failed Files:", f"[red]{len(summary.failed_files)}[/red]")

    console.print(
        Panel(
            grid,
            title="[bold green]Scan Complete[/bold green]",
            border_style="green",
            expand=False,
        )
    )


def render_scan_results(results: list[ScanResult], console: Console) -> None:
    """
    Render one row per file with issues.

    Args:
        results: Results sorted by severity then path
        console: Rich Console instance for output.
    """
    if not results:
        console.print("[green]No issues found.[/green]")
        return

    table = Table(
        title="Files With Issues",
        title_style="bold cyan",
        border_style="blue",
        show_header=True,
        header_style="bold white",
    )
    table.add_column("Severity", no_wrap=True)
    table.add_column("File", style="cyan")
    table.add_column("Security", justify="right")
    table.add_column("Secrets", justify="right")
    table.add_column("Quality", justify="right")

    for result in results:
        style = SEVERITY_STYLES[result.severity]
        table.add_row(
            f"[{style}]{result.severity.value}[/{style}]",
            result.file_path,
            str(len(result.vulnerabilities)),
            str(len(result.secrets)),
            str(len(result.quality_issues)),
        )

    console.print(table)


def render_findings(title: str, findings: list[str], console: Console) -> None:
    if not findings:
        return
    console.print(f"\n[bold]{title}:[/bold]")
    for finding in findings:
        console.print(f"  - {style_finding(finding)}")


def render_file_report(
    file_path: str,
    result: ScanResult,
    metrics: QualityMetrics,
    analysis: CodeAnalysis,
    suggestions: list[str],
    console: Console,
) -> None:
    """Render the full single-file report produced by ``guardian check``."""
    style = SEVERITY_STYLES[result.severity]

    grid = Table.grid(padding=1)
    grid.add_column(style="bold")
    grid.add_column()
    grid.add_row("Severity:", f"[{style}]{result.severity.value}[/{style}]")
    grid.add_row("Maintainability:", str(metrics.maintainability_score))
    grid.add_row("Complexity:", str(metrics.complexity_score))
    grid.add_row("Technical Debt:", str(metrics.technical_debt))
    grid.add_row("Suggestion Complexity:", str(analysis.complexity))
    grid.add_row("Suggestion Maintainability:", str(analysis.maintainability))

    console.print(Panel(grid, title=file_path, border_style="blue", expand=False))

    render_findings("Security", result.vulnerabilities, console)
    render_findings("Secrets", result.secrets, console)
    render_findings("Quality", result.quality_issues, console)
    render_findings("Suggestions", suggestions, console)


def render_rule_set_report(file_path: str, kind: str, report: RuleSetReport, console: Console) -> None:
    """Render the bucketed report produced by ``guardian audit``."""
    if report.error:
        console.print(f"[bold red]Error:[/bold red] {escape(report.error)}")
        return

    style = SEVERITY_STYLES[report.severity]
    grid = Table.grid(padding=1)
    grid.add_column(style="bold")
    grid.add_column()
    grid.add_row("Rule Set:", kind)
    grid.add_row("Severity:", f"[{style}]{report.severity.value}[/{style}]")
    grid.add_row("Matched Rules:", str(len(report.vulnerabilities)))

    console.print(Panel(grid, title=file_path, border_style="blue", expand=False))

    if not report.has_issues:
        console.print("[green]No issues found.[/green]")
        return

    for bucket, issues in report.issues.items():
        render_findings(bucket.replace("_", " ").title(), issues, console)
