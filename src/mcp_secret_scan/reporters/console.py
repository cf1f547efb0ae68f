"""Human-readable console report."""

import io
from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from mcp_secret_scan import __version__
from mcp_secret_scan.models import RunSummary, ScanResult, Severity
from mcp_secret_scan.reporters.report_generator import text_lines_for_fix

SEVERITY_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "orange1",
    Severity.MEDIUM: "cyan",
    Severity.LOW: "white",
}


def render_report(console: Console, results: Sequence[ScanResult], summary: RunSummary, fix: bool = False) -> None:
    """Print the full text report to ``console``."""
    console.print(Panel.fit(f"[bold]MCP Secret Scanner v{__version__}[/bold]"))

    for result in results:
        _render_file(console, result, fix)

    _render_summary(console, summary, fix)


def _render_file(console: Console, result: ScanResult, fix: bool) -> None:
    console.print(f"[bold]{escape(result.path)}[/bold]")

    if result.error is not None:
        console.print(f"   [dim]Skipped: {escape(result.error)}[/dim]\n")
        return

    names = ", ".join(result.server_names)
    console.print(f"   [dim]MCP Servers: {result.server_count} ({escape(names)})[/dim]")

    if not result.findings:
        console.print("   [green]No hardcoded secrets detected[/green]")
    else:
        console.print("\n   [bold]Secrets Found:[/bold]")
        for finding in result.findings:
            color = SEVERITY_COLORS[finding.severity]
            console.print(
                f"   [{color}]! \\[{finding.severity.value}] {escape(finding.pattern_name)} "
                f"(line {finding.line})[/{color}]"
            )
            console.print(f"     [dim]{escape(finding.masked_text)}[/dim]")
            if fix and finding.env_key:
                for line in text_lines_for_fix(finding):
                    console.print(f"     [green]{escape(line)}[/green]")

    console.print("\n   [bold]Best Practices:[/bold]")
    for practice in result.practices:
        if practice.passed:
            console.print(f"   [green]PASS {escape(practice.message)}[/green]")
        else:
            color = SEVERITY_COLORS[practice.severity]
            console.print(f"   [{color}]FAIL \\[{practice.severity.value}] {escape(practice.message)}[/{color}]")
    console.print("")


def _render_summary(console: Console, summary: RunSummary, fix: bool) -> None:
    table = Table(title="Scan Summary")
    table.add_column("Severity", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("[red]Critical[/red]", str(summary.critical_count))
    table.add_row("[orange1]High[/orange1]", str(summary.high_count))
    table.add_row("[cyan]Medium[/cyan]", str(summary.medium_count))
    table.add_row("Low", str(summary.low_count))

    console.print(table)
    console.print(f"Files scanned: {summary.files_scanned}")

    if summary.total_findings == 0:
        console.print("[bold green]No security issues found![/bold green]")
        return

    critical = f" ({summary.critical_count} CRITICAL)" if summary.critical_count else ""
    console.print(f"[bold]Found {summary.total_findings} issue(s){critical}[/bold]")
    console.print("\n[bold]Recommendation:[/bold] reference secrets with ${VAR} instead of literal values")
    if not fix:
        console.print("\n   [dim]Run with --fix to see remediation steps[/dim]")


def render_to_string(results: Sequence[ScanResult], summary: RunSummary, fix: bool = False) -> str:
    """Render the text report without colors, e.g. for writing to a file."""
    buffer = io.StringIO()
    console = Console(file=buffer, color_system=None, width=100, highlight=False)
    render_report(console, results, summary, fix)
    return buffer.getvalue()
