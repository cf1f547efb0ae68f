# Copyright (c) 2025 DriftCop Project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI interface for MCP Secret Scanner."""

import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from mcp_secret_scan import __version__
from mcp_secret_scan.aggregator import aggregate
from mcp_secret_scan.config import ConfigError, ScannerConfig, build_registry, build_rule_set, load_config
from mcp_secret_scan.models import Severity
from mcp_secret_scan.reporters import ReportFormat, generate_report, render_report
from mcp_secret_scan.reporters.report_generator import empty_report
from mcp_secret_scan.scanners import ConfigScanner, PatternRegistry, RuleSet, existing_default_locations, resolve_targets
from mcp_secret_scan.scanners.discovery import expand_location

# Exit status for unusable configuration, outside the 0/1/2 scan contract
EXIT_CONFIG_ERROR = 3

app = typer.Typer(
    name="mcp-secret-scan",
    help="Scan MCP configs for hardcoded secrets and security issues",
    rich_markup_mode="markdown"
)
console = Console()
err_console = Console(stderr=True)

# Logs go to stderr so --json output stays parseable
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    handlers=[RichHandler(console=err_console, show_path=False)]
)
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"mcp-secret-scan v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True
    )
) -> None:
    """MCP Secret Scanner - find hardcoded credentials in MCP configs."""
    pass


def _load_scanner_config(config_file: Optional[Path]) -> ScannerConfig:
    if config_file is None:
        return ScannerConfig()
    try:
        return load_config(config_file)
    except (ConfigError, FileNotFoundError) as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_CONFIG_ERROR)


def _build_engine(config: ScannerConfig) -> Tuple[PatternRegistry, RuleSet]:
    try:
        registry = build_registry(config)
        return registry, build_rule_set(config, registry)
    except ConfigError as e:
        err_console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(EXIT_CONFIG_ERROR)


def _set_log_level(verbose: bool, configured: str) -> None:
    level = logging.DEBUG if verbose else logging.getLevelName(configured.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logging.getLogger().setLevel(level)


@app.command()
def scan(
    paths: Optional[List[str]] = typer.Argument(None, help="Config files or directories to scan"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON (for CI/CD pipelines)"),
    fix: bool = typer.Option(False, "--fix", help="Show remediation steps"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Scan directories recursively"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Scanner configuration file (YAML or JSON)"),
    error_severity: Optional[Severity] = typer.Option(
        None, "--error-severity", help="Count unreadable or invalid files as findings of this severity"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Also write the JSON report to this file"),
    verbose: bool = typer.Option(False, "--verbose", help="Verbose logging")
) -> None:
    """
    Scan MCP configuration files for hardcoded secrets.

    With no paths, common MCP config locations are scanned. Exit status is
    1 if any CRITICAL issue was found, 2 if any HIGH issue, 0 otherwise.
    """
    config = _load_scanner_config(config_file)
    _set_log_level(verbose, config.log_level)

    registry, rules = _build_engine(config)

    if paths:
        targets = resolve_targets(
            paths,
            recursive=recursive,
            config_names=config.config_names,
            max_depth=config.max_depth,
            skip_dirs=config.skip_dirs,
        )
        for notice in targets.notices:
            err_console.print(f"[dim]{escape(notice)}[/dim]")
        files = targets.files
    else:
        if not json_output:
            console.print("[dim]Scanning common MCP config locations...[/dim]")
        files = existing_default_locations(config.default_locations)
        if not files:
            if json_output:
                typer.echo(json.dumps(empty_report(), indent=2))
            else:
                console.print("\n[bold]No MCP config files found in default locations.[/bold]")
                console.print("\nTry: mcp-secret-scan scan ./path/to/your/mcp-config.json")
                console.print("\nSearched:")
                for location in config.default_locations:
                    console.print(f"  [dim]{escape(str(expand_location(location)))}[/dim]")
            raise typer.Exit(0)

    if not files:
        if not json_output:
            console.print("No files to scan.")
        raise typer.Exit(0)

    scanner = ConfigScanner(registry, rules)
    results = scanner.scan_many(files)
    summary, policy = aggregate(results, error_severity or config.error_severity)

    if json_output:
        typer.echo(generate_report(results, summary, ReportFormat.JSON, fix=fix))
    else:
        render_report(console, results, summary, fix=fix)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(generate_report(results, summary, ReportFormat.JSON, fix=fix), encoding="utf-8")
        if not json_output:
            console.print(f"\n[green]Report saved to: {escape(str(output))}[/green]")

    logger.info(f"Exit policy: {policy.value}")
    raise typer.Exit(policy.exit_code)


@app.command()
def patterns(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Scanner configuration file (YAML or JSON)")
) -> None:
    """List registered secret patterns and best-practice rules."""
    config = _load_scanner_config(config_file)
    registry, rules = _build_engine(config)

    table = Table(title="Secret Patterns")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Severity")
    table.add_column("Kind", style="dim")
    for index, pattern in enumerate(registry, start=1):
        table.add_row(str(index), pattern.name, pattern.severity.value, "generic" if pattern.generic else "specific")
    console.print(table)

    rule_table = Table(title="Best-Practice Rules")
    rule_table.add_column("Rule", style="cyan")
    rule_table.add_column("Severity if failed")
    rule_table.add_column("Checks")
    for rule in rules:
        rule_table.add_row(rule.rule_id, rule.severity.value, rule.pass_message)
    console.print(rule_table)


@app.command()
def locations(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Scanner configuration file (YAML or JSON)")
) -> None:
    """Show the default MCP config locations and which of them exist."""
    config = _load_scanner_config(config_file)
    found = set(existing_default_locations(config.default_locations))

    table = Table(title="Default MCP Config Locations")
    table.add_column("Path", style="green")
    table.add_column("Found")
    for location in config.default_locations:
        path = expand_location(location)
        table.add_row(str(path), "yes" if path in found else "no")
    console.print(table)


if __name__ == "__main__":  # pragma: no cover
    app()
