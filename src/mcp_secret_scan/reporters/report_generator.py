"""Structured report generation for scan results."""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from mcp_secret_scan import __version__
from mcp_secret_scan.models import Finding, RunSummary, ScanResult


class ReportFormat(str, Enum):
    """Supported report formats."""
    TEXT = "text"
    JSON = "json"


def suggest_fix(finding: Finding) -> Dict[str, str]:
    """Remediation steps for moving a literal secret out of the config."""
    key = finding.env_key or "YOUR_SECRET"
    return {
        "step1": f"export {key}=<your-actual-value>",
        "step2": f'# Replace in config: "{key}": "${{{key}}}"',
        "step3": "# Or load it from your OS keychain / secrets manager at launch",
    }


def finding_to_dict(finding: Finding, fix: bool = False) -> Dict[str, Any]:
    data = {
        "line": finding.line,
        "severity": finding.severity.value,
        "type": finding.pattern_name,
        "envKey": finding.env_key,
        "masked": finding.masked_text,
    }
    if fix:
        data["fix"] = suggest_fix(finding)
    return data


def file_to_dict(result: ScanResult, fix: bool = False) -> Dict[str, Any]:
    return {
        "path": result.path,
        "error": result.error,
        "servers": list(result.server_names),
        "findings": [finding_to_dict(f, fix) for f in result.findings],
        "practices": [
            {
                "name": p.rule_id,
                "passed": p.passed,
                "message": p.message,
                "severity": p.severity.value,
            }
            for p in result.practices
        ],
    }


def build_json_report(results: Sequence[ScanResult],
                      summary: RunSummary,
                      fix: bool = False,
                      timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the machine-readable report consumed by CI pipelines."""
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "version": __version__,
        "timestamp": timestamp.isoformat(),
        "files": [file_to_dict(r, fix) for r in results],
        "summary": summary.to_report(),
    }


def generate_report(results: Sequence[ScanResult],
                    summary: RunSummary,
                    format: ReportFormat = ReportFormat.JSON,
                    fix: bool = False) -> str:
    """Render results as a string in the requested format."""
    if format == ReportFormat.JSON:
        return json.dumps(build_json_report(results, summary, fix), indent=2)
    if format == ReportFormat.TEXT:
        from mcp_secret_scan.reporters.console import render_to_string
        return render_to_string(results, summary, fix)
    raise ValueError(f"Unsupported format: {format}")


def empty_report() -> Dict[str, Any]:
    """Report emitted when no configuration files were found."""
    return {"version": __version__, "files": [], "summary": RunSummary().to_report()}


def text_lines_for_fix(finding: Finding) -> List[str]:
    fix = suggest_fix(finding)
    return [f"Fix: {fix['step1']}", f"   Then: {fix['step2']}"]
