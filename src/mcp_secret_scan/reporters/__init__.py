"""Report generators for MCP secret scan results."""

from .report_generator import ReportFormat, build_json_report, generate_report, suggest_fix
from .console import render_report

__all__ = ["ReportFormat", "build_json_report", "generate_report", "suggest_fix", "render_report"]
