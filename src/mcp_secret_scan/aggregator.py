"""Fold per-file scan results into a run summary and exit policy."""

import logging
from typing import Iterable, Optional, Tuple

from mcp_secret_scan.models import ExitPolicy, RunSummary, ScanResult, Severity

logger = logging.getLogger(__name__)


def aggregate(results: Iterable[ScanResult],
              error_severity: Optional[Severity] = None) -> Tuple[RunSummary, ExitPolicy]:
    """Aggregate findings and failed practices across every file.

    Files that could not be analyzed contribute nothing unless
    ``error_severity`` is given, in which case each one counts once at that
    severity.
    """
    summary = RunSummary()
    for result in results:
        summary.files_scanned += 1
        if result.error is not None:
            if error_severity is not None:
                _count(summary, error_severity)
            continue
        for finding in result.findings:
            _count(summary, finding.severity)
        for practice in result.failed_practices:
            _count(summary, practice.severity)

    policy = exit_policy(summary)
    logger.debug(f"Aggregated {summary.files_scanned} file(s): {summary.to_report()} -> {policy.value}")
    return summary, policy


def exit_policy(summary: RunSummary) -> ExitPolicy:
    """Worst severity wins: CRITICAL, then HIGH, otherwise clean."""
    if summary.critical_count > 0:
        return ExitPolicy.CRITICAL
    if summary.high_count > 0:
        return ExitPolicy.HIGH
    return ExitPolicy.CLEAN


def _count(summary: RunSummary, severity: Severity) -> None:
    summary.counts_by_severity[severity] = summary.counts_by_severity.get(severity, 0) + 1
    summary.total_findings += 1
