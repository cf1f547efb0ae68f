"""Data models for MCP Secret Scanner."""

from enum import Enum
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, computed_field


class Severity(str, Enum):
    """Finding severity levels, highest first."""
    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        """Higher rank means more severe."""
        return _SEVERITY_RANK[self]

    @classmethod
    def worst(cls, severities: Iterable["Severity"]) -> Optional["Severity"]:
        """Return the most severe level in ``severities`` or None if empty."""
        return max(severities, key=lambda s: s.rank, default=None)


_SEVERITY_RANK = {
    Severity.CRITICAL: 3,
    Severity.HIGH: 2,
    Severity.MEDIUM: 1,
    Severity.LOW: 0,
}


class ScanStatus(str, Enum):
    """Outcome of scanning a single file."""
    OK = "ok"
    FILE_UNREADABLE = "file_unreadable"
    INVALID_DOCUMENT = "invalid_document"


class ExitPolicy(str, Enum):
    """Run-level verdict used to gate automation."""
    CRITICAL = "critical"
    HIGH = "high"
    CLEAN = "clean"

    @property
    def exit_code(self) -> int:
        return {
            ExitPolicy.CRITICAL: 1,
            ExitPolicy.HIGH: 2,
            ExitPolicy.CLEAN: 0,
        }[self]


class Finding(BaseModel):
    """A secret pattern matching a specific line."""
    line: int
    severity: Severity
    pattern_name: str
    masked_text: str
    env_key: Optional[str] = None


class PracticeResult(BaseModel):
    """Outcome of a single best-practice rule."""
    rule_id: str
    passed: bool
    message: str
    severity: Severity


class ScanResult(BaseModel):
    """Result of scanning one configuration file."""
    path: str
    status: ScanStatus = ScanStatus.OK
    error: Optional[str] = None
    findings: List[Finding] = Field(default_factory=list)
    practices: List[PracticeResult] = Field(default_factory=list)
    server_names: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def server_count(self) -> int:
        return len(self.server_names)

    @property
    def ok(self) -> bool:
        return self.status == ScanStatus.OK

    @property
    def failed_practices(self) -> List[PracticeResult]:
        return [p for p in self.practices if not p.passed]

    @classmethod
    def failure(cls, path: str, status: ScanStatus, error: str) -> "ScanResult":
        """Build the result for a file that could not be analyzed."""
        return cls(path=path, status=status, error=error)


class RunSummary(BaseModel):
    """Severity totals across every scanned file."""
    files_scanned: int = 0
    total_findings: int = 0
    counts_by_severity: Dict[Severity, int] = Field(
        default_factory=lambda: {severity: 0 for severity in Severity}
    )

    @property
    def critical_count(self) -> int:
        return self.counts_by_severity.get(Severity.CRITICAL, 0)

    @property
    def high_count(self) -> int:
        return self.counts_by_severity.get(Severity.HIGH, 0)

    @property
    def medium_count(self) -> int:
        return self.counts_by_severity.get(Severity.MEDIUM, 0)

    @property
    def low_count(self) -> int:
        return self.counts_by_severity.get(Severity.LOW, 0)

    def to_report(self) -> Dict[str, int]:
        """Stable summary shape consumed by CI pipelines."""
        return {
            "filesScanned": self.files_scanned,
            "totalFindings": self.total_findings,
            "critical": self.critical_count,
            "high": self.high_count,
            "medium": self.medium_count,
            "low": self.low_count,
        }
