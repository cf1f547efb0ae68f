"""Scanner for MCP configuration files.

Each file is read, parsed as JSON and then checked twice: line by line
against the secret pattern registry, and structurally against the
best-practice rule set. Line numbers refer to the raw text so they stay
meaningful for pretty-printed configs.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Optional, Union

from mcp_secret_scan.models import Finding, ScanResult, ScanStatus
from mcp_secret_scan.scanners.patterns import PatternRegistry
from mcp_secret_scan.scanners.rules import RuleSet, servers_of

logger = logging.getLogger(__name__)

ENV_KEY_PATTERN = re.compile(r'"([A-Z_][A-Z0-9_]*)"\s*:')
NESTED_TOO_DEEPLY = "Invalid JSON: document nested too deeply"


def extract_env_key(line: str, end: Optional[int] = None) -> Optional[str]:
    """Return the closest ``"UPPER_KEY":`` preceding position ``end`` in ``line``."""
    prefix = line if end is None else line[:end]
    keys = ENV_KEY_PATTERN.findall(prefix)
    return keys[-1] if keys else None


class ConfigScanner:
    """Scans MCP configuration files for secrets and unsafe settings."""

    def __init__(self, registry: Optional[PatternRegistry] = None, rules: Optional[RuleSet] = None):
        self.registry = registry if registry is not None else PatternRegistry()
        self.rules = rules if rules is not None else RuleSet(self.registry)

    def scan(self, path: Union[str, Path]) -> ScanResult:
        """Scan a single file. Never raises for unreadable or malformed input."""
        path_str = str(path)
        try:
            content = Path(path).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            logger.info(f"Skipping {path_str}: {e}")
            return ScanResult.failure(path_str, ScanStatus.FILE_UNREADABLE, _describe_read_error(e))
        return self.scan_text(content, path_str)

    def scan_text(self, content: str, path: str = "<memory>") -> ScanResult:
        """Scan already-loaded configuration text."""
        try:
            document = json.loads(content)
        except json.JSONDecodeError as e:
            logger.info(f"Skipping {path}: invalid JSON")
            return ScanResult.failure(path, ScanStatus.INVALID_DOCUMENT, f"Invalid JSON: {e}")
        except RecursionError:
            logger.info(f"Skipping {path}: document nested too deeply")
            return ScanResult.failure(path, ScanStatus.INVALID_DOCUMENT, NESTED_TOO_DEEPLY)

        try:
            practices = self.rules.evaluate(document)
        except RecursionError:
            logger.info(f"Skipping {path}: document nested too deeply")
            return ScanResult.failure(path, ScanStatus.INVALID_DOCUMENT, NESTED_TOO_DEEPLY)

        findings = self.find_secrets(content)
        server_names = list(servers_of(document).keys())

        logger.debug(
            f"Scanned {path}: {len(server_names)} server(s), {len(findings)} finding(s), "
            f"{sum(1 for p in practices if not p.passed)} failed practice(s)"
        )
        return ScanResult(
            path=path,
            findings=findings,
            practices=practices,
            server_names=server_names,
        )

    def find_secrets(self, content: str) -> List[Finding]:
        """Match every line of ``content`` against the registry."""
        findings = []
        for number, line in enumerate(content.split("\n"), start=1):
            line = line.rstrip("\r")
            hits = self.registry.match(line)
            if not hits:
                continue
            masked = self.registry.mask_line(line).strip()
            for pattern, matched in hits:
                findings.append(Finding(
                    line=number,
                    severity=pattern.severity,
                    pattern_name=pattern.name,
                    masked_text=masked,
                    env_key=extract_env_key(line, line.find(matched)),
                ))
        return findings

    def scan_many(self, paths: Iterable[Union[str, Path]]) -> List[ScanResult]:
        """Scan files one at a time, preserving input order."""
        return [self.scan(path) for path in paths]


def _describe_read_error(error: Exception) -> str:
    if isinstance(error, UnicodeDecodeError):
        return f"File is not valid UTF-8: {error.reason}"
    if isinstance(error, OSError) and error.strerror:
        return f"{error.strerror}: {error.filename}" if error.filename else error.strerror
    return str(error)
