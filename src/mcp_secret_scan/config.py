"""Configuration for MCP Secret Scanner."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from mcp_secret_scan.models import Severity
from mcp_secret_scan.scanners.patterns import PatternRegistry, SecretPattern
from mcp_secret_scan.scanners.rules import RuleSet

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a scanner configuration file cannot be used."""


class PatternConfig(BaseModel):
    """A user-supplied secret pattern."""
    name: str
    regex: str
    severity: Severity = Severity.HIGH
    ignore_case: bool = False

    def compile(self) -> SecretPattern:
        flags = re.IGNORECASE if self.ignore_case else 0
        try:
            compiled = re.compile(self.regex, flags)
        except re.error as e:
            raise ConfigError(f"Invalid regex for pattern '{self.name}': {e}") from e
        return SecretPattern(name=self.name, regex=compiled, severity=self.severity)


class ScannerConfig(BaseModel):
    """Scanner configuration."""

    # Locations checked when no path is given on the command line
    default_locations: List[str] = Field(default_factory=lambda: [
        "~/.claude/claude_desktop_config.json",
        "~/Library/Application Support/Claude/claude_desktop_config.json",
        "~/.cursor/mcp.json",
        "~/.vscode/mcp.json",
        "mcp.json",
        ".mcp.json",
        ".cursor/mcp.json",
    ])

    # Recursive discovery settings
    config_names: List[str] = Field(default_factory=lambda: [
        "mcp.json",
        ".mcp.json",
        "claude_desktop_config.json",
        "mcp-config.json",
    ])
    max_depth: int = 5
    skip_dirs: List[str] = Field(default_factory=lambda: ["node_modules"])

    # Detection settings
    disabled_rules: List[str] = Field(default_factory=list)
    extra_patterns: List[PatternConfig] = Field(default_factory=list)

    # Severity charged to files that could not be analyzed (None = not counted)
    error_severity: Optional[Severity] = None

    log_level: str = Field(default_factory=lambda: os.getenv("MCP_SECRET_SCAN_LOG_LEVEL", "WARNING"))


def load_config(path: Path) -> ScannerConfig:
    """
    Load scanner configuration from file

    Args:
        path: Path to configuration file (JSON or YAML)

    Returns:
        Validated scanner configuration
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix in ('.yaml', '.yml'):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not parse configuration {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read configuration {path}: {e}") from e

    return parse_config(data or {}, source=str(path))


def parse_config(data: Dict[str, Any], source: str = "<config>") -> ScannerConfig:
    """Validate a configuration mapping."""
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {source} must be a mapping")
    try:
        config = ScannerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration {source}: {e}") from e
    logger.debug(f"Loaded configuration from {source}")
    return config


def build_registry(config: ScannerConfig) -> PatternRegistry:
    """Build the process-wide pattern registry, including user patterns."""
    registry = PatternRegistry()
    if config.extra_patterns:
        registry = registry.extend([p.compile() for p in config.extra_patterns])
        logger.info(f"Registered {len(config.extra_patterns)} custom pattern(s)")
    return registry


def build_rule_set(config: ScannerConfig, registry: PatternRegistry) -> RuleSet:
    """Build the best-practice rule set, honouring ``disabled_rules``."""
    rules = RuleSet(registry)
    known = {rule.rule_id for rule in rules}
    unknown = set(config.disabled_rules) - known
    if unknown:
        raise ConfigError(f"Unknown rule id(s) in disabled_rules: {', '.join(sorted(unknown))}")
    return rules.without(config.disabled_rules)
