"""Detection engine for MCP configuration files."""

from .patterns import DEFAULT_PATTERNS, PatternRegistry, SecretPattern, mask_secret
from .rules import DEFAULT_RULES, PracticeRule, RuleSet
from .config_scanner import ConfigScanner, extract_env_key
from .discovery import Targets, existing_default_locations, find_configs_recursive, resolve_targets

__all__ = [
    "DEFAULT_PATTERNS",
    "PatternRegistry",
    "SecretPattern",
    "mask_secret",
    "DEFAULT_RULES",
    "PracticeRule",
    "RuleSet",
    "ConfigScanner",
    "extract_env_key",
    "Targets",
    "existing_default_locations",
    "find_configs_recursive",
    "resolve_targets",
]
