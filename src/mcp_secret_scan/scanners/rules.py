"""Best-practice checks over a parsed MCP configuration document."""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Tuple

from mcp_secret_scan.models import PracticeResult, Severity
from mcp_secret_scan.scanners.patterns import PatternRegistry

ENV_REFERENCE_MARKERS = ("${", "process.env")
WILDCARD = '"*"'
MIN_ENV_SECRET_LENGTH = 15

Check = Callable[[Any, PatternRegistry], bool]


@dataclass(frozen=True)
class PracticeRule:
    """A structural check with its pass/fail messages."""
    rule_id: str
    check: Check
    pass_message: str
    fail_message: str
    severity: Severity


def servers_of(document: Any) -> Dict[str, Any]:
    """Return the ``mcpServers`` map, or an empty dict when absent or malformed."""
    if not isinstance(document, dict):
        return {}
    servers = document.get("mcpServers")
    return servers if isinstance(servers, dict) else {}


def _serialize(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _uses_env_references(document: Any, registry: PatternRegistry) -> bool:
    serialized = _serialize(document)
    return any(marker in serialized for marker in ENV_REFERENCE_MARKERS)


def _no_secrets_in_args(document: Any, registry: PatternRegistry) -> bool:
    for server in servers_of(document).values():
        if not isinstance(server, dict):
            continue
        args = server.get("args") or []
        if not isinstance(args, list):
            args = [args]
        joined = " ".join(str(arg) for arg in args)
        if registry.matches_any(joined):
            return False
    return True


def _no_literal_env_secrets(document: Any, registry: PatternRegistry) -> bool:
    for server in servers_of(document).values():
        if not isinstance(server, dict):
            continue
        env = server.get("env") or {}
        if not isinstance(env, dict):
            continue
        for value in env.values():
            if isinstance(value, str) and len(value) > MIN_ENV_SECRET_LENGTH:
                if registry.matches_any(value):
                    return False
    return True


def _iter_permissions(node: Any) -> Iterator[Any]:
    """Yield every value stored under a ``permissions`` key, at any depth."""
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "permissions":
                yield value
            yield from _iter_permissions(value)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_permissions(item)


def _no_wildcard_permissions(document: Any, registry: PatternRegistry) -> bool:
    return not any(WILDCARD in _serialize(value) for value in _iter_permissions(document))


DEFAULT_RULES: Tuple[PracticeRule, ...] = (
    PracticeRule(
        rule_id="env-var-refs",
        check=_uses_env_references,
        pass_message="Config uses environment variable references",
        fail_message="Config does not use environment variable references; secrets may be hardcoded",
        severity=Severity.MEDIUM,
    ),
    PracticeRule(
        rule_id="no-secrets-in-args",
        check=_no_secrets_in_args,
        pass_message="No secrets found in server command arguments",
        fail_message="Secrets detected in command arguments; visible in process listings (ps aux)!",
        severity=Severity.CRITICAL,
    ),
    PracticeRule(
        rule_id="no-literal-env-secrets",
        check=_no_literal_env_secrets,
        pass_message="No literal secrets found in environment variables",
        fail_message="Literal secrets found in environment variable values",
        severity=Severity.CRITICAL,
    ),
    PracticeRule(
        rule_id="no-wildcard-permissions",
        check=_no_wildcard_permissions,
        pass_message="No wildcard permissions detected",
        fail_message='Wildcard permissions ("*") detected; follow principle of least privilege',
        severity=Severity.HIGH,
    ),
)


class RuleSet:
    """Ordered best-practice rules bound to a pattern registry."""

    def __init__(self, registry: PatternRegistry, rules: Iterable[PracticeRule] = DEFAULT_RULES):
        self.registry = registry
        self._rules: Tuple[PracticeRule, ...] = tuple(rules)

    def __iter__(self) -> Iterator[PracticeRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def without(self, rule_ids: Iterable[str]) -> "RuleSet":
        """Return a rule set with the given rule ids removed."""
        excluded = set(rule_ids)
        return RuleSet(self.registry, [r for r in self._rules if r.rule_id not in excluded])

    def evaluate(self, document: Any) -> List[PracticeResult]:
        """Run every rule against ``document``; no rule short-circuits another."""
        results = []
        for rule in self._rules:
            passed = bool(rule.check(document, self.registry))
            results.append(PracticeResult(
                rule_id=rule.rule_id,
                passed=passed,
                message=rule.pass_message if passed else rule.fail_message,
                severity=rule.severity,
            ))
        return results
