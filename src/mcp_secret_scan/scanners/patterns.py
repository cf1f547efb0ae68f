"""Secret pattern registry.

Patterns are plain records evaluated by a single loop. Registration order is
significant: provider-specific detectors come first and the generic
catch-alls last, so the most specific label is always reported first for a
line that trips several detectors.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Pattern, Sequence, Tuple

from mcp_secret_scan.models import Severity

MASK_REVEAL = 6
MASK_MAX_STARS = 20
MASK_MARKER = "..."


@dataclass(frozen=True)
class SecretPattern:
    """A named detector for one class of credential."""
    name: str
    regex: Pattern[str]
    severity: Severity
    generic: bool = False

    def search(self, text: str):
        return self.regex.search(text)


def _pattern(name: str, expr: str, severity: Severity, flags: int = 0,
             generic: bool = False) -> SecretPattern:
    return SecretPattern(name=name, regex=re.compile(expr, flags), severity=severity, generic=generic)


DEFAULT_PATTERNS: Tuple[SecretPattern, ...] = (
    _pattern("GitHub Token (classic)", r"ghp_[a-zA-Z0-9]{36}", Severity.CRITICAL),
    _pattern("GitHub Fine-grained PAT", r"github_pat_[a-zA-Z0-9_]{36,}", Severity.CRITICAL),
    _pattern("GitHub OAuth", r"gho_[a-zA-Z0-9]{36}", Severity.CRITICAL),
    _pattern("GitHub App Token", r"ghu_[a-zA-Z0-9]{36}", Severity.CRITICAL),
    _pattern("AWS Access Key", r"AKIA[0-9A-Z]{16}", Severity.CRITICAL),
    _pattern("OpenAI API Key", r"sk-[a-zA-Z0-9]{20}T3BlbkFJ[a-zA-Z0-9]{20}", Severity.CRITICAL),
    _pattern("OpenAI API Key (new)", r"sk-proj-[a-zA-Z0-9_-]{40,}", Severity.CRITICAL),
    _pattern("Anthropic API Key", r"sk-ant-api[a-zA-Z0-9-]{20,}", Severity.CRITICAL),
    _pattern("Anthropic API Key (legacy)", r"sk-ant-[a-zA-Z0-9-]{90,}", Severity.CRITICAL),
    _pattern("Stripe Secret Key", r"sk_(?:live|test)_[a-zA-Z0-9]{24,}", Severity.CRITICAL),
    _pattern("Stripe Publishable Key", r"pk_(?:live|test)_[a-zA-Z0-9]{24,}", Severity.MEDIUM),
    _pattern("Slack Bot Token", r"xoxb-[a-zA-Z0-9-]+", Severity.HIGH),
    _pattern("Slack User Token", r"xoxp-[a-zA-Z0-9-]+", Severity.HIGH),
    _pattern("Discord Bot Token", r"[MN][A-Za-z\d]{23,}\.[\w-]{6}\.[\w-]{27,}", Severity.HIGH),
    _pattern("Google API Key", r"AIza[0-9A-Za-z_-]{35}", Severity.HIGH),
    _pattern("Google OAuth Client Secret", r"GOCSPX-[a-zA-Z0-9_-]{28}", Severity.CRITICAL),
    # Bare 32-hex keys are only attributed to Azure when the line names it.
    _pattern("Azure Subscription Key", r"[a-f0-9]{32}(?=.*(?:azure|microsoft))", Severity.HIGH, re.IGNORECASE),
    _pattern("Twilio API Key", r"SK[a-f0-9]{32}", Severity.CRITICAL),
    _pattern("SendGrid API Key", r"SG\.[a-zA-Z0-9_-]{16,}\.[a-zA-Z0-9_-]{16,}", Severity.CRITICAL),
    _pattern("Mailgun API Key", r"key-[a-zA-Z0-9]{32}", Severity.CRITICAL),
    _pattern("Supabase Key", r"eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+", Severity.HIGH),
    _pattern("Postgres Connection String", r"postgres(?:ql)?://[^:@\s\"']+:(?!\$\{)[^@\s\"']+@", Severity.CRITICAL),
    _pattern("MongoDB Connection String", r"mongodb(?:\+srv)?://[^:@\s\"']+:(?!\$\{)[^@\s\"']+@", Severity.CRITICAL),
    _pattern("Bearer Token", r"Bearer\s+[a-zA-Z0-9_\-\.]{20,}", Severity.HIGH),
    _pattern("Private Key", r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----", Severity.CRITICAL),
    _pattern("NPM Token", r"npm_[a-zA-Z0-9]{36}", Severity.CRITICAL),
    _pattern("PyPI Token", r"pypi-[a-zA-Z0-9_-]{50,}", Severity.CRITICAL),
    _pattern("Hugging Face Token", r"hf_[a-zA-Z0-9]{34}", Severity.HIGH),
    _pattern("Replicate API Token", r"r8_[a-zA-Z0-9]{40}", Severity.HIGH),
    # Generic catch-alls must stay last.
    _pattern(
        "Generic High-Entropy Secret",
        r"[\"'](?:api[_-]?key|apikey|api[_-]?token|secret[_-]?key|access[_-]?token)[\"']?\s*[:=]\s*[\"'][a-zA-Z0-9_\-]{20,}[\"']",
        Severity.MEDIUM,
        re.IGNORECASE,
        generic=True,
    ),
    _pattern(
        "Generic Password",
        r"[\"']?(?:password|passwd|pwd)[\"']?\s*[:=]\s*[\"'](?!\$\{)[^\"']{8,}[\"']",
        Severity.MEDIUM,
        re.IGNORECASE,
        generic=True,
    ),
    _pattern(
        "Generic Base64 Blob",
        r"[\"'](?=[A-Za-z0-9+/]*[+/])[A-Za-z0-9+/]{40,}={0,2}[\"']",
        Severity.LOW,
        generic=True,
    ),
)


def mask_secret(secret: str) -> str:
    """Mask a matched secret, keeping a short prefix.

    At most ``MASK_REVEAL`` original characters survive and the whole
    replacement never exceeds 26 characters, whatever the secret length.
    """
    stars = max(0, min(len(secret) - MASK_REVEAL, MASK_MAX_STARS))
    return secret[:MASK_REVEAL] + "*" * stars + MASK_MARKER


class PatternRegistry:
    """Ordered, immutable catalogue of secret patterns."""

    def __init__(self, patterns: Iterable[SecretPattern] = DEFAULT_PATTERNS):
        self._patterns: Tuple[SecretPattern, ...] = tuple(patterns)

    def __iter__(self) -> Iterator[SecretPattern]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    @property
    def patterns(self) -> Tuple[SecretPattern, ...]:
        return self._patterns

    def match(self, line: str) -> List[Tuple[SecretPattern, str]]:
        """Return every pattern found in ``line`` with its first match.

        Overlapping detectors are all reported, in registration order.
        """
        hits = []
        for pattern in self._patterns:
            found = pattern.search(line)
            if found:
                hits.append((pattern, found.group(0)))
        return hits

    def matches_any(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self._patterns)

    def mask_line(self, line: str) -> str:
        """Mask every occurrence of every registered pattern in ``line``.

        Spans are collected on the original line and merged where they
        overlap or touch, so each merged span is masked exactly once.
        """
        spans = sorted(
            (m.start(), m.end())
            for pattern in self._patterns
            for m in pattern.regex.finditer(line)
            if m.end() > m.start()
        )
        merged: List[List[int]] = []
        for start, end in spans:
            if merged and start <= merged[-1][1]:
                merged[-1][1] = max(merged[-1][1], end)
            else:
                merged.append([start, end])

        for start, end in reversed(merged):
            line = line[:start] + mask_secret(line[start:end]) + line[end:]
        return line

    def extend(self, extra: Sequence[SecretPattern]) -> "PatternRegistry":
        """Return a new registry with ``extra`` ahead of the generic catch-alls."""
        specific = [p for p in self._patterns if not p.generic]
        generic = [p for p in self._patterns if p.generic]
        return PatternRegistry(specific + list(extra) + generic)
