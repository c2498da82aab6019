"""
Regex-driven security vulnerability scanner.

Rules are evaluated independently against the whole text. Each rule that
matches at least once produces one finding carrying its occurrence count.
"""

import logging
import re
from dataclasses import dataclass

from guardian.core.findings import HighlightSeverity, Severity, Vulnerability, group_by_severity
from guardian.core.hash_cache import HashCache

logger = logging.getLogger(__name__)

SECURITY_ANALYSIS_ERROR = "Error occurred during security analysis"


@dataclass(frozen=True)
class SecurityRule:
    """A single vulnerability pattern."""

    pattern: re.Pattern
    message: str
    severity: Severity
    type: str


def _rule(regex: str, message: str, severity: Severity, type_: str) -> SecurityRule:
    return SecurityRule(re.compile(regex, re.IGNORECASE | re.ASCII), message, severity, type_)


SECURITY_RULES: tuple[SecurityRule, ...] = (
    _rule(
        r"\beval\s*\(",
        "Critical: Code injection vulnerability - Use of eval()",
        Severity.HIGH,
        "code-injection",
    ),
    _rule(
        r"innerHTML\s*=.*(?:user|input|param)",
        "High: XSS vulnerability - innerHTML assignment with user data",
        Severity.HIGH,
        "xss",
    ),
    _rule(
        r"document\.write\s*\(",
        "High: XSS vulnerability - Use of document.write()",
        Severity.HIGH,
        "xss",
    ),
    _rule(
        r"""setTimeout\s*\(\s*['"`][^'"`]*['"`]""",
        "Medium: Code injection risk - setTimeout with string argument",
        Severity.MEDIUM,
        "code-injection",
    ),
    _rule(
        r"(?:password|secret|key|token).*console\.log",
        "High: Information disclosure - Sensitive data logged to console",
        Severity.HIGH,
        "information-disclosure",
    ),
    _rule(
        r"http://(?!localhost|127\.0\.0\.1)",
        "Medium: Insecure protocol - Use HTTPS instead of HTTP",
        Severity.MEDIUM,
        "insecure-protocol",
    ),
    _rule(
        r"\.innerHTML\s*\+=|\.outerHTML\s*=",
        "Medium: Potential XSS - Direct HTML manipulation",
        Severity.MEDIUM,
        "xss",
    ),
    _rule(
        r"new\s+Function\s*\(",
        "High: Code injection risk - Use of Function constructor",
        Severity.HIGH,
        "code-injection",
    ),
    _rule(
        r"\.\$\s*\(",
        "Low: Potential jQuery injection if user input involved",
        Severity.LOW,
        "jquery-injection",
    ),
    _rule(
        r"localStorage\.setItem.*(?:password|token|secret)",
        "Medium: Sensitive data stored in localStorage",
        Severity.MEDIUM,
        "insecure-storage",
    ),
    _rule(
        r"(?:prompt|confirm|alert)\s*\(",
        "Low: User interaction dialogs may be used for social engineering",
        Severity.LOW,
        "social-engineering",
    ),
    _rule(
        r"Math\.random\(\).*(?:password|token|id|key)",
        "High: Cryptographically weak random number generation",
        Severity.HIGH,
        "weak-random",
    ),
)

# Keyword classification used by highlighting; independent of rule severities
CRITICAL_KEYWORDS: tuple[str, ...] = ("injection", "XSS", "eval", "private key")
HIGH_RISK_KEYWORDS: tuple[str, ...] = ("insecure", "password", "console.log")


def classify_vulnerability_severity(message: str) -> HighlightSeverity:
    """
    Classify a vulnerability message by keyword search.

    Args:
        message: Finding text, formatted or raw

    Returns:
        ERROR for critical keywords, WARNING for high-risk keywords, else INFO
    """
    lowered = message.lower()
    if any(keyword.lower() in lowered for keyword in CRITICAL_KEYWORDS):
        return HighlightSeverity.ERROR
    if any(keyword.lower() in lowered for keyword in HIGH_RISK_KEYWORDS):
        return HighlightSeverity.WARNING
    return HighlightSeverity.INFO


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """Convert a character offset into a 0-based (line, column) pair."""
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start


class SecurityScanner:
    """
    Scans source text for security vulnerabilities.

    Results are memoized per content fingerprint. The findings of the most
    recent call are kept for ``get_vulnerabilities``.
    """

    def __init__(self, cache_size: int = 100, rules: tuple[SecurityRule, ...] = SECURITY_RULES):
        self._rules = rules
        self._cache: HashCache[list[Vulnerability]] = HashCache(cache_size)
        self._last: list[Vulnerability] = []

    @property
    def cache(self) -> HashCache[list[Vulnerability]]:
        return self._cache

    @property
    def rules(self) -> tuple[SecurityRule, ...]:
        return self._rules

    def find_vulnerabilities(self, code: str) -> list[Vulnerability]:
        """
        Return structured findings for ``code``.

        Empty or whitespace-only input returns an empty list without
        touching the cache.
        """
        if not code or not code.strip():
            self._last = []
            return []

        cached = self._cache.get(code)
        if cached is None:
            cached = self._evaluate(code)
            self._cache.put(code, cached)

        self._last = list(cached)
        return list(cached)

    def _evaluate(self, code: str) -> list[Vulnerability]:
        findings: list[Vulnerability] = []
        for rule in self._rules:
            first = None
            count = 0
            for match in rule.pattern.finditer(code):
                if first is None:
                    first = match
                count += 1

            if first is None:
                continue

            line, column = line_and_column(code, first.start())
            findings.append(
                Vulnerability(
                    severity=rule.severity,
                    type=rule.type,
                    message=rule.message,
                    count=count,
                    line=line,
                    column=column,
                )
            )
        return findings

    def analyze(self, code: str) -> list[str]:
        """
        Scan ``code`` and return formatted findings.

        Returns:
            One ``[SEVERITY] message (Found N occurrence(s))`` string per
            matching rule, in rule order; a single error string if the
            analysis itself failed
        """
        try:
            findings = self.find_vulnerabilities(code)
        except Exception as e:
            logger.error(f"Security analysis failed: {e}", exc_info=True)
            self._last = []
            return [SECURITY_ANALYSIS_ERROR]
        return [finding.format() for finding in findings]

    def get_vulnerability_records(self) -> list[Vulnerability]:
        """Structured findings of the most recent analysis."""
        return list(self._last)

    def get_vulnerabilities(self) -> list[str]:
        """Formatted findings of the most recent analysis."""
        return [finding.format() for finding in self._last]

    def get_vulnerabilities_by_severity(self) -> dict[str, list[str]]:
        """Findings of the most recent analysis grouped by severity tag."""
        return group_by_severity(self.get_vulnerabilities())

    def clear_cache(self) -> None:
        self._cache.clear()
