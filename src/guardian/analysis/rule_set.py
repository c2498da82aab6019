"""
Category-bucketed rule sets.

The database, DevOps and full-stack analyzers share this engine. Every rule
is matched against the whole text, the rule table is narrowed by a context
hint (database engine, file type or framework), and each matching rule is
reported once with its occurrence count and filed under the issue bucket
its category maps to.
"""

import logging
import re
from dataclasses import dataclass

from guardian.analysis.security_scanner import line_and_column
from guardian.core.findings import FileSeverity, RuleSetReport, Severity, Vulnerability, pluralize
from guardian.core.hash_cache import HashCache

logger = logging.getLogger(__name__)

UNKNOWN_CONTEXT = "unknown"


@dataclass(frozen=True)
class CategorizedRule:
    """A vulnerability pattern with its category and CWE reference."""

    pattern: re.Pattern
    message: str
    severity: Severity
    category: str
    cwe: str
    type: str

    def issue_text(self, count: int) -> str:
        return f"{self.message} (Found {count} {pluralize(count, 'occurrence')})"


def categorized_rule(
    regex: str, message: str, severity: Severity, category: str, cwe: str, type_: str
) -> CategorizedRule:
    return CategorizedRule(
        re.compile(regex, re.IGNORECASE | re.ASCII), message, severity, category, cwe, type_
    )


def overall_severity(vulnerabilities: list[Vulnerability]) -> FileSeverity:
    """Highest severity among ``vulnerabilities``, ``low`` when empty."""
    if not vulnerabilities:
        return FileSeverity.LOW
    highest = max(vulnerabilities, key=lambda v: v.severity.rank).severity
    return FileSeverity(highest.value.lower())


class RuleSetAnalyzer:
    """
    Base class for the bucketed analyzers.

    Subclasses provide the rule table, the bucket names, the category to
    bucket mapping and, where the context narrows the table, an override of
    ``relevant_rules``. Results are cached per (text, context) pair.
    """

    name = "rule set"
    buckets: tuple[str, ...] = ()
    category_buckets: dict[str, str] = {}
    default_bucket = ""

    def __init__(self, rules: tuple[CategorizedRule, ...], cache_size: int = 100):
        self._rules = rules
        self._cache: HashCache[RuleSetReport] = HashCache(cache_size)

    @property
    def cache(self) -> HashCache[RuleSetReport]:
        return self._cache

    @property
    def rules(self) -> tuple[CategorizedRule, ...]:
        return self._rules

    def relevant_rules(self, context: str) -> tuple[CategorizedRule, ...]:
        """Rules that apply to ``context``; every rule by default."""
        return self._rules

    def bucket_for(self, rule: CategorizedRule, context: str) -> str:
        return self.category_buckets.get(rule.category, self.default_bucket)

    def empty_report(self) -> RuleSetReport:
        return RuleSetReport(issues={bucket: [] for bucket in self.buckets})

    def analyze(self, code: str, context: str = UNKNOWN_CONTEXT) -> RuleSetReport:
        """
        Run the rule set over ``code``.

        Args:
            code: Source or configuration text
            context: Hint that narrows the rule table; unrecognized values
                select every rule

        Returns:
            A fresh RuleSetReport. Blank input yields an empty report
            without touching the cache; a failed analysis yields an empty
            report with ``error`` set, which is not cached.
        """
        if not code or not code.strip():
            return self.empty_report()

        cache_key = f"{context}\x00{code}"
        cached = self._cache.get(cache_key)
        if cached is None:
            try:
                cached = self._evaluate(code, context)
            except Exception as e:
                logger.error(f"Rule set analysis failed ({self.name}): {e}", exc_info=True)
                report = self.empty_report()
                report.error = f"Error occurred during {self.name} analysis"
                return report
            self._cache.put(cache_key, cached)

        return cached.copy()

    def _evaluate(self, code: str, context: str) -> RuleSetReport:
        report = self.empty_report()
        for rule in self.relevant_rules(context):
            matches = list(rule.pattern.finditer(code))
            if not matches:
                continue

            line, column = line_and_column(code, matches[0].start())
            report.vulnerabilities.append(
                Vulnerability(
                    severity=rule.severity,
                    type=rule.type,
                    message=rule.message,
                    count=len(matches),
                    line=line,
                    column=column,
                    category=rule.category,
                    cwe=rule.cwe,
                )
            )
            report.issues[self.bucket_for(rule, context)].append(rule.issue_text(len(matches)))

        report.severity = overall_severity(report.vulnerabilities)
        logger.debug(
            f"{len(report.vulnerabilities)} {self.name} rule(s) matched",
            extra={"context": context},
        )
        return report

    def clear_cache(self) -> None:
        self._cache.clear()
