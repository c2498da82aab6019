"""
Heuristic maintainability scoring.
"""

import logging
import re

from guardian.core.findings import QualityIssue, QualityMetrics, QualityReport, pluralize
from guardian.core.hash_cache import HashCache

logger = logging.getLogger(__name__)

LONG_FUNCTION_LINES = 50
MAGIC_NUMBER_THRESHOLD = 3

_BRANCH_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\bif\s*\(", re.ASCII),
    re.compile(r"\bfor\s*\(", re.ASCII),
    re.compile(r"\bwhile\s*\(", re.ASCII),
    re.compile(r"\bswitch\s*\(", re.ASCII),
)
_TODO = re.compile(r"TODO", re.IGNORECASE | re.ASCII)
_FIXME = re.compile(r"FIXME", re.IGNORECASE | re.ASCII)
_DEBUG_PRINT = re.compile(r"console\.log")
_MAGIC_NUMBER = re.compile(r"\b\d{2,}\b", re.ASCII)


def _count(pattern: re.Pattern, code: str) -> int:
    return sum(1 for _ in pattern.finditer(code))


def long_function_penalty(line_count: int) -> tuple[int, int]:
    """
    Maintainability deduction and technical debt for an over-long body.

    Returns:
        (maintainability deduction, technical debt), both zero at or below
        the line threshold
    """
    if line_count <= LONG_FUNCTION_LINES:
        return 0, 0
    steps = (line_count - LONG_FUNCTION_LINES) // 10
    return min(30, steps * 5 + 15), min(40, steps * 5 + 20)


class QualityScorer:
    """
    Computes complexity, maintainability and technical debt for source text.

    ``analyze`` caches metrics by content fingerprint. ``get_quality_metrics``
    only reads that cache: a cached maintainability score is reused, but its
    issue list is always recomputed, and uncached text is never stored.
    """

    def __init__(self, cache_size: int = 100):
        self._cache: HashCache[QualityMetrics] = HashCache(cache_size)

    @property
    def cache(self) -> HashCache[QualityMetrics]:
        return self._cache

    def analyze(self, code: str) -> QualityMetrics:
        if not code or not code.strip():
            return QualityMetrics()

        cached = self._cache.get(code)
        if cached is not None:
            return _copy_metrics(cached)

        metrics = self.calculate_metrics(code)
        self._cache.put(code, metrics)
        return _copy_metrics(metrics)

    def get_quality_metrics(self, code: str) -> QualityReport:
        """Quality score and freshly computed issues for ``code``."""
        if not code or not code.strip():
            return QualityReport()

        metrics = self.calculate_metrics(code)
        cached = self._cache.get(code)
        if cached is not None:
            return QualityReport(quality_score=cached.maintainability_score, issues=metrics.issues)
        return QualityReport(quality_score=metrics.maintainability_score, issues=metrics.issues)

    def find_issues(self, code: str) -> list[QualityIssue]:
        """Structured issues for ``code``; always computed fresh."""
        issues, _, _ = self._evaluate(code)
        return issues

    def calculate_metrics(self, code: str) -> QualityMetrics:
        """Compute metrics without consulting the cache."""
        complexity = 1 + sum(_count(pattern, code) for pattern in _BRANCH_PATTERNS)
        issues, maintainability, debt = self._evaluate(code)

        return QualityMetrics(
            maintainability_score=max(0, min(100, maintainability)),
            complexity_score=max(1, complexity),
            technical_debt=max(0, debt),
            issues=[issue.format() for issue in issues],
        )

    def _evaluate(self, code: str) -> tuple[list[QualityIssue], int, int]:
        issues: list[QualityIssue] = []
        maintainability = 100
        debt = 0

        todos = _count(_TODO, code)
        if todos:
            issues.append(
                QualityIssue(
                    type="todo",
                    message=f"Found {todos} TODO {pluralize(todos, 'comment')} in the code",
                )
            )
            debt += todos * 5
            maintainability -= todos * 5

        fixmes = _count(_FIXME, code)
        if fixmes:
            issues.append(
                QualityIssue(
                    type="fixme",
                    message=f"Found {fixmes} FIXME {pluralize(fixmes, 'comment')} in the code",
                )
            )
            debt += fixmes * 10
            maintainability -= fixmes * 10

        debug_prints = _count(_DEBUG_PRINT, code)
        if debug_prints:
            issues.append(
                QualityIssue(
                    type="debug-statement",
                    message=(
                        f"Found {debug_prints} debug {pluralize(debug_prints, 'statement')} "
                        "(console.log)"
                    ),
                )
            )
            maintainability -= debug_prints * 3

        line_count = len(code.split("\n"))
        if line_count > LONG_FUNCTION_LINES:
            issues.append(
                QualityIssue(
                    type="long-function",
                    message=(
                        f"Function appears to be too long ({line_count} lines, "
                        f"recommended: <{LONG_FUNCTION_LINES})"
                    ),
                )
            )
            deduction, long_debt = long_function_penalty(line_count)
            maintainability -= deduction
            debt += long_debt

        magic_numbers = _count(_MAGIC_NUMBER, code)
        if magic_numbers > MAGIC_NUMBER_THRESHOLD:
            issues.append(
                QualityIssue(
                    type="magic-numbers",
                    message=(
                        f"Multiple magic numbers found ({magic_numbers}) - consider using constants"
                    ),
                )
            )
            maintainability -= min(20, magic_numbers * 2)

        return issues, maintainability, debt

    def clear_cache(self) -> None:
        self._cache.clear()


def _copy_metrics(metrics: QualityMetrics) -> QualityMetrics:
    return QualityMetrics(
        maintainability_score=metrics.maintainability_score,
        complexity_score=metrics.complexity_score,
        technical_debt=metrics.technical_debt,
        issues=list(metrics.issues),
    )
