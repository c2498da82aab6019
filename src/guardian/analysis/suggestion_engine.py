"""
Rule-based improvement suggestions.

Suggestions come from a fixed, ordered checklist of substring predicates.
At most five are returned; if nothing matches, three generic suggestions
are returned instead.
"""

import logging
import math
import re
from collections.abc import Callable

from guardian.core.findings import CodeAnalysis, Suggestion
from guardian.core.hash_cache import HashCache

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
SUGGESTION_ERROR = "Unable to generate suggestions at this time"

GENERIC_SUGGESTIONS: tuple[str, ...] = (
    "Code structure looks good - consider adding comments for better maintainability",
    "Review variable naming for clarity and consistency",
    "Consider adding unit tests for better code reliability",
)

_IF_CALL = re.compile(r"if\s*\(")
_COMPLEXITY_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\bif\s*\(", re.ASCII),
    re.compile(r"\bfor\s*\(", re.ASCII),
    re.compile(r"\bwhile\s*\(", re.ASCII),
    re.compile(r"\bswitch\s*\(", re.ASCII),
    re.compile(r"\bcatch\s*\(", re.ASCII),
)


def _line_count(code: str) -> int:
    return len(code.split("\n"))


SUGGESTION_RULES: tuple[tuple[Callable[[str], bool], str], ...] = (
    (
        lambda code: "let " in code and "let i =" not in code and "let j =" not in code,
        "Consider using const instead of let for immutable variables",
    ),
    (
        lambda code: "==" in code and "===" not in code,
        "Use strict equality (===) instead of loose equality (==)",
    ),
    (
        lambda code: "var " in code,
        "Consider using let or const instead of var for better scoping",
    ),
    (
        lambda code: "function" in code and "try" not in code and "catch" not in code,
        "Consider adding error handling with try-catch blocks",
    ),
    (
        lambda code: "console.log" in code,
        "Remove console.log statements before production deployment",
    ),
    (
        lambda code: "document.getElementById" in code or "document.querySelector" in code,
        "Add null checks when accessing DOM elements",
    ),
    (
        lambda code: "setTimeout" in code or "setInterval" in code,
        "Consider using async/await or Promises for better async handling",
    ),
    (
        lambda code: "for (" in code and ".length" in code,
        "Consider using for...of or forEach for better readability",
    ),
    (
        lambda code: "JSON.parse" in code and "try" not in code,
        "Wrap JSON.parse in try-catch to handle invalid JSON",
    ),
    (
        lambda code: "fetch(" in code and ".catch" not in code,
        "Add error handling for fetch requests",
    ),
    (
        lambda code: _line_count(code) > 50,
        "Consider breaking this large function into smaller, more focused functions",
    ),
    (
        lambda code: len(_IF_CALL.findall(code)) > 5,
        "High cyclomatic complexity detected - consider refactoring",
    ),
    (
        lambda code: "innerHTML" in code and "+" in code,
        "Avoid string concatenation with innerHTML - use textContent or sanitize input",
    ),
    (
        lambda code: "eval(" in code,
        "Avoid using eval() - it poses security risks and performance issues",
    ),
)


def generate_suggestions(code: str) -> list[str]:
    """
    Build the suggestion list for ``code``.

    Args:
        code: Source text

    Returns:
        Up to five suggestions in checklist order; the three generic
        suggestions when no rule applies; an empty list for blank input
    """
    if not code or not code.strip():
        return []

    suggestions = [message for predicate, message in SUGGESTION_RULES if predicate(code)]
    if not suggestions:
        suggestions = list(GENERIC_SUGGESTIONS)
    return suggestions[:MAX_SUGGESTIONS]


def calculate_complexity(code: str) -> int:
    """Branch-count complexity, capped at 10."""
    branches = sum(len(pattern.findall(code)) for pattern in _COMPLEXITY_PATTERNS)
    return min(10, 1 + branches)


def calculate_maintainability(code: str) -> int:
    """Single-sample maintainability score in [0, 100]."""
    score: float = 100
    lines = _line_count(code)
    if lines > 100:
        score -= min(30, (lines - 100) / 10)

    score -= (calculate_complexity(code) - 1) * 5

    if "TODO" in code:
        score -= 5
    if "FIXME" in code:
        score -= 10
    if "console.log" in code:
        score -= 3

    # Round half up
    return max(0, min(100, math.floor(score + 0.5)))


class SuggestionEngine:
    """Caches suggestion lists by content fingerprint."""

    def __init__(self, cache_size: int = 50):
        self._cache: HashCache[list[str]] = HashCache(cache_size)

    @property
    def cache(self) -> HashCache[list[str]]:
        return self._cache

    def get_suggestions(self, code: str) -> list[str]:
        if not code or not code.strip():
            return []

        cached = self._cache.get(code)
        if cached is not None:
            return list(cached)

        try:
            suggestions = generate_suggestions(code)
        except Exception as e:
            logger.error(f"Suggestion generation failed: {e}", exc_info=True)
            return [SUGGESTION_ERROR]

        self._cache.put(code, suggestions)
        return list(suggestions)

    def get_structured_suggestions(self, code: str) -> list[Suggestion]:
        return [Suggestion(message=message) for message in self.get_suggestions(code)]

    def analyze_code(self, code: str) -> CodeAnalysis:
        """
        Score a single code sample and attach its suggestions.

        Complexity here is capped at 10 and long-file penalties start at
        100 lines, unlike QualityScorer.
        """
        if not code or not code.strip():
            return CodeAnalysis()

        return CodeAnalysis(
            complexity=calculate_complexity(code),
            maintainability=calculate_maintainability(code),
            suggestions=self.get_suggestions(code),
        )

    def clear_cache(self) -> None:
        self._cache.clear()
