"""
Unit tests for QualityScorer.
"""

import pytest

from guardian.analysis.quality_scorer import QualityScorer, long_function_penalty
from guardian.core.findings import QualityMetrics


def long_function(total_lines: int = 120, branches: int = 6, todos: int = 1) -> str:
    """Build a JavaScript function body with the given shape."""
    lines = ["function process(x) {"]
    lines += ["  if (x) { x = x + 1; }"] * branches
    lines += ["  // TODO: split this up"] * todos
    while len(lines) < total_lines - 1:
        lines.append("  x = x + 1;")
    lines.append("}")
    return "\n".join(lines)


@pytest.fixture
def scorer() -> QualityScorer:
    return QualityScorer()


class TestAnalyze:
    @pytest.mark.parametrize("code", ["", "   ", "\n\n"])
    def test_blank_input_returns_defaults(self, scorer, code):
        assert scorer.analyze(code) == QualityMetrics()
        assert len(scorer.cache) == 0

    def test_long_function_with_todo(self, scorer):
        code = long_function()

        metrics = scorer.analyze(code)

        assert metrics.complexity_score == 7
        # 100 - 5 (TODO) - 30 (long function, capped)
        assert metrics.maintainability_score == 65
        # 5 (TODO) + 40 (long function, capped)
        assert metrics.technical_debt == 45
        assert "Found 1 TODO comment in the code" in metrics.issues
        assert "Function appears to be too long (120 lines, recommended: <50)" in metrics.issues

    def test_issue_counts_are_pluralized(self, scorer):
        metrics = scorer.analyze("// TODO a\n// todo b\n// FIXME c\nconsole.log(1);\nconsole.log(2);")

        assert metrics.issues == [
            "Found 2 TODO comments in the code",
            "Found 1 FIXME comment in the code",
            "Found 2 debug statements (console.log)",
        ]
        assert metrics.maintainability_score == 100 - 10 - 10 - 6
        assert metrics.technical_debt == 10 + 10

    def test_magic_numbers_above_threshold(self, scorer):
        three = scorer.analyze("a = 10; b = 20; c = 30;")
        four = scorer.analyze("a = 10; b = 20; c = 30; d = 40;")

        assert three.issues == []
        assert four.issues == ["Multiple magic numbers found (4) - consider using constants"]
        assert four.maintainability_score == 92

    def test_scores_are_clamped(self, scorer):
        code = "\n".join(["// TODO FIXME"] * 40)

        metrics = scorer.analyze(code)

        assert metrics.maintainability_score == 0
        assert metrics.technical_debt >= 0
        assert metrics.complexity_score >= 1

    def test_complexity_counts_branch_keywords(self, scorer):
        code = "if (a) {}\nfor (;;) {}\nwhile (b) {}\nswitch (c) {}\nelif(x)"

        assert scorer.analyze(code).complexity_score == 5

    def test_cached_result_is_copied(self, scorer):
        code = "// TODO"
        scorer.analyze(code).issues.append("tampered")

        assert scorer.analyze(code).issues == ["Found 1 TODO comment in the code"]
        assert len(scorer.cache) == 1


class TestGetQualityMetrics:
    def test_does_not_populate_cache(self, scorer):
        report = scorer.get_quality_metrics("// TODO")

        assert report.quality_score == 95
        assert report.issues == ["Found 1 TODO comment in the code"]
        assert len(scorer.cache) == 0

    def test_reuses_cached_score(self, scorer):
        code = "// FIXME"
        scorer.analyze(code)

        report = scorer.get_quality_metrics(code)

        assert report.quality_score == 90
        assert report.issues == ["Found 1 FIXME comment in the code"]

    def test_blank_input(self, scorer):
        report = scorer.get_quality_metrics(" ")

        assert report.quality_score == 100
        assert report.issues == []


class TestStructuredIssues:
    def test_issue_types(self, scorer):
        issues = scorer.find_issues(long_function() + "\nconsole.log(x);")

        assert [issue.type for issue in issues] == ["todo", "debug-statement", "long-function"]


@pytest.mark.parametrize(
    "line_count, expected",
    [
        (50, (0, 0)),
        (51, (15, 20)),
        (60, (20, 25)),
        (79, (25, 30)),
        (120, (30, 40)),
        (500, (30, 40)),
    ],
)
def test_long_function_penalty(line_count, expected):
    assert long_function_penalty(line_count) == expected
