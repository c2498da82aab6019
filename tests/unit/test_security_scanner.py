"""
Unit tests for SecurityScanner.
"""

from unittest.mock import patch

import pytest

from guardian.analysis.security_scanner import (
    SECURITY_ANALYSIS_ERROR,
    SecurityScanner,
    classify_vulnerability_severity,
    line_and_column,
)
from guardian.core.findings import HighlightSeverity, Severity


@pytest.fixture
def scanner() -> SecurityScanner:
    return SecurityScanner()


class TestAnalyze:
    def test_single_eval(self, scanner):
        findings = scanner.analyze("eval('x')")

        assert findings == [
            "[HIGH] Critical: Code injection vulnerability - Use of eval() (Found 1 occurrence)"
        ]

    def test_occurrences_are_pluralized(self, scanner):
        findings = scanner.analyze("eval(a);\neval(b);\nEVAL(c);")

        assert findings == [
            "[HIGH] Critical: Code injection vulnerability - Use of eval() (Found 3 occurrences)"
        ]

    @pytest.mark.parametrize("code", ["", "   ", "\n\t\n"])
    def test_blank_input_bypasses_cache(self, scanner, code):
        assert scanner.analyze(code) == []
        assert len(scanner.cache) == 0

    def test_findings_follow_rule_order(self, scanner):
        code = "\n".join(
            [
                "alert('hi');",
                "const url = 'http://example.com';",
                "eval(payload);",
            ]
        )

        findings = scanner.analyze(code)

        assert [f.split(" (Found")[0] for f in findings] == [
            "[HIGH] Critical: Code injection vulnerability - Use of eval()",
            "[MEDIUM] Medium: Insecure protocol - Use HTTPS instead of HTTP",
            "[LOW] Low: User interaction dialogs may be used for social engineering",
        ]

    def test_localhost_http_is_allowed(self, scanner):
        assert scanner.analyze("fetch('http://localhost:3000/api')") == []
        assert scanner.analyze("fetch('http://127.0.0.1/api')") == []

    def test_rules_are_case_insensitive(self, scanner):
        findings = scanner.analyze("Document.Write('<b>x</b>')")

        assert findings == ["[HIGH] High: XSS vulnerability - Use of document.write() (Found 1 occurrence)"]

    def test_word_boundary_treats_non_ascii_as_separator(self, scanner):
        assert scanner.analyze("x\u00e9eval(1)") == [
            "[HIGH] Critical: Code injection vulnerability - Use of eval() (Found 1 occurrence)"
        ]

    def test_case_folding_stays_ascii(self, scanner):
        # U+212A KELVIN SIGN folds to "k" under Unicode matching
        assert scanner.analyze("const \u212aey = 1; console.log(x);") == []

    def test_rules_match_across_lines(self, scanner):
        code = "const token = getToken();\nconsole.log(token);"

        assert scanner.analyze(code) == []

        same_line = "const token = getToken(); console.log(token);"
        assert scanner.analyze(same_line) == [
            "[HIGH] High: Information disclosure - Sensitive data logged to console (Found 1 occurrence)"
        ]

    def test_idempotent_and_cached(self, scanner):
        code = "new Function('return 1')"

        first = scanner.analyze(code)
        second = scanner.analyze(code)

        assert first == second
        assert len(scanner.cache) == 1

    def test_returned_list_is_a_copy(self, scanner):
        code = "eval(x)"
        scanner.analyze(code).append("tampered")

        assert scanner.analyze(code) == [
            "[HIGH] Critical: Code injection vulnerability - Use of eval() (Found 1 occurrence)"
        ]

    def test_failure_returns_sentinel_and_is_not_cached(self, scanner):
        with patch.object(scanner, "_evaluate", side_effect=RuntimeError("boom")):
            assert scanner.analyze("eval(x)") == [SECURITY_ANALYSIS_ERROR]

        assert len(scanner.cache) == 0
        assert scanner.analyze("eval(x)") != [SECURITY_ANALYSIS_ERROR]

    def test_failure_clears_last_records(self, scanner):
        scanner.analyze("eval(x)")
        assert len(scanner.get_vulnerability_records()) == 1

        with patch.object(scanner, "_evaluate", side_effect=RuntimeError("boom")):
            scanner.analyze("document.write(x)")

        assert scanner.get_vulnerability_records() == []


class TestStructuredFindings:
    def test_first_occurrence_location(self, scanner):
        code = "let a = 1;\n  document.write(a);\ndocument.write(b);"

        (vulnerability,) = scanner.find_vulnerabilities(code)

        assert vulnerability.type == "xss"
        assert vulnerability.severity == Severity.HIGH
        assert vulnerability.count == 2
        assert (vulnerability.line, vulnerability.column) == (1, 2)

    def test_last_analysis_is_exposed(self, scanner):
        scanner.analyze("eval(x); alert(1);")

        assert len(scanner.get_vulnerabilities()) == 2
        grouped = scanner.get_vulnerabilities_by_severity()
        assert len(grouped["high"]) == 1
        assert len(grouped["low"]) == 1
        assert grouped["critical"] == []

        scanner.analyze("")
        assert scanner.get_vulnerabilities() == []

    def test_clear_cache(self, scanner):
        scanner.analyze("eval(x)")
        scanner.clear_cache()

        assert len(scanner.cache) == 0


class TestClassifier:
    @pytest.mark.parametrize(
        "message, expected",
        [
            ("[HIGH] Critical: Code injection vulnerability - Use of eval()", HighlightSeverity.ERROR),
            ("[HIGH] High: XSS vulnerability - Use of document.write()", HighlightSeverity.ERROR),
            ("Private Key detected", HighlightSeverity.ERROR),
            ("[MEDIUM] Medium: Insecure protocol - Use HTTPS instead of HTTP", HighlightSeverity.WARNING),
            ("password printed via console.log", HighlightSeverity.WARNING),
            ("[LOW] Low: Potential jQuery injection if user input involved", HighlightSeverity.ERROR),
            ("[HIGH] High: Cryptographically weak random number generation", HighlightSeverity.INFO),
        ],
    )
    def test_keyword_classification(self, message, expected):
        assert classify_vulnerability_severity(message) == expected


def test_line_and_column():
    text = "ab\ncd\nef"

    assert line_and_column(text, 0) == (0, 0)
    assert line_and_column(text, 4) == (1, 1)
    assert line_and_column(text, 6) == (2, 0)
