"""
Locates reported findings inside source text.

Findings are plain strings, so locating them is a second, line-oriented
regex pass: a line pattern applies to a finding when one of its keywords
appears in the finding text.
"""

import logging
import re
import threading
from dataclasses import dataclass

from guardian.analysis.security_scanner import classify_vulnerability_severity
from guardian.core.findings import HighlightSeverity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighlightInfo:
    """
    A located finding.

    Attributes:
        line: 0-based line index
        column: 0-based column of the match start
        length: Length of the matched text
        message: The finding text being highlighted
        severity: Display severity
        type: One of ``security``, ``secret`` or ``quality``
    """

    line: int
    column: int
    length: int
    message: str
    severity: HighlightSeverity
    type: str


def _ci(regex: str) -> re.Pattern:
    return re.compile(regex, re.IGNORECASE | re.ASCII)


@dataclass(frozen=True)
class _LinePattern:
    pattern: re.Pattern
    keywords: tuple[str, ...]

    def applies_to(self, finding: str) -> bool:
        lowered = finding.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


SECURITY_LINE_PATTERNS: tuple[_LinePattern, ...] = (
    _LinePattern(_ci(r"eval\s*\("), ("eval", "injection")),
    _LinePattern(_ci(r"innerHTML\s*="), ("innerHTML", "XSS")),
    _LinePattern(_ci(r"document\.write\s*\("), ("document.write", "XSS")),
    _LinePattern(_ci(r"""setTimeout\s*\(\s*["']"""), ("setTimeout", "injection")),
    _LinePattern(_ci(r"http://"), ("http://", "insecure")),
    _LinePattern(_ci(r"password.*console\.log"), ("password", "console.log")),
    _LinePattern(_ci(r"\.innerHTML\s*\+="), ("innerHTML", "XSS")),
    _LinePattern(_ci(r"dangerouslySetInnerHTML"), ("dangerouslySetInnerHTML", "XSS")),
)

SECRET_LINE_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"AKIA[0-9A-Z]{16}", re.ASCII),
    re.compile(r"ghp_[a-zA-Z0-9]{36}", re.ASCII),
    re.compile(r"""[aA][pP][iI][_]?[kK][eE][yY]['"]\s*[:=]\s*['"][a-zA-Z0-9]{20,}['"]""", re.ASCII),
    re.compile(r"""[pP][aA][sS][sS][wW][oO][rR][dD]['"]\s*[:=]\s*['"][^'"]{8,}['"]""", re.ASCII),
    re.compile(r"eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", re.ASCII),
    re.compile(r"-----BEGIN\s+(RSA\s+)?PRIVATE\s+KEY-----", re.ASCII),
    re.compile(r"""(mongodb|mysql|postgresql)://[^\s'"]+""", re.ASCII),
)

QUALITY_LINE_PATTERNS: tuple[_LinePattern, ...] = (
    _LinePattern(_ci(r"TODO"), ("TODO",)),
    _LinePattern(_ci(r"FIXME"), ("FIXME",)),
    _LinePattern(_ci(r"console\.log"), ("console.log", "debug")),
    _LinePattern(re.compile(r"\b\d{2,}\b", re.ASCII), ("magic", "numbers")),
)

_SECRET_DESCRIPTION = re.compile(r":\s*(.+?)\s*\(")


def _extract_secret_value(secret: str) -> str | None:
    """Pull the masked value out of a formatted secret finding."""
    match = _SECRET_DESCRIPTION.search(secret)
    return match.group(1) if match else None


class LineHighlighter:
    """
    Maps findings to line/column ranges and keeps them per file path.
    """

    def __init__(self) -> None:
        self._highlights: dict[str, list[HighlightInfo]] = {}
        self._lock = threading.Lock()

    def highlight_security_issues(self, text: str, vulnerabilities: list[str]) -> list[HighlightInfo]:
        lines = text.split("\n")
        highlights: list[HighlightInfo] = []

        for vulnerability in vulnerabilities:
            severity = classify_vulnerability_severity(vulnerability)
            patterns = [p for p in SECURITY_LINE_PATTERNS if p.applies_to(vulnerability)]
            for line_index, line in enumerate(lines):
                for line_pattern in patterns:
                    for match in line_pattern.pattern.finditer(line):
                        highlights.append(
                            HighlightInfo(
                                line=line_index,
                                column=match.start(),
                                length=len(match.group(0)),
                                message=vulnerability,
                                severity=severity,
                                type="security",
                            )
                        )
        return highlights

    def highlight_secrets(self, text: str, secrets: list[str]) -> list[HighlightInfo]:
        """
        Locate secret findings.

        Findings whose description cannot be parsed are skipped.
        """
        lines = text.split("\n")
        highlights: list[HighlightInfo] = []

        for secret in secrets:
            if _extract_secret_value(secret) is None:
                logger.debug(f"Skipping unparseable secret finding: {secret}")
                continue
            for line_index, line in enumerate(lines):
                for pattern in SECRET_LINE_PATTERNS:
                    for match in pattern.finditer(line):
                        highlights.append(
                            HighlightInfo(
                                line=line_index,
                                column=match.start(),
                                length=len(match.group(0)),
                                message=secret,
                                severity=HighlightSeverity.WARNING,
                                type="secret",
                            )
                        )
        return highlights

    def highlight_quality_issues(self, text: str, issues: list[str]) -> list[HighlightInfo]:
        lines = text.split("\n")
        highlights: list[HighlightInfo] = []

        for issue in issues:
            patterns = [p for p in QUALITY_LINE_PATTERNS if p.applies_to(issue)]
            for line_index, line in enumerate(lines):
                for line_pattern in patterns:
                    for match in line_pattern.pattern.finditer(line):
                        highlights.append(
                            HighlightInfo(
                                line=line_index,
                                column=match.start(),
                                length=len(match.group(0)),
                                message=issue,
                                severity=HighlightSeverity.INFO,
                                type="quality",
                            )
                        )
        return highlights

    def set_highlights(self, file_path: str, highlights: list[HighlightInfo]) -> None:
        with self._lock:
            self._highlights[file_path] = list(highlights)

    def get_highlights(self, file_path: str) -> list[HighlightInfo]:
        with self._lock:
            return list(self._highlights.get(file_path, []))

    def clear_highlights(self, file_path: str) -> None:
        with self._lock:
            self._highlights.pop(file_path, None)

    def clear_all(self) -> None:
        with self._lock:
            self._highlights.clear()
