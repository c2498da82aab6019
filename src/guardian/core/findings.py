"""
Result types shared by the analyzers and the workspace scanner.

Findings are a closed set of tagged variants (Vulnerability, Secret,
QualityIssue, Suggestion). Each renders to the string form consumers
display and parse.
"""

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Union

_SEVERITY_TAG = re.compile(r"^\s*\[(LOW|MEDIUM|HIGH|CRITICAL)\]", re.IGNORECASE)


class Severity(str, Enum):
    """Risk level of a single finding."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _FINDING_RANKS[self]

    @classmethod
    def parse(cls, value: str | None) -> "Severity":
        """Parse a severity name, falling back to LOW for unknown values."""
        if value is None:
            return cls.LOW
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.LOW

    @classmethod
    def from_tag(cls, finding: str) -> "Severity | None":
        """
        Read the leading ``[SEVERITY]`` tag of a formatted finding.

        Returns:
            The tagged severity, or None if the string carries no tag
        """
        match = _SEVERITY_TAG.match(finding)
        if match is None:
            return None
        return cls(match.group(1).upper())


_FINDING_RANKS = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class FileSeverity(str, Enum):
    """Overall severity of a scanned file."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _FILE_RANKS[self]

    @classmethod
    def parse(cls, value: str | None) -> "FileSeverity":
        """Parse a severity name, falling back to low for unknown values."""
        if value is None:
            return cls.LOW
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.LOW


_FILE_RANKS = {
    FileSeverity.LOW: 0,
    FileSeverity.MEDIUM: 1,
    FileSeverity.HIGH: 2,
    FileSeverity.CRITICAL: 3,
}


class HighlightSeverity(str, Enum):
    """Display severity used for in-editor highlighting."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @classmethod
    def parse(cls, value: str | None) -> "HighlightSeverity":
        if value is None:
            return cls.INFO
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.INFO


def pluralize(count: int, word: str) -> str:
    """Return ``word`` with an ``s`` appended when count is above one."""
    return word + ("s" if count > 1 else "")


@dataclass(frozen=True)
class Vulnerability:
    """A security rule that matched at least once."""

    severity: Severity
    type: str
    message: str
    count: int = 1
    line: int | None = None
    column: int | None = None
    category: str | None = None
    cwe: str | None = None

    def format(self) -> str:
        """Render as ``[SEVERITY] message (Found N occurrence(s))``."""
        noun = pluralize(self.count, "occurrence")
        return f"[{self.severity.value}] {self.message} (Found {self.count} {noun})"


@dataclass(frozen=True)
class Secret:
    """A credential-shaped token. Only the masked value is retained."""

    severity: Severity
    type: str
    masked_value: str
    confidence: float
    line: int | None = None
    column: int | None = None

    def format(self) -> str:
        percent = f"{self.confidence * 100:.0f}"
        return f"[{self.severity.value}] {self.type}: {self.masked_value} (confidence: {percent}%)"


@dataclass(frozen=True)
class QualityIssue:
    """A maintainability problem found by the quality scorer."""

    type: str
    message: str
    severity: Severity = Severity.LOW

    def format(self) -> str:
        return self.message


@dataclass(frozen=True)
class Suggestion:
    """A static improvement suggestion."""

    message: str
    severity: Severity = Severity.LOW

    def format(self) -> str:
        return self.message


Finding = Union[Vulnerability, Secret, QualityIssue, Suggestion]


@dataclass
class QualityMetrics:
    """Maintainability metrics for a code sample."""

    maintainability_score: int = 100
    complexity_score: int = 1
    technical_debt: int = 0
    issues: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class QualityReport:
    """Quality score and issues returned by the secondary read path."""

    quality_score: int = 100
    issues: list[str] = field(default_factory=list)


@dataclass
class CodeAnalysis:
    """Result of the suggestion-path scorer."""

    complexity: int = 1
    maintainability: int = 100
    suggestions: list[str] = field(default_factory=list)


@dataclass
class ScanResult:
    """
    Analysis results for a single file.

    Attributes:
        file_path: Path of the scanned file
        vulnerabilities: Formatted security findings
        secrets: Formatted secret findings
        quality_issues: Quality issue messages
        severity: Overall file severity
    """

    file_path: str
    vulnerabilities: list[str] = field(default_factory=list)
    secrets: list[str] = field(default_factory=list)
    quality_issues: list[str] = field(default_factory=list)
    severity: FileSeverity = FileSeverity.LOW

    @property
    def has_issues(self) -> bool:
        return bool(self.vulnerabilities or self.secrets or self.quality_issues)

    @property
    def issue_count(self) -> int:
        return len(self.vulnerabilities) + len(self.secrets) + len(self.quality_issues)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON reporting."""
        return {
            "file_path": self.file_path,
            "vulnerabilities": list(self.vulnerabilities),
            "secrets": list(self.secrets),
            "quality_issues": list(self.quality_issues),
            "severity": self.severity.value,
        }


@dataclass
class RuleSetReport:
    """
    Result of a category-bucketed rule set (database, DevOps, full-stack).

    Attributes:
        vulnerabilities: One finding per matching rule, in rule order
        issues: ``message (Found N occurrence(s))`` texts keyed by bucket;
            every bucket of the analyzer is present, possibly empty
        severity: Highest vulnerability severity, ``low`` when none matched
        error: Set when the analysis itself failed
    """

    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    issues: dict[str, list[str]] = field(default_factory=dict)
    severity: FileSeverity = FileSeverity.LOW
    error: str | None = None

    @property
    def has_issues(self) -> bool:
        return bool(self.vulnerabilities)

    def copy(self) -> "RuleSetReport":
        return RuleSetReport(
            vulnerabilities=list(self.vulnerabilities),
            issues={bucket: list(items) for bucket, items in self.issues.items()},
            severity=self.severity,
            error=self.error,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "vulnerabilities": [
                {
                    "type": v.type,
                    "severity": v.severity.value,
                    "message": v.message,
                    "count": v.count,
                    "line": v.line,
                    "column": v.column,
                    "category": v.category,
                    "cwe": v.cwe,
                }
                for v in self.vulnerabilities
            ],
            "issues": {bucket: list(items) for bucket, items in self.issues.items()},
            "severity": self.severity.value,
            "error": self.error,
        }


def classify_file_severity(
    vulnerabilities: list[str],
    secrets: list[str],
    quality_issues: list[str],
) -> FileSeverity:
    """
    Derive the overall severity of a file from its findings.

    The highest ``[SEVERITY]`` tag among security and secret findings wins;
    a MEDIUM finding or any quality issue yields at least ``medium``.
    """
    tags = {Severity.from_tag(finding) for finding in [*vulnerabilities, *secrets]}

    if Severity.CRITICAL in tags:
        return FileSeverity.CRITICAL
    if Severity.HIGH in tags:
        return FileSeverity.HIGH
    if Severity.MEDIUM in tags or quality_issues:
        return FileSeverity.MEDIUM
    return FileSeverity.LOW


def group_by_severity(findings: list[str]) -> dict[str, list[str]]:
    """Bucket formatted findings by their ``[SEVERITY]`` tag."""
    groups: dict[str, list[str]] = {"critical": [], "high": [], "medium": [], "low": []}
    for finding in findings:
        severity = Severity.from_tag(finding)
        if severity is not None:
            groups[severity.value.lower()].append(finding)
    return groups
