"""
Diagnostics produced from scan results.

A diagnostic is the consumer-facing form of one finding: a message with a
severity, a stable code and a location in the file.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, Sequence

from guardian.analysis.highlighter import HighlightInfo, LineHighlighter
from guardian.core.findings import FileSeverity, ScanResult, Secret, Vulnerability

logger = logging.getLogger(__name__)

DIAGNOSTIC_SOURCE = "Guardian Security"


class DiagnosticSeverity(str, Enum):
    """Severity levels understood by diagnostic consumers."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"

    @classmethod
    def from_file_severity(cls, severity: FileSeverity) -> "DiagnosticSeverity":
        if severity in (FileSeverity.CRITICAL, FileSeverity.HIGH):
            return cls.ERROR
        if severity == FileSeverity.MEDIUM:
            return cls.WARNING
        return cls.INFORMATION


@dataclass(frozen=True)
class Diagnostic:
    """
    A single published finding.

    Attributes:
        file_path: File the finding belongs to
        message: Finding text
        severity: Display severity
        code: ``security-N``, ``secret-N`` or ``quality-N``
        line: 0-based line of the first located match, else 0
        column: 0-based column of the first located match, else 0
        source: Producer name shown by consumers
    """

    file_path: str
    message: str
    severity: DiagnosticSeverity
    code: str
    line: int = 0
    column: int = 0
    source: str = DIAGNOSTIC_SOURCE

    def to_dict(self) -> dict:
        return {
            "file_path": self.file_path,
            "message": self.message,
            "severity": self.severity.value,
            "code": self.code,
            "line": self.line,
            "column": self.column,
            "source": self.source,
        }


class DiagnosticsPublisher(Protocol):
    """Protocol for diagnostic sinks."""

    def publish(self, file_path: str, diagnostics: list[Diagnostic]) -> None:
        """Replace the diagnostics of ``file_path``."""
        ...

    def clear(self, file_path: str) -> None:
        """Remove the diagnostics of ``file_path``."""
        ...

    def clear_all(self) -> None:
        """Remove every diagnostic."""
        ...

    def get(self, file_path: str) -> list[Diagnostic]:
        """Get the diagnostics currently published for ``file_path``."""
        ...


class InMemoryDiagnosticsPublisher:
    """Diagnostics publisher that keeps everything in a dictionary."""

    def __init__(self) -> None:
        self._diagnostics: dict[str, list[Diagnostic]] = {}
        self._lock = threading.Lock()

    def publish(self, file_path: str, diagnostics: list[Diagnostic]) -> None:
        with self._lock:
            self._diagnostics[file_path] = list(diagnostics)
        logger.debug(f"Published {len(diagnostics)} diagnostic(s) for {file_path}")

    def clear(self, file_path: str) -> None:
        with self._lock:
            self._diagnostics.pop(file_path, None)

    def clear_all(self) -> None:
        with self._lock:
            self._diagnostics.clear()

    def get(self, file_path: str) -> list[Diagnostic]:
        with self._lock:
            return list(self._diagnostics.get(file_path, []))

    def get_all(self) -> dict[str, list[Diagnostic]]:
        with self._lock:
            return {path: list(items) for path, items in self._diagnostics.items()}


def _location(highlights: list[HighlightInfo]) -> tuple[int, int]:
    if not highlights:
        return 0, 0
    return highlights[0].line, highlights[0].column


def _record_location(
    records: Sequence[Vulnerability | Secret], index: int, message: str
) -> tuple[int, int] | None:
    if index >= len(records):
        return None
    record = records[index]
    if record.line is None or record.format() != message:
        return None
    return record.line, record.column or 0


def build_diagnostics(
    result: ScanResult,
    text: str,
    highlighter: LineHighlighter,
    vulnerability_records: Sequence[Vulnerability] = (),
    secret_records: Sequence[Secret] = (),
) -> list[Diagnostic]:
    """
    Convert a scan result into diagnostics.

    Vulnerabilities take the severity of the whole file; secrets are
    warnings and quality issues are informational.

    Args:
        result: The file's scan result
        text: Content the result was computed from, used to locate findings
        highlighter: Locates findings within ``text`` that have no record
        vulnerability_records: Structured findings behind
            ``result.vulnerabilities``, index for index
        secret_records: Structured findings behind ``result.secrets``

    Returns:
        Diagnostics in the order vulnerabilities, secrets, quality issues
    """
    diagnostics: list[Diagnostic] = []
    vulnerability_severity = DiagnosticSeverity.from_file_severity(result.severity)

    for index, vulnerability in enumerate(result.vulnerabilities):
        location = _record_location(vulnerability_records, index, vulnerability)
        if location is None:
            location = _location(highlighter.highlight_security_issues(text, [vulnerability]))
        line, column = location
        diagnostics.append(
            Diagnostic(
                file_path=result.file_path,
                message=vulnerability,
                severity=vulnerability_severity,
                code=f"security-{index}",
                line=line,
                column=column,
            )
        )

    for index, secret in enumerate(result.secrets):
        location = _record_location(secret_records, index, secret)
        if location is None:
            location = _location(highlighter.highlight_secrets(text, [secret]))
        line, column = location
        diagnostics.append(
            Diagnostic(
                file_path=result.file_path,
                message=secret,
                severity=DiagnosticSeverity.WARNING,
                code=f"secret-{index}",
                line=line,
                column=column,
            )
        )

    for index, issue in enumerate(result.quality_issues):
        line, column = _location(highlighter.highlight_quality_issues(text, [issue]))
        diagnostics.append(
            Diagnostic(
                file_path=result.file_path,
                message=issue,
                severity=DiagnosticSeverity.INFORMATION,
                code=f"quality-{index}",
                line=line,
                column=column,
            )
        )

    return diagnostics
