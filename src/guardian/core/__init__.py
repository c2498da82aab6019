"""
Core Layer - Fingerprinting, caching, result types, configuration and file discovery.
"""

from guardian.core.config import (
    AnalysisConfig,
    GuardianConfig,
    LoggingConfig,
    ScanConfig,
    WatchConfig,
    load_config,
)
from guardian.core.debouncer import Debouncer
from guardian.core.file_events import FileEvent, FileEventType
from guardian.core.file_scanner import (
    FileScanner,
    FileScannerInterface,
    PathMatcher,
    ScannedFile,
)
from guardian.core.findings import (
    CodeAnalysis,
    FileSeverity,
    Finding,
    HighlightSeverity,
    QualityIssue,
    QualityMetrics,
    QualityReport,
    RuleSetReport,
    ScanResult,
    Secret,
    Severity,
    Suggestion,
    Vulnerability,
    classify_file_severity,
)
from guardian.core.fingerprint import fingerprint
from guardian.core.hash_cache import HashCache

__all__ = [
    # Config
    "GuardianConfig",
    "ScanConfig",
    "AnalysisConfig",
    "WatchConfig",
    "LoggingConfig",
    "load_config",
    # Caching
    "fingerprint",
    "HashCache",
    # Findings
    "Severity",
    "FileSeverity",
    "HighlightSeverity",
    "Vulnerability",
    "Secret",
    "QualityIssue",
    "Suggestion",
    "Finding",
    "QualityMetrics",
    "QualityReport",
    "RuleSetReport",
    "CodeAnalysis",
    "ScanResult",
    "classify_file_severity",
    # File discovery and events
    "FileScanner",
    "FileScannerInterface",
    "PathMatcher",
    "ScannedFile",
    "FileEvent",
    "FileEventType",
    "Debouncer",
]
