"""
Workspace scanning data models.

Contains the scan options, the scanner state enum and sweep statistics.
"""

from dataclasses import dataclass, field
from enum import Enum

from guardian.core.file_scanner.models import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_MAX_FILE_SIZE


class ScanState(Enum):
    """Lifecycle state of a WorkspaceScanner."""

    IDLE = "idle"
    SCANNING = "scanning"
    SCANNING_FILE = "scanning_file"


@dataclass
class WorkspaceScanOptions:
    """
    Options controlling a workspace sweep.

    Attributes:
        include_patterns: Glob patterns a file must match; None includes every file
        exclude_patterns: Glob patterns to skip (files and directories)
        max_file_size: Files larger than this many bytes are skipped
        enable_real_time_scanning: Re-scan files when they change on disk
        scan_depth: Directory levels below each root to descend; None is unlimited
        max_workers: Files scanned concurrently per batch
    """

    include_patterns: list[str] | None = None
    exclude_patterns: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    enable_real_time_scanning: bool = False
    scan_depth: int | None = None
    max_workers: int = 3

    def __post_init__(self) -> None:
        if self.max_file_size < 0:
            raise ValueError(f"max_file_size must be non-negative, got {self.max_file_size}")
        if self.scan_depth is not None and self.scan_depth < 0:
            raise ValueError(f"scan_depth must be non-negative, got {self.scan_depth}")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")


@dataclass
class ScanSummary:
    """Statistics for the most recent workspace sweep."""

    total_files: int = 0
    scanned_files: int = 0
    skipped_files: int = 0
    failed_files: list[str] = field(default_factory=list)
    files_with_issues: int = 0
    duration_seconds: float = 0.0

    def to_dict(self) -> dict:
        """Serialize to dictionary for JSON reporting."""
        return {
            "total_files": self.total_files,
            "scanned_files": self.scanned_files,
            "skipped_files": self.skipped_files,
            "failed_files": list(self.failed_files),
            "files_with_issues": self.files_with_issues,
            "duration_seconds": self.duration_seconds,
        }
