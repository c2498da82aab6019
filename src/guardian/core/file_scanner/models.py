"""
Data models and constants for the file scanner module.
"""

from dataclasses import dataclass
from pathlib import Path

# Default cutoff for files handed to the analyzers (512 KiB)
DEFAULT_MAX_FILE_SIZE = 512 * 1024

# Build output and dependency folders skipped unless the caller overrides them
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "node_modules/",
    "dist/",
    "build/",
    "vendor/",
    ".git/",
    "*.min.js",
)


@dataclass
class ScannedFile:
    """
    Represents a scanned file with its metadata and content.

    Attributes:
        path: Absolute path to the file
        content: File content as UTF-8 string
        size_bytes: File size in bytes
        modified_time: File modification timestamp (Unix epoch)
        fingerprint: Content fingerprint used by the analysis caches
    """

    path: Path
    content: str
    size_bytes: int
    modified_time: float
    fingerprint: int

    @property
    def is_blank(self) -> bool:
        return not self.content.strip()
