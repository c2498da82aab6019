"""
Abstract interfaces for file scanning operations.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path

from .models import ScannedFile


class FileScannerInterface(ABC):
    """
    Abstract interface for workspace file discovery.

    Implementations walk a directory tree, honour include/exclude patterns,
    a size cutoff and a depth limit, and read eligible files.
    """

    @abstractmethod
    def discover(self, root_path: Path) -> Iterator[Path]:
        """
        Recursively walk a directory and yield eligible file paths.

        Args:
            root_path: Root directory to walk

        Yields:
            Absolute paths of files that pass every filter

        Notes:
            - Skips directories matching exclude patterns without descending
            - Skips files over the size cutoff
            - Logs errors and continues on inaccessible directories
        """
        pass

    @abstractmethod
    def matches_patterns(self, file_path: Path, root_path: Path) -> bool:
        """
        Check a path against the pattern and depth filters without touching disk.
        """
        pass

    @abstractmethod
    def is_eligible(self, file_path: Path, root_path: Path) -> bool:
        """
        Check a single path against the configured filters.

        Args:
            file_path: Path of the candidate file
            root_path: Workspace root the path belongs to

        Returns:
            True if the file would be yielded by ``discover``
        """
        pass

    @abstractmethod
    def read_file(self, file_path: Path) -> ScannedFile | None:
        """
        Read a file for analysis.

        Returns:
            ScannedFile, or None if the file is unreadable or oversized
        """
        pass

    @abstractmethod
    def scan(self, root_path: Path) -> Iterator[ScannedFile]:
        """Discover and read every eligible file under ``root_path``."""
        pass
