"""
FileScanner implementation for workspace discovery.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator

from guardian.core.fingerprint import fingerprint

from .interfaces import FileScannerInterface
from .models import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_MAX_FILE_SIZE, ScannedFile
from .patterns import PathMatcher

logger = logging.getLogger(__name__)


class FileScanner(FileScannerInterface):
    """
    Concrete implementation of FileScannerInterface.

    Provides recursive directory walking with:
    - Include/exclude glob filtering (gitignore syntax with brace expansion)
    - A maximum file size cutoff
    - An optional depth limit (0 = files directly under the root)
    - Graceful error handling for unreadable files
    """

    def __init__(
        self,
        include_patterns: Iterable[str] | None = None,
        exclude_patterns: Iterable[str] | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        scan_depth: int | None = None,
        follow_symlinks: bool = False,
    ):
        """
        Initialize the FileScanner.

        Args:
            include_patterns: Patterns a file must match. None or empty includes all files.
            exclude_patterns: Patterns to skip. None uses DEFAULT_EXCLUDE_PATTERNS.
            max_file_size: Files larger than this many bytes are skipped.
            scan_depth: Directory levels to descend below the root. None is unlimited.
            follow_symlinks: Whether to follow symlinks (default: False).
        """
        self._include_patterns = list(include_patterns) if include_patterns else None
        self._exclude_patterns = (
            list(exclude_patterns)
            if exclude_patterns is not None
            else list(DEFAULT_EXCLUDE_PATTERNS)
        )
        self._max_file_size = max_file_size
        self._scan_depth = scan_depth
        self._follow_symlinks = follow_symlinks
        self._matcher = PathMatcher(self._include_patterns, self._exclude_patterns)

    @property
    def max_file_size(self) -> int:
        return self._max_file_size

    @property
    def scan_depth(self) -> int | None:
        return self._scan_depth

    def set_include_patterns(self, patterns: list[str] | None) -> None:
        """Replace the include patterns."""
        self._include_patterns = list(patterns) if patterns else None
        self._matcher = PathMatcher(self._include_patterns, self._exclude_patterns)

    def set_exclude_patterns(self, patterns: list[str]) -> None:
        """Replace the exclude patterns."""
        self._exclude_patterns = list(patterns)
        self._matcher = PathMatcher(self._include_patterns, self._exclude_patterns)

    def _within_depth(self, depth: int) -> bool:
        return self._scan_depth is None or depth <= self._scan_depth

    def _within_size(self, file_path: Path) -> bool:
        try:
            size_bytes = file_path.stat().st_size
        except OSError as e:
            logger.debug(f"Cannot stat file: {file_path} - {e}")
            return False

        if size_bytes > self._max_file_size:
            logger.debug(f"Skipping large file ({size_bytes} bytes): {file_path}")
            return False
        return True

    def discover(self, root_path: Path) -> Iterator[Path]:
        """
        Recursively walk a directory and yield eligible file paths.

        Args:
            root_path: Root directory to walk

        Yields:
            Absolute file paths, directories first then files, sorted by name
        """
        root_path = Path(root_path).resolve()

        if not root_path.exists():
            logger.error(f"Root path does not exist: {root_path}")
            return

        if not root_path.is_dir():
            logger.error(f"Root path is not a directory: {root_path}")
            return

        yield from self._walk(root_path, root_path, depth=0, visited=set())

    def _walk(
        self, root_path: Path, current_path: Path, depth: int, visited: set[Path]
    ) -> Iterator[Path]:
        try:
            real_path = current_path.resolve()
            if real_path in visited:
                logger.debug(f"Skipping recursive cycle: {current_path} -> {real_path}")
                return
            visited.add(real_path)

            entries = sorted(current_path.iterdir(), key=lambda p: (not p.is_dir(), p.name))
        except PermissionError as e:
            logger.warning(f"Permission denied accessing directory: {current_path} - {e}")
            return
        except OSError as e:
            logger.warning(f"Error accessing directory: {current_path} - {e}")
            return

        for entry in entries:
            if entry.is_symlink() and not self._follow_symlinks:
                logger.debug(f"Skipping symlink (follow_symlinks=False): {entry}")
                continue

            rel_path = entry.relative_to(root_path).as_posix()

            if entry.is_dir():
                if not self._within_depth(depth + 1):
                    continue
                if self._matcher.is_excluded(rel_path, is_dir=True):
                    logger.debug(f"Ignoring directory: {entry}")
                    continue
                yield from self._walk(root_path, entry, depth + 1, visited)
            elif entry.is_file():
                if self._matcher.is_excluded(rel_path) or not self._matcher.is_included(rel_path):
                    continue
                if self._within_size(entry):
                    yield entry

        visited.remove(real_path)

    def matches_patterns(self, file_path: Path, root_path: Path) -> bool:
        """
        Check a path against the include, exclude and depth filters only.

        Works for paths that no longer exist, such as deleted files.
        """
        try:
            relative = Path(file_path).resolve().relative_to(Path(root_path).resolve())
        except ValueError:
            return False

        if not relative.parts:
            return False
        if not self._within_depth(len(relative.parts) - 1):
            return False
        return self._matcher.matches_file(relative.as_posix())

    def is_eligible(self, file_path: Path, root_path: Path) -> bool:
        """Check a single path against the include, exclude, depth and size filters."""
        if not self.matches_patterns(file_path, root_path):
            return False
        return Path(file_path).is_file() and self._within_size(Path(file_path))

    def read_file(self, file_path: Path) -> ScannedFile | None:
        """
        Read a single file and return its ScannedFile representation.

        Args:
            file_path: Path to the file to read

        Returns:
            ScannedFile object or None if the file is oversized or couldn't be read
        """
        try:
            stat = file_path.stat()
            size_bytes = stat.st_size

            if size_bytes > self._max_file_size:
                logger.debug(f"Skipping large file ({size_bytes} bytes): {file_path}")
                return None

            content = file_path.read_text(encoding="utf-8")

            return ScannedFile(
                path=file_path.resolve(),
                content=content,
                size_bytes=size_bytes,
                modified_time=stat.st_mtime,
                fingerprint=fingerprint(content),
            )
        except UnicodeDecodeError as e:
            logger.warning(f"Failed to decode file as UTF-8: {file_path} - {e}")
            return None
        except PermissionError as e:
            logger.warning(f"Permission denied reading file: {file_path} - {e}")
            return None
        except OSError as e:
            logger.warning(f"Error reading file: {file_path} - {e}")
            return None

    def scan(self, root_path: Path) -> Iterator[ScannedFile]:
        """Discover and read every eligible file under ``root_path``."""
        for file_path in self.discover(root_path):
            scanned = self.read_file(file_path)
            if scanned is not None:
                yield scanned
