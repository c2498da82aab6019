"""
Infrastructure Layer - File system watching.
"""

from guardian.infrastructure.fakes import FakeFileWatcher
from guardian.infrastructure.file_watcher import (
    FileWatcher,
    FileWatcherInterface,
)

__all__ = [
    # File watching
    "FileWatcher",
    "FileWatcherInterface",
    # Fakes for testing
    "FakeFileWatcher",
]
