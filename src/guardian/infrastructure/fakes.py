"""
Fake implementations for testing.

Provides in-memory stand-ins for infrastructure components so services can
be exercised without real file system monitoring.
"""

from collections.abc import Callable, Sequence
from pathlib import Path

from guardian.core.file_events import FileEvent


class FakeFileWatcher:
    """
    Fake file watcher for testing.

    Allows manual triggering of file events without actual file system monitoring.
    Implements the same interface as FileWatcher for use in tests.
    """

    def __init__(self, path_filter: Callable[[Path], bool] | None = None):
        """
        Initialize the fake file watcher.

        Args:
            path_filter: Applied to triggered events like the real watcher does
        """
        self._path_filter = path_filter
        self._callback: Callable[[FileEvent], None] | None = None
        self._watch_paths: list[Path] = []
        self._running = False
        self._events: list[FileEvent] = []

    def start(self, paths: Sequence[Path], callback: Callable[[FileEvent], None]) -> None:
        """
        Start the fake watcher.

        Args:
            paths: Directory paths to watch
            callback: Function to call when events are triggered
        """
        if self._running:
            raise RuntimeError("File watcher is already running")

        self._watch_paths = [Path(path).resolve() for path in paths]
        self._callback = callback
        self._running = True

    def stop(self) -> None:
        """Stop the fake watcher."""
        self._running = False
        self._callback = None
        self._watch_paths = []

    def is_running(self) -> bool:
        """Check if the fake watcher is running."""
        return self._running

    @property
    def watch_paths(self) -> list[Path]:
        return list(self._watch_paths)

    def trigger_event(self, event: FileEvent) -> None:
        """
        Manually trigger a file event.

        This is the main testing interface - allows tests to simulate
        file system events without actual file operations.

        Args:
            event: The FileEvent to trigger
        """
        if not self._running:
            raise RuntimeError("File watcher is not running")

        if self._path_filter is not None and not self._path_filter(event.file_path):
            return

        self._events.append(event)
        if self._callback is not None:
            self._callback(event)

    def get_triggered_events(self) -> list[FileEvent]:
        """Get all events that have been delivered."""
        return list(self._events)

    def clear_events(self) -> None:
        """Clear the record of delivered events."""
        self._events.clear()
