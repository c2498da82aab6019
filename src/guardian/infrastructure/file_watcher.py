"""
File watcher infrastructure component.

Provides file system monitoring using the watchdog library with support for:
- File creation, modification, deletion, and move events
- Several workspace roots served by one observer
- An optional path filter supplied by the caller
"""

import logging
import threading
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from guardian.core.file_events import FileEvent, FileEventType

logger = logging.getLogger(__name__)

PathFilter = Callable[[Path], bool]


class FileWatcherInterface(Protocol):
    """Protocol for file watcher implementations."""

    def start(self, paths: Sequence[Path], callback: Callable[[FileEvent], None]) -> None:
        """
        Start watching the specified directories.

        Args:
            paths: Directory paths to watch recursively
            callback: Function to call when file events occur
        """
        ...

    def stop(self) -> None:
        """Stop watching and release resources."""
        ...

    def set_path_filter(self, path_filter: PathFilter | None) -> None:
        """Replace the path filter. Takes effect on the next start()."""
        with self._lock:
            self._path_filter = path_filter

    def is_running(self) -> bool:
        """Check if the watcher is currently running."""
        ...


class FileWatcher(FileWatcherInterface):
    """
    File system watcher implementation using watchdog.

    Emits FileEvent objects through a callback. The callback runs on the
    watchdog observer thread.
    """

    def __init__(self, path_filter: PathFilter | None = None):
        """
        Initialize the file watcher.

        Args:
            path_filter: Returns False for paths whose events should be dropped
        """
        self._path_filter = path_filter
        self._observer: Observer | None = None
        self._callback: Callable[[FileEvent], None] | None = None
        self._watch_paths: list[Path] = []
        self._lock = threading.Lock()

    def start(self, paths: Sequence[Path], callback: Callable[[FileEvent], None]) -> None:
        """
        Start watching the specified directories.

        Raises:
            ValueError: If a path doesn't exist or isn't a directory
            RuntimeError: If watcher is already running
        """
        with self._lock:
            if self._observer is not None and self._observer.is_alive():
                raise RuntimeError("File watcher is already running")

            resolved: list[Path] = []
            for path in paths:
                path = Path(path).resolve()
                if not path.exists():
                    raise ValueError(f"Path does not exist: {path}")
                if not path.is_dir():
                    raise ValueError(f"Path is not a directory: {path}")
                resolved.append(path)

            self._watch_paths = resolved
            self._callback = callback

            handler = _WatchdogEventHandler(callback=self._handle_event, path_filter=self._path_filter)

            self._observer = Observer()
            for path in resolved:
                self._observer.schedule(handler, str(path), recursive=True)
            self._observer.start()

            logger.info(f"Started watching {len(resolved)} path(s)", extra={"paths": [str(p) for p in resolved]})

    def stop(self) -> None:
        """Stop watching and release resources."""
        with self._lock:
            if self._observer is not None:
                self._observer.stop()
                self._observer.join(timeout=5.0)
                self._observer = None
                logger.info(f"Stopped watching: {', '.join(str(p) for p in self._watch_paths)}")
            self._callback = None
            self._watch_paths = []

    def is_running(self) -> bool:
        """Check if the watcher is currently running."""
        with self._lock:
            return self._observer is not None and self._observer.is_alive()

    @property
    def watch_paths(self) -> list[Path]:
        return list(self._watch_paths)

    def _handle_event(self, event: FileEvent) -> None:
        """Internal handler that forwards events to the callback."""
        if self._callback is not None:
            try:
                self._callback(event)
            except Exception as e:
                logger.error(f"Error in file event callback: {e}")


class _WatchdogEventHandler(FileSystemEventHandler):
    """
    Internal watchdog event handler.

    Converts watchdog events to FileEvent objects and applies filtering.
    Directory events are dropped.
    """

    def __init__(self, callback: Callable[[FileEvent], None], path_filter: PathFilter | None):
        super().__init__()
        self._callback = callback
        self._path_filter = path_filter

    def _accepts(self, path: Path) -> bool:
        if self._path_filter is None:
            return True
        if not self._path_filter(path):
            logger.debug(f"Ignoring event for: {path}")
            return False
        return True

    def _emit_event(
        self,
        event_type: FileEventType,
        file_path: Path,
        old_path: Path | None = None,
    ) -> None:
        event = FileEvent(event_type=event_type, file_path=file_path, old_path=old_path)
        logger.debug(f"Emitting event: {event_type.value} - {file_path}")
        self._callback(event)

    def on_created(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = Path(event.src_path)
        if self._accepts(path):
            self._emit_event(FileEventType.CREATED, path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = Path(event.src_path)
        if self._accepts(path):
            self._emit_event(FileEventType.MODIFIED, path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = Path(event.src_path)
        if self._accepts(path):
            self._emit_event(FileEventType.DELETED, path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return

        src_path = Path(event.src_path)
        dest_path = Path(event.dest_path)
        src_valid = self._accepts(src_path)
        dest_valid = self._accepts(dest_path)

        if dest_valid:
            self._emit_event(
                FileEventType.MOVED,
                dest_path,
                old_path=src_path if src_valid else None,
            )
        elif src_valid:
            # Moved out of scope
            self._emit_event(FileEventType.DELETED, src_path)
