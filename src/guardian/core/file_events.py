"""
File event models for real-time scanning.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class FileEventType(Enum):
    """Types of file system events."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    MOVED = "moved"


@dataclass
class FileEvent:
    """
    Represents a single file system event.

    Attributes:
        event_type: Type of the file event (CREATED, MODIFIED, DELETED, MOVED)
        file_path: Path to the affected file (destination for MOVED events)
        old_path: Previous path for MOVED events, None otherwise
        timestamp: Unix timestamp when the event occurred
    """

    event_type: FileEventType
    file_path: Path
    old_path: Path | None = None
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if isinstance(self.file_path, str):
            self.file_path = Path(self.file_path)
        if isinstance(self.old_path, str):
            self.old_path = Path(self.old_path)

    @property
    def removed_paths(self) -> list[Path]:
        """Paths whose results become stale because of this event."""
        if self.event_type == FileEventType.DELETED:
            return [self.file_path]
        if self.event_type == FileEventType.MOVED and self.old_path is not None:
            return [self.old_path]
        return []

    @property
    def changed_paths(self) -> list[Path]:
        """Paths whose content must be re-scanned because of this event."""
        if self.event_type == FileEventType.DELETED:
            return []
        return [self.file_path]
