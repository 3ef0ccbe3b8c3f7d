"""
Staging area: pending additions and removals between commits.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from .storage import ObjectStore, STAGING_RECORD


@dataclass
class StagingArea:
    """
    Buffered changes for the next commit.

    ``adds`` holds the content captured when a file was added, so later
    edits to the working file do not leak into the commit. A path is never
    in ``adds`` and ``removes`` at the same time.
    """

    adds: Dict[str, bytes] = field(default_factory=dict)
    removes: Set[str] = field(default_factory=set)

    def is_empty(self) -> bool:
        return not self.adds and not self.removes

    def stage_add(
        self, path: str, content: bytes, tracked_blob: Optional[bytes] = None
    ) -> bool:
        """
        Record a snapshot of ``path``.

        Args:
            path: Repository-relative path
            content: File content at add time
            tracked_blob: Content of ``path`` in the HEAD commit, if tracked

        Returns:
            True if the path is now staged, False if the content matched the
            HEAD version and the path was dropped from both maps instead
        """
        self.removes.discard(path)
        if tracked_blob is not None and tracked_blob == content:
            self.adds.pop(path, None)
            return False
        self.adds[path] = content
        return True

    def unstage(self, path: str) -> bool:
        """Drop a pending addition; returns whether there was one."""
        return self.adds.pop(path, None) is not None

    def stage_remove(self, path: str) -> None:
        """Mark a tracked path for removal in the next commit."""
        self.adds.pop(path, None)
        self.removes.add(path)

    def clear(self) -> None:
        self.adds.clear()
        self.removes.clear()

    def to_dict(self) -> Dict[str, Any]:
        """Convert staging area to dictionary for serialization."""
        return {
            "adds": {
                path: base64.b64encode(content).decode("ascii")
                for path, content in sorted(self.adds.items())
            },
            "removes": sorted(self.removes),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StagingArea":
        """Create staging area from dictionary."""
        return cls(
            adds={
                path: base64.b64decode(encoded)
                for path, encoded in data.get("adds", {}).items()
            },
            removes=set(data.get("removes", [])),
        )

    @classmethod
    def load(cls, store: ObjectStore) -> "StagingArea":
        data = store.read_record(STAGING_RECORD)
        return cls.from_dict(data) if data else cls()

    def save(self, store: ObjectStore) -> None:
        store.write_record(STAGING_RECORD, self.to_dict())
