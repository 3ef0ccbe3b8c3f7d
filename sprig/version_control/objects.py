"""
Object model for version control.

Defines the immutable commit record and the hashing contract shared by
blobs and commits.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import hashlib
import json

ROOT_MESSAGE = "initial commit"
ROOT_TIMESTAMP = datetime(1970, 1, 1, tzinfo=timezone.utc).isoformat()


def hash_bytes(data: bytes) -> str:
    """Compute the content hash used for blob and commit identity."""
    return hashlib.sha1(data).hexdigest()


def now_timestamp() -> str:
    """Current time as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class Commit:
    """
    Immutable snapshot of the tracked files.

    The manifest maps every tracked repository-relative path to the hash of
    its blob; it is a full snapshot, not a delta. For non-merge commits
    ``parent2`` equals ``parent1``; the root commit has neither.

    The id is derived from the serialized fields, so a commit is built
    once with all of its fields known and never changed afterwards.

    Attributes:
        message: Commit message
        timestamp: ISO-8601 creation time
        parent1: First parent commit id (None for the root)
        parent2: Second parent commit id (the merged-in tip for merges)
        manifest: Path -> blob hash
    """

    message: str
    timestamp: str
    parent1: Optional[str] = None
    parent2: Optional[str] = None
    manifest: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert commit to dictionary for serialization."""
        return {
            "timestamp": self.timestamp,
            "message": self.message,
            "parent1": self.parent1,
            "parent2": self.parent2,
            "manifest": dict(sorted(self.manifest.items())),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Commit":
        """Create commit from dictionary."""
        return cls(
            message=data["message"],
            timestamp=data["timestamp"],
            parent1=data.get("parent1"),
            parent2=data.get("parent2"),
            manifest=dict(data.get("manifest", {})),
        )

    def to_json(self) -> str:
        """Canonical JSON form; the commit id is the hash of these bytes."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)

    @classmethod
    def from_json(cls, json_str: str) -> "Commit":
        """Create commit from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def compute_hash(self) -> str:
        """Compute the commit id."""
        return hash_bytes(self.to_json().encode("utf-8"))

    @property
    def commit_id(self) -> str:
        return self.compute_hash()

    @property
    def created_at(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    def parents(self) -> list:
        """Distinct parent ids, first parent first."""
        result = []
        for parent in (self.parent1, self.parent2):
            if parent is not None and parent not in result:
                result.append(parent)
        return result


def create_root_commit() -> Commit:
    """
    Build the root commit.

    Fixed message and epoch timestamp, so every repository starts from the
    same root id.
    """
    return Commit(message=ROOT_MESSAGE, timestamp=ROOT_TIMESTAMP)
