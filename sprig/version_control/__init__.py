"""
Version control engine for sprig.

Content-addressed object store, commit graph, staging area and three-way
merge of whole files.
"""

from .errors import (
    VersionControlError,
    NotFoundError,
    ValidationError,
    NoOpError,
    ConflictError,
)

from .objects import (
    Commit,
    create_root_commit,
    hash_bytes,
)

from .storage import ObjectStore

from .graph import CommitGraph, reachable

from .staging import StagingArea

from .working_tree import WorkingTree

from .merge import (
    MergeAction,
    MergeEngine,
    MergeOutcome,
    MergeResult,
    conflict_content,
    plan_merge,
    resolve_path,
)

from .repository import Repository, StatusReport

from .remote import RemoteManager, copy_missing

from .formatting import format_commit, format_log, format_status

__all__ = [
    # Errors
    "VersionControlError",
    "NotFoundError",
    "ValidationError",
    "NoOpError",
    "ConflictError",
    # Objects
    "Commit",
    "create_root_commit",
    "hash_bytes",
    # Storage
    "ObjectStore",
    # Graph
    "CommitGraph",
    "reachable",
    # Staging
    "StagingArea",
    "WorkingTree",
    # Merge
    "MergeAction",
    "MergeEngine",
    "MergeOutcome",
    "MergeResult",
    "conflict_content",
    "plan_merge",
    "resolve_path",
    # Repository
    "Repository",
    "StatusReport",
    "RemoteManager",
    "copy_missing",
    # Formatting
    "format_commit",
    "format_log",
    "format_status",
]
