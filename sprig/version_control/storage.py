"""
Storage backend for version control system.

Content-addressed persistence of blobs and commits, plus the small state
records (pointers, staging area, remotes) kept next to them.
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from loguru import logger

from .errors import NotFoundError
from .objects import Commit, hash_bytes

FULL_ID_LENGTH = 40

POINTER_RECORD = "pointer"
STAGING_RECORD = "staging"
REMOTE_RECORD = "remote"


class ObjectStore:
    """
    File-based storage for version control.

    Stores objects and state in a directory structure:
    - .sprig/
      - blobs/
        - {sha1}  (raw file bytes)
      - commits/
        - {sha1}  (serialized commit)
      - pointer  (HEAD and branch table)
      - staging  (pending additions and removals)
      - remote   (remote name -> path)

    Blobs and commits are write-once: writing an object that already exists
    is a no-op.
    """

    def __init__(self, base_dir: Path):
        """
        Initialize storage.

        Args:
            base_dir: Metadata directory (e.g. ``<work_dir>/.sprig``)
        """
        self.base_dir = Path(base_dir)
        self.blobs_dir = self.base_dir / "blobs"
        self.commits_dir = self.base_dir / "commits"
        self._commit_cache: Dict[str, Commit] = {}

    def exists(self) -> bool:
        """Check whether the layout has been created."""
        return self.commits_dir.is_dir() and self.blobs_dir.is_dir()

    def create(self) -> None:
        """Create the directory layout."""
        self.blobs_dir.mkdir(parents=True, exist_ok=True)
        self.commits_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created object store at {self.base_dir}")

    # Blobs

    def put_blob(self, data: bytes) -> str:
        """
        Store file content.

        Args:
            data: Raw file bytes

        Returns:
            Content hash of the blob
        """
        blob_id = hash_bytes(data)
        blob_file = self.blobs_dir / blob_id
        if not blob_file.exists():
            blob_file.write_bytes(data)
            logger.trace(f"Wrote blob {blob_id[:8]} ({len(data)} bytes)")
        return blob_id

    def get_blob(self, blob_id: str) -> bytes:
        """
        Load file content by hash.

        Raises:
            NotFoundError: If no blob with that hash is stored
        """
        blob_file = self.blobs_dir / blob_id
        if not blob_file.is_file():
            raise NotFoundError(f"No blob with id {blob_id} exists.")
        return blob_file.read_bytes()

    def has_blob(self, blob_id: str) -> bool:
        return (self.blobs_dir / blob_id).is_file()

    # Commits

    def put_commit(self, commit: Commit) -> str:
        """
        Persist a finalized commit.

        Args:
            commit: Commit whose fields are all set

        Returns:
            Commit id (hash of its serialized form)
        """
        payload = commit.to_json()
        commit_id = hash_bytes(payload.encode("utf-8"))
        commit_file = self.commits_dir / commit_id
        if not commit_file.exists():
            commit_file.write_text(payload, encoding="utf-8")
            logger.debug(f"Wrote commit {commit_id[:8]}: {commit.message}")
        self._commit_cache[commit_id] = commit
        return commit_id

    def get_commit(self, commit_id: str) -> Commit:
        """
        Load a commit by its full id.

        Raises:
            NotFoundError: If no commit with that id is stored
        """
        cached = self._commit_cache.get(commit_id)
        if cached is not None:
            return cached

        commit_file = self.commits_dir / commit_id
        if not commit_id or not commit_file.is_file():
            raise NotFoundError("No commit with that id exists.")

        commit = Commit.from_json(commit_file.read_text(encoding="utf-8"))
        self._commit_cache[commit_id] = commit
        return commit

    def has_commit(self, commit_id: str) -> bool:
        return commit_id in self._commit_cache or (self.commits_dir / commit_id).is_file()

    def list_commits(self) -> List[str]:
        """
        List all commit IDs.

        Returns:
            Commit IDs in lexical order
        """
        return sorted(f.name for f in self.commits_dir.iterdir() if f.is_file())

    def iter_commits(self) -> Iterator[tuple]:
        """Yield ``(commit_id, commit)`` for every stored commit."""
        for commit_id in self.list_commits():
            yield commit_id, self.get_commit(commit_id)

    def resolve_commit_id(self, ref: str) -> str:
        """
        Resolve a full or abbreviated commit id.

        Abbreviations are matched against all stored ids in lexical order
        and the first match wins; ambiguous prefixes are not an error.

        Raises:
            NotFoundError: If nothing matches
        """
        if len(ref) >= FULL_ID_LENGTH:
            if self.has_commit(ref):
                return ref
            raise NotFoundError("No commit with that id exists.")

        if ref:
            for commit_id in self.list_commits():
                if commit_id.startswith(ref):
                    return commit_id
        raise NotFoundError("No commit with that id exists.")

    # State records

    def read_record(self, name: str) -> Optional[Dict[str, Any]]:
        """
        Load a JSON state record.

        Returns:
            Parsed record, or None if it has never been written
        """
        record_file = self.base_dir / name
        if not record_file.exists():
            return None
        return json.loads(record_file.read_text(encoding="utf-8"))

    def write_record(self, name: str, data: Dict[str, Any]) -> None:
        """Atomically replace a JSON state record."""
        with self._atomic_write(self.base_dir / name) as f:
            f.write(json.dumps(data, indent=2, sort_keys=True))

    @contextmanager
    def _atomic_write(self, filepath: Path):
        """
        Context manager for atomic file replacement.

        Writes to a temporary file in the same directory, then renames it
        over the target.

        Args:
            filepath: Target file path

        Yields:
            File object for writing
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )

        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                yield f

            os.replace(temp_path, filepath)

        except Exception:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise
