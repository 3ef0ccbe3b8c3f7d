"""
Repository session for sprig.

Provides the git-like operations over one working directory: staging,
committing, branching, checkout, reset and merge.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from loguru import logger

from sprig.config import RepositoryConfig, config
from sprig.logging import track_operation

from .errors import ConflictError, NoOpError, NotFoundError, ValidationError
from .graph import CommitGraph
from .merge import MergeEngine, MergeResult
from .objects import Commit, create_root_commit, hash_bytes
from .staging import StagingArea
from .storage import ObjectStore
from .working_tree import WorkingTree

UNTRACKED_IN_THE_WAY = (
    "There is an untracked file in the way; delete it, or add and commit it first."
)


@dataclass
class StatusReport:
    """Snapshot of branch, staging and working-directory state."""

    branches: List[str]
    current_branch: str
    staged: List[str]
    removed: List[str]
    modified: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    untracked: List[str] = field(default_factory=list)


class Repository:
    """
    One repository session: object store, commit graph, staging area and
    working directory.

    State is read when the session is opened and written back at the end of
    every mutating operation. Preconditions and safety scans run before any
    file, pointer or staging change.

    Example:
        >>> repo = Repository.init(Path("."))
        >>> repo.add("notes.txt")
        >>> repo.commit("Add notes")
    """

    def __init__(self, work_dir: Path, repo_config: Optional[RepositoryConfig] = None):
        """
        Open an existing repository.

        Args:
            work_dir: Working directory root
            repo_config: Repository settings (default: global config)

        Raises:
            NotFoundError: If ``work_dir`` holds no repository
        """
        self.config = repo_config or config.repository
        self.work_dir = Path(work_dir)
        self.store = ObjectStore(self.work_dir / self.config.metadata_dir)
        if not self.store.exists():
            raise NotFoundError("Not in an initialized sprig directory.")
        self.tree = WorkingTree(self.work_dir, self.config.metadata_dir)
        self.graph = CommitGraph.load(self.store)
        self.staging = StagingArea.load(self.store)

    @classmethod
    def init(
        cls, work_dir: Path, repo_config: Optional[RepositoryConfig] = None
    ) -> "Repository":
        """
        Create a repository with the root commit on the default branch.

        Raises:
            ConflictError: If a repository already exists in ``work_dir``
        """
        repo_config = repo_config or config.repository
        store = ObjectStore(Path(work_dir) / repo_config.metadata_dir)
        if store.exists():
            raise ConflictError(
                "A sprig version-control system already exists in the current directory."
            )
        store.create()
        root_id = store.put_commit(create_root_commit())
        CommitGraph(store, repo_config.default_branch, root_id).save()
        StagingArea().save(store)
        logger.info(f"Initialized repository in {store.base_dir}")
        return cls(work_dir, repo_config)

    @classmethod
    def is_repository(cls, work_dir: Path, repo_config: Optional[RepositoryConfig] = None) -> bool:
        repo_config = repo_config or config.repository
        return ObjectStore(Path(work_dir) / repo_config.metadata_dir).exists()

    def _save(self) -> None:
        self.graph.save()
        self.staging.save(self.store)

    # Tracking

    @property
    def head(self) -> Commit:
        return self.graph.head

    def tracked_blob(self, path: str) -> Optional[bytes]:
        """Content of ``path`` in the HEAD commit, or None if untracked there."""
        blob_id = self.head.manifest.get(path)
        return self.store.get_blob(blob_id) if blob_id is not None else None

    def is_tracked(self, path: str) -> bool:
        return path in self.head.manifest or path in self.staging.adds

    # Staging

    @track_operation("add")
    def add(self, path: str) -> bool:
        """
        Stage the current content of a working file.

        Returns:
            True if staged, False if it matches HEAD and was left unstaged

        Raises:
            NotFoundError: If the file does not exist
            ValidationError: If the path is outside the working directory
        """
        path = self.tree.normalize(path)
        if not self.tree.exists(path):
            raise NotFoundError("File does not exist.")
        staged = self.staging.stage_add(path, self.tree.read(path), self.tracked_blob(path))
        self._save()
        return staged

    @track_operation("rm")
    def rm(self, path: str) -> None:
        """
        Unstage a pending addition, or stage the removal of a tracked file.

        A tracked file is also deleted from the working directory.

        Raises:
            NoOpError: If the path is neither staged nor tracked
            ValidationError: If the path is outside the working directory
        """
        path = self.tree.normalize(path)
        if self.staging.unstage(path):
            self._save()
            return
        if path not in self.head.manifest:
            raise NoOpError("No reason to remove the file.")
        self.staging.stage_remove(path)
        self.tree.delete(path)
        self._save()

    @track_operation("commit")
    def commit(self, message: str) -> str:
        """
        Commit the staging area.

        Returns:
            New commit id

        Raises:
            NoOpError: If nothing is staged
            ValidationError: If the message is empty
        """
        return self.commit_staged(message)

    def commit_staged(self, message: str, parent2: Optional[str] = None) -> str:
        """
        Build the next commit from HEAD's manifest and the staging area.

        Args:
            message: Commit message
            parent2: Merged-in tip for merge commits (default: same as parent1)
        """
        if self.staging.is_empty():
            raise NoOpError("No changes added to the commit.")
        if not message:
            raise ValidationError("Please enter a commit message.")

        parent = self.graph.head_commit
        manifest = dict(self.head.manifest)
        for path, content in self.staging.adds.items():
            manifest[path] = self.store.put_blob(content)
        for path in self.staging.removes:
            manifest.pop(path, None)

        commit_id, _ = self.graph.create_commit(message, manifest, parent, parent2)
        self.graph.advance(commit_id)
        self.staging.clear()
        self._save()
        logger.info(
            "Committed {}: {}",
            commit_id[:8],
            message,
            commit_id=commit_id,
            branch=self.graph.head_branch,
        )
        return commit_id

    # Working-directory projection

    def check_untracked(
        self, current: Dict[str, str], target: Dict[str, str], strict: bool = True
    ) -> None:
        """
        Refuse to overwrite files the current commit does not track.

        A working file absent from ``current`` must appear in ``target`` with
        identical content. With ``strict=False`` files absent from ``target``
        are skipped instead of refused.

        Raises:
            ConflictError: If an untracked file would be lost or overwritten
        """
        for path in self.tree.list_files():
            if path in current:
                continue
            if path not in target:
                if strict:
                    raise ConflictError(UNTRACKED_IN_THE_WAY)
                continue
            if hash_bytes(self.tree.read(path)) != target[path]:
                raise ConflictError(UNTRACKED_IN_THE_WAY)

    def _project(self, manifest: Dict[str, str]) -> None:
        """Replace the working directory with the files of ``manifest``."""
        for path in self.tree.list_files():
            self.tree.delete(path)
        for path, blob_id in manifest.items():
            self.tree.write(path, self.store.get_blob(blob_id))

    def resolve(self, ref: str) -> str:
        """Full commit id for a full or abbreviated id."""
        return self.store.resolve_commit_id(ref)

    @track_operation("checkout_file")
    def checkout_file(self, path: str, commit_ref: Optional[str] = None) -> None:
        """
        Restore one file from a commit (default: HEAD) into the working
        directory. The staging area is not changed.

        Raises:
            NotFoundError: Unknown commit, or the file is not in that commit
            ValidationError: If the path is outside the working directory
        """
        path = self.tree.normalize(path)
        commit_id = self.resolve(commit_ref) if commit_ref else self.graph.head_commit
        manifest = self.graph.get(commit_id).manifest
        if path not in manifest:
            raise NotFoundError("File does not exist in that commit.")
        self.tree.write(path, self.store.get_blob(manifest[path]))

    @track_operation("checkout_branch")
    def checkout_branch(self, branch_name: str) -> None:
        """
        Switch to another branch, rewriting the working directory.

        Raises:
            NotFoundError: Unknown branch
            NoOpError: Already on that branch
            ConflictError: An untracked file is in the way
        """
        if branch_name not in self.graph.branches:
            raise NotFoundError("No such branch exists.")
        if branch_name == self.graph.head_branch:
            raise NoOpError("No need to checkout the current branch.")

        target = self.graph.get(self.graph.branches[branch_name]).manifest
        self.check_untracked(self.head.manifest, target)

        self._project(target)
        self.staging.clear()
        self.graph.switch(branch_name)
        self._save()
        logger.info(f"Checked out branch: {branch_name}")

    def fast_forward(self, commit_id: str) -> None:
        """Move the current branch forward to a descendant commit."""
        target = self.graph.get(commit_id).manifest
        self.check_untracked(self.head.manifest, target)

        self._project(target)
        self.staging.clear()
        self.graph.advance(commit_id)
        self._save()

    @track_operation("reset")
    def reset(self, commit_ref: str) -> str:
        """
        Move the current branch to a commit and check out all of its files.

        Working files absent from the target commit are deleted.

        Returns:
            Full id of the target commit

        Raises:
            NotFoundError: Unknown commit
            ConflictError: An untracked file would be overwritten
        """
        commit_id = self.resolve(commit_ref)
        target = self.graph.get(commit_id).manifest
        self.check_untracked(self.head.manifest, target, strict=False)

        for path in self.tree.list_files():
            if path not in target:
                self.tree.delete(path)
        for path, blob_id in target.items():
            self.tree.write(path, self.store.get_blob(blob_id))

        self.staging.clear()
        self.graph.advance(commit_id)
        self._save()
        logger.info(f"Reset {self.graph.head_branch} to {commit_id[:8]}")
        return commit_id

    # Branches

    @track_operation("branch")
    def branch(self, branch_name: str) -> None:
        """Create a branch at the HEAD commit."""
        self.graph.create_branch(branch_name)
        self._save()
        logger.info(f"Created branch: {branch_name} at {self.graph.head_commit[:8]}")

    @track_operation("rm_branch")
    def rm_branch(self, branch_name: str) -> None:
        """Delete a branch pointer."""
        self.graph.remove_branch(branch_name)
        self._save()

    @track_operation("merge")
    def merge(self, branch_name: str) -> MergeResult:
        """Merge another branch into the current one."""
        return MergeEngine(self).merge(branch_name)

    # Queries

    def log(self) -> List[Tuple[str, Commit]]:
        """First-parent history of HEAD, newest first."""
        return list(self.graph.history(self.graph.head_commit))

    def global_log(self) -> List[Tuple[str, Commit]]:
        """Every commit ever stored, in id order."""
        return list(self.store.iter_commits())

    def find(self, message: str) -> List[str]:
        """Ids of commits with exactly this message, sorted."""
        return sorted(self.graph.find_by_message(message))

    def status(self) -> StatusReport:
        """Compare HEAD, the staging area and the working directory."""
        manifest = self.head.manifest
        adds = self.staging.adds
        removes = self.staging.removes
        files = self.tree.list_files()
        present: Set[str] = set(files)

        modified: List[str] = []
        deleted: List[str] = []
        for path, blob_id in manifest.items():
            if path in removes or path in adds:
                continue
            if path not in present:
                deleted.append(path)
            elif hash_bytes(self.tree.read(path)) != blob_id:
                modified.append(path)
        for path, content in adds.items():
            if path not in present:
                deleted.append(path)
            elif self.tree.read(path) != content:
                modified.append(path)

        untracked = [
            path
            for path in files
            if not self.is_tracked(path) or path in removes
        ]

        return StatusReport(
            branches=sorted(self.graph.branches),
            current_branch=self.graph.head_branch,
            staged=sorted(adds),
            removed=sorted(removes),
            modified=sorted(modified),
            deleted=sorted(deleted),
            untracked=untracked,
        )