"""
Remotes: other repositories on the local filesystem.

A remote is the metadata directory of another sprig repository. Transfers
copy whatever commits and blobs the other side is missing and move a branch
pointer; there is no network protocol.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Dict

from sprig.logging import get_sprig_logger, track_operation

from .errors import ConflictError, NotFoundError
from .graph import CommitGraph, reachable
from .merge import MergeResult
from .storage import ObjectStore, REMOTE_RECORD

if TYPE_CHECKING:
    from .repository import Repository

log = get_sprig_logger("remote")


def remote_branch_name(remote: str, branch: str) -> str:
    """Local name under which a fetched remote branch is recorded."""
    return f"{remote}/{branch}"


def copy_missing(source: ObjectStore, target: ObjectStore, tip: str) -> int:
    """
    Copy ``tip`` and its ancestors that ``target`` lacks, with their blobs.

    The walk stops at commits the target already has.

    Returns:
        Number of commits copied
    """
    copied = 0
    for _, commit in reachable(source, tip, stop=target.has_commit):
        for blob_id in commit.manifest.values():
            if not target.has_blob(blob_id):
                target.put_blob(source.get_blob(blob_id))
        target.put_commit(commit)
        copied += 1
    return copied


class RemoteManager:
    """
    Remote table and transfers for one repository.

    Example:
        >>> remotes = RemoteManager(repo)
        >>> remotes.add_remote("origin", "../shared/.sprig")
        >>> remotes.fetch("origin", "master")
        >>> repo.merge("origin/master")
    """

    def __init__(self, repo: "Repository"):
        self.repo = repo
        data = repo.store.read_record(REMOTE_RECORD) or {}
        self.remotes: Dict[str, str] = dict(data.get("remotes", {}))

    def _save(self) -> None:
        self.repo.store.write_record(REMOTE_RECORD, {"remotes": self.remotes})

    def add_remote(self, name: str, path: str) -> None:
        """
        Register a remote.

        Raises:
            ConflictError: If a remote with that name exists
        """
        if name in self.remotes:
            raise ConflictError("A remote with that name already exists.")
        self.remotes[name] = path
        self._save()
        log.info(f"Added remote {name} -> {path}")

    def rm_remote(self, name: str) -> None:
        """
        Forget a remote.

        Raises:
            NotFoundError: If no remote has that name
        """
        if name not in self.remotes:
            raise NotFoundError("A remote with that name does not exist.")
        del self.remotes[name]
        self._save()

    def _open(self, name: str) -> ObjectStore:
        if name not in self.remotes:
            raise NotFoundError("A remote with that name does not exist.")
        path = Path(self.remotes[name])
        if not path.is_absolute():
            path = self.repo.work_dir / path
        store = ObjectStore(path)
        if not store.exists():
            raise NotFoundError("Remote directory not found.")
        return store

    @track_operation("fetch")
    def fetch(self, name: str, branch: str) -> str:
        """
        Copy a remote branch into this repository as ``<name>/<branch>``.

        Returns:
            Commit id of the fetched tip

        Raises:
            NotFoundError: Unknown remote, missing directory or branch
        """
        remote_store = self._open(name)
        remote_graph = CommitGraph.load(remote_store)
        if branch not in remote_graph.branches:
            raise NotFoundError("That remote does not have that branch.")

        tip = remote_graph.branches[branch]
        copied = copy_missing(remote_store, self.repo.store, tip)
        self.repo.graph.set_branch(remote_branch_name(name, branch), tip)
        self.repo.graph.save()
        log.info("Fetched {}/{} at {}", name, branch, tip[:8], commits=copied)
        return tip

    @track_operation("push")
    def push(self, name: str, branch: str) -> str:
        """
        Copy the current HEAD to a remote and point its ``branch`` at it.

        The remote branch's current tip must already be present locally
        (fetched or pulled), otherwise the push is refused.

        Returns:
            Commit id now at the remote branch

        Raises:
            NotFoundError: Unknown remote or missing directory
            ConflictError: The remote has commits not yet fetched
        """
        remote_store = self._open(name)
        remote_graph = CommitGraph.load(remote_store)
        remote_tip = remote_graph.branches.get(branch)
        if remote_tip is not None and not self.repo.store.has_commit(remote_tip):
            raise ConflictError("Please pull down remote changes before pushing.")

        head = self.repo.graph.head_commit
        copied = copy_missing(self.repo.store, remote_store, head)
        remote_graph.set_branch(branch, head)
        remote_graph.save()
        log.info("Pushed {} to {}/{}", head[:8], name, branch, commits=copied)
        return head

    def pull(self, name: str, branch: str) -> MergeResult:
        """Fetch a remote branch and merge it into the current branch."""
        self.fetch(name, branch)
        return self.repo.merge(remote_branch_name(name, branch))
