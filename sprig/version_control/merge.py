"""
Three-way merge of whole files.

The merge base ("split point") comes from the commit graph; every path in
the split, current and given manifests is then resolved independently by
comparing blob hashes. Conflicts are written into the working files with
markers and staged; they are reported, not raised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional

from loguru import logger

from .errors import ConflictError, NoOpError, NotFoundError

if TYPE_CHECKING:
    from .repository import Repository

CONFLICT_HEAD = b"<<<<<<< HEAD\n"
CONFLICT_SEPARATOR = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


class MergeAction(str, Enum):
    """What to do with one path during a merge."""

    KEEP = "keep"
    TAKE_GIVEN = "take_given"
    REMOVE = "remove"
    CONFLICT = "conflict"


class MergeOutcome(str, Enum):
    """How a merge request was resolved."""

    ANCESTOR = "ancestor"
    FAST_FORWARD = "fast_forward"
    MERGED = "merged"


@dataclass
class MergeResult:
    """Result of a merge request."""

    outcome: MergeOutcome
    commit_id: str
    conflicts: List[str] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0

    def messages(self) -> List[str]:
        """User-facing report lines."""
        if self.outcome == MergeOutcome.ANCESTOR:
            return ["Given branch is an ancestor of the current branch."]
        if self.outcome == MergeOutcome.FAST_FORWARD:
            return ["Current branch fast-forwarded."]
        if self.has_conflicts:
            return ["Encountered a merge conflict."]
        return []


def resolve_path(
    split: Optional[str], current: Optional[str], given: Optional[str]
) -> MergeAction:
    """
    Decide the merge action for one path.

    Args:
        split: Blob hash at the split point (None if absent)
        current: Blob hash in the current branch (None if absent)
        given: Blob hash in the given branch (None if absent)
    """
    if split is not None:
        if current is not None and given is not None:
            if current == split and given != split:
                return MergeAction.TAKE_GIVEN
            if current != given and current != split and given != split:
                return MergeAction.CONFLICT
            return MergeAction.KEEP
        if current is not None:
            # deleted in given
            return MergeAction.REMOVE if current == split else MergeAction.CONFLICT
        if given is not None:
            # deleted in current
            return MergeAction.CONFLICT if given != split else MergeAction.KEEP
        return MergeAction.KEEP

    if current is None and given is not None:
        return MergeAction.TAKE_GIVEN
    if current is not None and given is not None and current != given:
        return MergeAction.CONFLICT
    return MergeAction.KEEP


def plan_merge(
    split: Dict[str, str], current: Dict[str, str], given: Dict[str, str]
) -> Dict[str, MergeAction]:
    """Resolve every path of the three manifests; KEEP entries are left out."""
    plan: Dict[str, MergeAction] = {}
    for path in sorted(set(split) | set(current) | set(given)):
        action = resolve_path(split.get(path), current.get(path), given.get(path))
        if action != MergeAction.KEEP:
            plan[path] = action
    return plan


def conflict_content(current: bytes, given: bytes) -> bytes:
    """Both halves of a conflicted file wrapped in markers."""
    return CONFLICT_HEAD + current + CONFLICT_SEPARATOR + given + CONFLICT_END


def merge_message(given_branch: str, current_branch: str) -> str:
    return f"Merged {given_branch} into {current_branch}."


class MergeEngine:
    """
    Merges another branch into the current branch of a repository.

    Steps: precondition checks, split point lookup, the ancestor and
    fast-forward shortcuts, the untracked-file safety scan, per-path
    resolution, and a single merge commit carrying both parents.
    """

    def __init__(self, repo: "Repository"):
        self.repo = repo
        self.graph = repo.graph
        self.store = repo.store

    def merge(self, branch_name: str) -> MergeResult:
        """
        Merge ``branch_name`` into the current branch.

        Raises:
            ConflictError: Uncommitted changes, or an untracked file in the way
            NotFoundError: Unknown branch
            NoOpError: Merging the current branch, or nothing to commit
        """
        if not self.repo.staging.is_empty():
            raise ConflictError("You have uncommitted changes.")
        if branch_name not in self.graph.branches:
            raise NotFoundError("A branch with that name does not exist.")
        if branch_name == self.graph.head_branch:
            raise NoOpError("Cannot merge a branch with itself.")

        current_tip = self.graph.head_commit
        given_tip = self.graph.branches[branch_name]
        split = self.graph.split_point(current_tip, given_tip)
        if split is None:
            raise NotFoundError("No common ancestor with that branch.")

        if split == given_tip:
            logger.info(f"{branch_name} is an ancestor of {self.graph.head_branch}")
            return MergeResult(MergeOutcome.ANCESTOR, current_tip)

        if split == current_tip:
            self.repo.fast_forward(given_tip)
            logger.info(f"Fast-forwarded {self.graph.head_branch} to {given_tip[:8]}")
            return MergeResult(MergeOutcome.FAST_FORWARD, given_tip)

        current_manifest = self.graph.get(current_tip).manifest
        given_manifest = self.graph.get(given_tip).manifest
        split_manifest = self.graph.get(split).manifest

        self.repo.check_untracked(current_manifest, given_manifest)

        plan = plan_merge(split_manifest, current_manifest, given_manifest)
        conflicts = self._apply(plan, current_manifest, given_manifest)

        message = merge_message(branch_name, self.graph.head_branch)
        commit_id = self.repo.commit_staged(message, parent2=given_tip)

        if conflicts:
            logger.info(
                "Merge of {} left {} conflicted file(s)",
                branch_name,
                len(conflicts),
                conflicts=conflicts,
            )
        return MergeResult(MergeOutcome.MERGED, commit_id, conflicts)

    def _apply(
        self,
        plan: Dict[str, MergeAction],
        current: Dict[str, str],
        given: Dict[str, str],
    ) -> List[str]:
        """
        Write and stage every planned path; returns the conflicted paths.

        Changes are staged in memory only; ``commit_staged`` persists them.
        """
        tree = self.repo.tree
        staging = self.repo.staging
        conflicts: List[str] = []
        for path, action in plan.items():
            if action == MergeAction.TAKE_GIVEN:
                content = self.store.get_blob(given[path])
                tree.write(path, content)
                staging.stage_add(path, content, self.repo.tracked_blob(path))
            elif action == MergeAction.REMOVE:
                staging.stage_remove(path)
                tree.delete(path)
            elif action == MergeAction.CONFLICT:
                current_half = self._half(current.get(path))
                given_half = self._half(given.get(path))
                content = conflict_content(current_half, given_half)
                tree.write(path, content)
                staging.stage_add(path, content, self.repo.tracked_blob(path))
                conflicts.append(path)
        return conflicts

    def _half(self, blob_id: Optional[str]) -> bytes:
        return self.store.get_blob(blob_id) if blob_id is not None else b""
