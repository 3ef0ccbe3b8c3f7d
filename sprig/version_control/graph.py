"""
Commit graph: traversal of the commit DAG and the branch/HEAD pointers.
"""

from typing import Any, Callable, Dict, Iterator, List, Optional, Set, Tuple

from loguru import logger

from .errors import ConflictError, NotFoundError, ValidationError
from .objects import Commit, now_timestamp
from .storage import ObjectStore, POINTER_RECORD

# Spine pairings in tie-break order: (current spine, given spine)
SPINE_PAIRINGS: Tuple[Tuple[int, int], ...] = ((1, 1), (1, 2), (2, 1), (2, 2))


def reachable(
    store: ObjectStore, start: str, stop: Optional[Callable[[str], bool]] = None
) -> Iterator[Tuple[str, Commit]]:
    """
    Every commit reachable from ``start`` through either parent.

    Iterative depth-first walk; each commit is yielded once. Commits for
    which ``stop`` returns True are neither yielded nor walked past.
    """
    seen: Set[str] = set()
    stack = [start]
    while stack:
        commit_id = stack.pop()
        if commit_id in seen or (stop is not None and stop(commit_id)):
            continue
        seen.add(commit_id)
        commit = store.get_commit(commit_id)
        yield commit_id, commit
        stack.extend(commit.parents())


class CommitGraph:
    """
    Commits linked by up to two parents, plus the mutable pointers into them.

    The branch table maps branch names to commit ids. HEAD is the pair
    ``(head_branch, head_commit)``; every method that moves HEAD updates
    both halves together so that ``head_commit == branches[head_branch]``
    holds whenever control returns to the caller.
    """

    def __init__(
        self,
        store: ObjectStore,
        head_branch: str,
        head_commit: str,
        branches: Optional[Dict[str, str]] = None,
    ):
        self.store = store
        self.head_branch = head_branch
        self.head_commit = head_commit
        self.branches: Dict[str, str] = dict(branches or {head_branch: head_commit})

    @classmethod
    def load(cls, store: ObjectStore) -> "CommitGraph":
        """Read the pointer record of an existing repository."""
        data = store.read_record(POINTER_RECORD)
        if data is None:
            raise NotFoundError("Not in an initialized sprig directory.")
        return cls(
            store,
            head_branch=data["head_branch"],
            head_commit=data["head_commit"],
            branches=data["branches"],
        )

    def save(self) -> None:
        """Write HEAD and the branch table."""
        self.store.write_record(POINTER_RECORD, self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "head_branch": self.head_branch,
            "head_commit": self.head_commit,
            "branches": dict(sorted(self.branches.items())),
        }

    # Commits

    def get(self, commit_id: str) -> Commit:
        return self.store.get_commit(commit_id)

    @property
    def head(self) -> Commit:
        return self.get(self.head_commit)

    def create_commit(
        self,
        message: str,
        manifest: Dict[str, str],
        parent1: Optional[str],
        parent2: Optional[str] = None,
    ) -> Tuple[str, Commit]:
        """
        Build and persist a new commit.

        Args:
            message: Commit message
            manifest: Full path -> blob hash snapshot
            parent1: First parent id
            parent2: Second parent id (defaults to ``parent1``)

        Returns:
            ``(commit_id, commit)``

        Raises:
            ValidationError: If the message is empty
        """
        if not message:
            raise ValidationError("Please enter a commit message.")

        commit = Commit(
            message=message,
            timestamp=now_timestamp(),
            parent1=parent1,
            parent2=parent2 if parent2 is not None else parent1,
            manifest=dict(manifest),
        )
        commit_id = self.store.put_commit(commit)
        return commit_id, commit

    def history(self, start: str) -> Iterator[Tuple[str, Commit]]:
        """
        Walk first parents from ``start`` back to the root.

        Yields:
            ``(commit_id, commit)`` pairs, newest first
        """
        commit_id: Optional[str] = start
        while commit_id is not None:
            commit = self.get(commit_id)
            yield commit_id, commit
            commit_id = commit.parent1

    def find_by_message(self, text: str) -> Set[str]:
        """Ids of every stored commit whose message equals ``text``."""
        return {
            commit_id
            for commit_id, commit in self.store.iter_commits()
            if commit.message == text
        }

    # Split point

    def spine(self, tip: str, parent: int) -> List[str]:
        """
        Chain of ids from ``tip`` following one parent slot repeatedly.

        Args:
            tip: Starting commit id
            parent: 1 to follow ``parent1``, 2 to follow ``parent2``
        """
        chain: List[str] = []
        commit_id: Optional[str] = tip
        while commit_id is not None:
            chain.append(commit_id)
            commit = self.get(commit_id)
            commit_id = commit.parent1 if parent == 1 else commit.parent2
        return chain

    @staticmethod
    def _first_common(spine_a: List[str], spine_b: List[str]) -> Optional[int]:
        """Index along ``spine_a`` of its first id that also occurs in ``spine_b``."""
        members = set(spine_b)
        for distance, commit_id in enumerate(spine_a):
            if commit_id in members:
                return distance
        return None

    def split_point(self, tip_a: str, tip_b: str) -> Optional[str]:
        """
        Find the merge base of two tips.

        Four parent-line spines are built (``tip_a`` and ``tip_b``, each
        following ``parent1`` and ``parent2``). For every pairing of an
        A-spine with a B-spine, the distance from the A tip to the first id
        also on the B-spine is measured; the nearest wins, ties going to
        the earlier pairing in ``(A1,B1), (A1,B2), (A2,B1), (A2,B2)``.

        This is a nearest-common-node heuristic, not a full lowest common
        ancestor search; it is exact for linear histories and simple merges.

        Returns:
            Split point commit id, or None if the spines never meet
        """
        spines_a = {1: self.spine(tip_a, 1), 2: self.spine(tip_a, 2)}
        spines_b = {1: self.spine(tip_b, 1), 2: self.spine(tip_b, 2)}

        best: Optional[Tuple[int, List[str]]] = None
        for slot_a, slot_b in SPINE_PAIRINGS:
            distance = self._first_common(spines_a[slot_a], spines_b[slot_b])
            if distance is None:
                continue
            if best is None or distance < best[0]:
                best = (distance, spines_a[slot_a])

        if best is None:
            logger.warning(f"No split point between {tip_a[:8]} and {tip_b[:8]}")
            return None

        distance, spine = best
        return spine[distance]

    # Pointers

    def advance(self, commit_id: str) -> None:
        """Move HEAD and the current branch to ``commit_id``."""
        self.head_commit = commit_id
        self.branches[self.head_branch] = commit_id

    def switch(self, branch_name: str) -> None:
        """Point HEAD at another branch and its tip."""
        if branch_name not in self.branches:
            raise NotFoundError("No such branch exists.")
        self.head_branch = branch_name
        self.head_commit = self.branches[branch_name]

    def create_branch(self, branch_name: str, commit_id: Optional[str] = None) -> None:
        """
        Create a branch at ``commit_id`` (default: HEAD commit).

        Raises:
            ConflictError: If the branch already exists
        """
        if branch_name in self.branches:
            raise ConflictError("A branch with that name already exists.")
        self.branches[branch_name] = commit_id or self.head_commit

    def set_branch(self, branch_name: str, commit_id: str) -> None:
        """Create or move a branch, keeping HEAD in step when it is current."""
        self.branches[branch_name] = commit_id
        if branch_name == self.head_branch:
            self.head_commit = commit_id

    def remove_branch(self, branch_name: str) -> None:
        """
        Delete a branch pointer (commits stay in the store).

        Raises:
            NotFoundError: If the branch does not exist
            ConflictError: If it is the current branch
        """
        if branch_name not in self.branches:
            raise NotFoundError("A branch with that name does not exist.")
        if branch_name == self.head_branch:
            raise ConflictError("Cannot remove the current branch.")
        del self.branches[branch_name]
