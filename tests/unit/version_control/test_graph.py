"""
Unit tests for the commit graph.

Tests history walks, message search, split point discovery and branch
pointers.
"""

import pytest

from sprig.version_control import (
    CommitGraph,
    ConflictError,
    NotFoundError,
    ObjectStore,
    reachable,
    ValidationError,
    create_root_commit,
)


@pytest.fixture
def graph(tmp_path) -> CommitGraph:
    store = ObjectStore(tmp_path / ".sprig")
    store.create()
    root_id = store.put_commit(create_root_commit())
    return CommitGraph(store, "master", root_id)


def chain(graph: CommitGraph, start: str, messages) -> list:
    """Append a linear run of commits after ``start``; returns their ids."""
    ids = []
    parent = start
    for message in messages:
        parent, _ = graph.create_commit(message, {}, parent)
        ids.append(parent)
    return ids


class TestCreateCommit:
    """Tests for commit creation."""

    def test_create_commit(self, graph) -> None:
        """Test that a commit is persisted with both parents set."""
        root = graph.head_commit
        commit_id, commit = graph.create_commit("first", {"a": "1" * 40}, root)

        assert graph.store.has_commit(commit_id)
        assert commit.parent1 == root
        assert commit.parent2 == root
        assert commit.manifest == {"a": "1" * 40}

    def test_create_merge_commit(self, graph) -> None:
        """Test a commit with two distinct parents."""
        root = graph.head_commit
        a, b = chain(graph, root, ["a", "b"])
        _, merged = graph.create_commit("merge", {}, b, a)
        assert merged.parent1 == b
        assert merged.parent2 == a
        assert merged.parents() == [b, a]

    def test_empty_message_rejected(self, graph) -> None:
        """Test that an empty message raises ValidationError."""
        with pytest.raises(ValidationError):
            graph.create_commit("", {}, graph.head_commit)


class TestHistory:
    """Tests for history walks."""

    def test_linear_history(self, graph) -> None:
        """Test that history follows first parents back to the root."""
        root = graph.head_commit
        ids = chain(graph, root, ["one", "two", "three"])

        history = list(graph.history(ids[-1]))
        assert [commit_id for commit_id, _ in history] == list(reversed(ids)) + [root]
        for (_, newer), (older_id, _) in zip(history, history[1:]):
            assert newer.parent1 == older_id
        assert history[-1][1].parent1 is None

    def test_history_of_root(self, graph) -> None:
        """Test that the root's history is just the root."""
        assert [c for c, _ in graph.history(graph.head_commit)] == [graph.head_commit]

    def test_history_follows_first_parent_of_merges(self, graph) -> None:
        """Test that second parents are not walked."""
        root = graph.head_commit
        (side,) = chain(graph, root, ["side"])
        (main,) = chain(graph, root, ["main"])
        merge_id, _ = graph.create_commit("merge", {}, main, side)

        walked = [commit_id for commit_id, _ in graph.history(merge_id)]
        assert walked == [merge_id, main, root]

    def test_reachable_includes_both_parents(self, graph) -> None:
        """Test the full ancestor walk."""
        root = graph.head_commit
        (side,) = chain(graph, root, ["side"])
        (main,) = chain(graph, root, ["main"])
        merge_id, _ = graph.create_commit("merge", {}, main, side)

        walked = [c for c, _ in reachable(graph.store, merge_id)]
        assert sorted(walked) == sorted([merge_id, main, side, root])

    def test_reachable_stops_at_known_commits(self, graph) -> None:
        """Test that the stop predicate prunes the walk."""
        root = graph.head_commit
        (side,) = chain(graph, root, ["side"])
        (main,) = chain(graph, root, ["main"])
        merge_id, _ = graph.create_commit("merge", {}, main, side)

        walked = {c for c, _ in reachable(graph.store, merge_id, stop=lambda c: c == main)}
        assert walked == {merge_id, side, root}


class TestFindByMessage:
    """Tests for message search."""

    def test_find_matches(self, graph) -> None:
        """Test finding commits by exact message."""
        root = graph.head_commit
        first = chain(graph, root, ["fix"])[0]
        second = chain(graph, first, ["fix"])[0]
        chain(graph, second, ["other"])

        assert graph.find_by_message("fix") == {first, second}

    def test_find_no_match(self, graph) -> None:
        """Test that no match gives an empty set."""
        assert graph.find_by_message("nothing like this") == set()


class TestSplitPoint:
    """Tests for merge base discovery."""

    def test_fast_forward_split_is_current_tip(self, graph) -> None:
        """Test that a descendant's split point with its ancestor is the ancestor."""
        root = graph.head_commit
        (base,) = chain(graph, root, ["base"])
        ahead = chain(graph, base, ["b1", "b2"])

        assert graph.split_point(base, ahead[-1]) == base
        assert graph.split_point(ahead[-1], base) == base

    def test_diverged_branches(self, graph) -> None:
        """Test two branches forked from a common commit."""
        root = graph.head_commit
        (base,) = chain(graph, root, ["base"])
        left = chain(graph, base, ["l1", "l2", "l3"])
        right = chain(graph, base, ["r1"])

        assert graph.split_point(left[-1], right[-1]) == base

    def test_same_tip(self, graph) -> None:
        """Test that a commit is its own split point."""
        (base,) = chain(graph, graph.head_commit, ["base"])
        assert graph.split_point(base, base) == base

    def test_repeated_merge_uses_second_parent_spine(self, graph) -> None:
        """Test that a previous merge moves the split point forward."""
        root = graph.head_commit
        (base,) = chain(graph, root, ["base"])
        (m1,) = chain(graph, base, ["m1"])
        (b1,) = chain(graph, base, ["b1"])
        merge_id, _ = graph.create_commit("merge", {}, m1, b1)
        (b2,) = chain(graph, b1, ["b2"])

        assert graph.split_point(merge_id, b2) == b1

    def test_spines(self, graph) -> None:
        """Test the parent1 and parent2 spines of a merge commit."""
        root = graph.head_commit
        (m1,) = chain(graph, root, ["m1"])
        (b1,) = chain(graph, root, ["b1"])
        merge_id, _ = graph.create_commit("merge", {}, m1, b1)

        assert graph.spine(merge_id, 1) == [merge_id, m1, root]
        assert graph.spine(merge_id, 2) == [merge_id, b1, root]

    def test_unrelated_histories(self, graph) -> None:
        """Test that spines that never meet give None."""
        from sprig.version_control import Commit

        orphan = graph.store.put_commit(Commit("orphan", "2000-01-01T00:00:00+00:00"))
        (tip,) = chain(graph, graph.head_commit, ["main"])
        assert graph.split_point(tip, orphan) is None


class TestPointers:
    """Tests for branch and HEAD pointers."""

    def test_advance_moves_head_and_branch(self, graph) -> None:
        """Test that HEAD and the current branch move together."""
        (tip,) = chain(graph, graph.head_commit, ["next"])
        graph.advance(tip)
        assert graph.head_commit == tip
        assert graph.branches["master"] == tip

    def test_create_and_switch_branch(self, graph) -> None:
        """Test creating a branch and switching HEAD to it."""
        root = graph.head_commit
        graph.create_branch("feature")
        (tip,) = chain(graph, root, ["feature work"])
        graph.switch("feature")
        graph.advance(tip)

        assert graph.head_branch == "feature"
        assert graph.branches["feature"] == tip
        assert graph.branches["master"] == root

    def test_create_existing_branch(self, graph) -> None:
        """Test that duplicate branch names are refused."""
        with pytest.raises(ConflictError):
            graph.create_branch("master")

    def test_switch_unknown_branch(self, graph) -> None:
        """Test switching to a missing branch."""
        with pytest.raises(NotFoundError):
            graph.switch("nope")

    def test_remove_branch(self, graph) -> None:
        """Test deleting branches."""
        graph.create_branch("old")
        graph.remove_branch("old")
        assert "old" not in graph.branches

        with pytest.raises(NotFoundError):
            graph.remove_branch("old")
        with pytest.raises(ConflictError):
            graph.remove_branch("master")

    def test_save_and_load(self, graph) -> None:
        """Test that pointers survive a reload."""
        graph.create_branch("feature")
        graph.save()

        loaded = CommitGraph.load(graph.store)
        assert loaded.head_branch == "master"
        assert loaded.head_commit == graph.head_commit
        assert loaded.branches == graph.branches

    def test_load_without_pointer_record(self, tmp_path) -> None:
        """Test that an uninitialized store cannot be loaded."""
        store = ObjectStore(tmp_path / "empty")
        store.create()
        with pytest.raises(NotFoundError):
            CommitGraph.load(store)
