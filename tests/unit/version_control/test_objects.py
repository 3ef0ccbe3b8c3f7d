"""
Unit tests for the commit object model.

Tests serialization, commit identity and the root commit.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from sprig.version_control import Commit, create_root_commit, hash_bytes

blob_ids = st.text(alphabet="0123456789abcdef", min_size=40, max_size=40)
paths = st.text(alphabet="abcdefghij/._", min_size=1, max_size=20)


class TestCommit:
    """Tests for Commit class."""

    def test_commit_serialization(self) -> None:
        """Test commit to/from JSON."""
        commit = Commit(
            message="Add notes",
            timestamp="2024-05-01T12:00:00+00:00",
            parent1="a" * 40,
            parent2="a" * 40,
            manifest={"notes.txt": "b" * 40},
        )
        restored = Commit.from_json(commit.to_json())

        assert restored == commit
        assert restored.commit_id == commit.commit_id

    def test_commit_id_is_hash_of_serialization(self) -> None:
        """Test that the id is the hash of the canonical JSON."""
        commit = Commit(message="m", timestamp="2024-05-01T12:00:00+00:00")
        assert commit.commit_id == hash_bytes(commit.to_json().encode("utf-8"))
        assert len(commit.commit_id) == 40

    def test_manifest_order_does_not_change_id(self) -> None:
        """Test that manifests are serialized in path order."""
        first = Commit("m", "t", manifest={"a": "1" * 40, "b": "2" * 40})
        second = Commit("m", "t", manifest={"b": "2" * 40, "a": "1" * 40})
        assert first.commit_id == second.commit_id

    def test_each_field_changes_id(self) -> None:
        """Test that every field takes part in the id."""
        base = Commit("m", "t", parent1="p" * 40, parent2="p" * 40, manifest={"f": "1" * 40})
        variants = [
            Commit("other", "t", parent1="p" * 40, parent2="p" * 40, manifest={"f": "1" * 40}),
            Commit("m", "t2", parent1="p" * 40, parent2="p" * 40, manifest={"f": "1" * 40}),
            Commit("m", "t", parent1="q" * 40, parent2="p" * 40, manifest={"f": "1" * 40}),
            Commit("m", "t", parent1="p" * 40, parent2="q" * 40, manifest={"f": "1" * 40}),
            Commit("m", "t", parent1="p" * 40, parent2="p" * 40, manifest={"f": "2" * 40}),
        ]
        ids = {variant.commit_id for variant in variants}
        assert base.commit_id not in ids
        assert len(ids) == len(variants)

    def test_parents(self) -> None:
        """Test that parents are distinct and ordered."""
        assert Commit("m", "t", parent1="a", parent2="a").parents() == ["a"]
        assert Commit("m", "t", parent1="a", parent2="b").parents() == ["a", "b"]
        assert create_root_commit().parents() == []

    @given(st.text(), st.dictionaries(paths, blob_ids, max_size=5))
    @settings(max_examples=50)
    def test_reserialization_keeps_id(self, message, manifest) -> None:
        """Test that an unchanged commit always hashes to the same id."""
        commit = Commit(message=message, timestamp="t", parent1=None, manifest=manifest)
        assert Commit.from_json(commit.to_json()).commit_id == commit.commit_id


class TestRootCommit:
    """Tests for the root commit."""

    def test_root_commit_is_reproducible(self) -> None:
        """Test that every root commit has the same id."""
        assert create_root_commit().commit_id == create_root_commit().commit_id

    def test_root_commit_fields(self) -> None:
        """Test root commit contents."""
        root = create_root_commit()
        assert root.message == "initial commit"
        assert root.parent1 is None
        assert root.parent2 is None
        assert root.manifest == {}
        assert root.created_at.year == 1970
