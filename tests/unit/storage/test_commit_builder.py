"""Unit tests for CommitBuilder."""

import pytest

from gitplumb.config import Identity
from gitplumb.exceptions import ObjectNotFoundError, ObjectTypeError
from gitplumb.objects.model import Blob, Commit, Tree
from gitplumb.storage.commit_builder import CommitBuilder
from gitplumb.storage.database import ObjectDatabase

FIXED_TIME = 1700000000


@pytest.fixture
def commit_builder(database: ObjectDatabase, identity: Identity) -> CommitBuilder:
    """Create CommitBuilder with a fixed clock and timezone."""
    return CommitBuilder(database, identity, clock=lambda: FIXED_TIME, tz_offset="+0000")


@pytest.fixture
def tree(database: ObjectDatabase) -> Tree:
    tree = Tree([])
    database.persist(tree)
    return tree


class TestBuildCommit:
    """Test commit creation."""

    def test_root_commit(self, commit_builder: CommitBuilder, tree: Tree) -> None:
        commit = commit_builder.build_commit("Initial commit", tree.id)

        assert commit.is_root
        assert commit.tree_id == tree.id
        assert commit.tree == tree
        assert commit.message == "Initial commit"

    def test_identity_and_timestamp(self, commit_builder: CommitBuilder, tree: Tree) -> None:
        commit = commit_builder.build_commit("msg", tree.id)

        assert commit.author_name == "Test User"
        assert commit.author_email == "test@example.com"
        assert commit.committer == commit.author
        assert commit.author.timestamp == FIXED_TIME
        assert commit.author.tz_offset == "+0000"
        assert b"author Test User <test@example.com> 1700000000 +0000\n" in commit.payload

    def test_not_persisted(
        self, commit_builder: CommitBuilder, database: ObjectDatabase, tree: Tree
    ) -> None:
        commit = commit_builder.build_commit("msg", tree.id)
        assert not database.contains(commit.id)

    def test_deterministic_with_fixed_clock(
        self, commit_builder: CommitBuilder, tree: Tree
    ) -> None:
        first = commit_builder.build_commit("msg", tree.id)
        second = commit_builder.build_commit("msg", tree.id)
        assert first.id == second.id

    def test_with_parent_round_trip(
        self, commit_builder: CommitBuilder, database: ObjectDatabase, tree: Tree
    ) -> None:
        """Test that a persisted commit decodes with matching tree, parents and message."""
        parent = commit_builder.build_commit("parent", tree.id)
        database.persist(parent)

        child = commit_builder.build_commit("init", tree.id, [parent.id])
        database.persist(child)
        decoded = database.decode_object(child.id)

        assert isinstance(decoded, Commit)
        assert decoded.id == child.id
        assert decoded.tree_id == tree.id
        assert decoded.parent_ids == (parent.id,)
        assert decoded.message == "init"
        assert decoded.author == child.author

    def test_multiple_parents(
        self, commit_builder: CommitBuilder, database: ObjectDatabase, tree: Tree
    ) -> None:
        first = commit_builder.build_commit("one", tree.id)
        second = commit_builder.build_commit("two", tree.id)
        database.persist(first)
        database.persist(second)

        merge = commit_builder.build_commit("merge", tree.id, [first.id, second.id])

        assert merge.parent_ids == (first.id, second.id)
        assert [p.message for p in merge.parents] == ["one", "two"]

    def test_local_timezone_when_unset(
        self, database: ObjectDatabase, identity: Identity, tree: Tree
    ) -> None:
        builder = CommitBuilder(database, identity, clock=lambda: FIXED_TIME)
        commit = builder.build_commit("msg", tree.id)
        assert len(commit.author.tz_offset) == 5
        assert commit.author.tz_offset[0] in "+-"


class TestBuildCommitErrors:
    """Test rejection of bad references."""

    def test_tree_id_is_blob(
        self, commit_builder: CommitBuilder, database: ObjectDatabase
    ) -> None:
        blob = Blob(b"not a tree")
        database.persist(blob)
        with pytest.raises(ObjectTypeError, match="Not a tree"):
            commit_builder.build_commit("msg", blob.id)

    def test_parent_is_tree(self, commit_builder: CommitBuilder, tree: Tree) -> None:
        with pytest.raises(ObjectTypeError, match="Not a commit"):
            commit_builder.build_commit("msg", tree.id, [tree.id])

    def test_missing_tree(self, commit_builder: CommitBuilder) -> None:
        with pytest.raises(ObjectNotFoundError):
            commit_builder.build_commit("msg", "a" * 40)

    def test_missing_parent(self, commit_builder: CommitBuilder, tree: Tree) -> None:
        with pytest.raises(ObjectNotFoundError):
            commit_builder.build_commit("msg", tree.id, ["b" * 40])

    def test_invalid_tz_offset(self, database: ObjectDatabase, identity: Identity) -> None:
        with pytest.raises(ValueError, match="HHMM"):
            CommitBuilder(database, identity, tz_offset="UTC")
