"""Integration tests for the plumbing commands."""

import zlib

HELLO_ID = "ce013625030ba8dba906f756967f9e9ca394464a"
EMPTY_TREE_ID = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"


class TestHashObject:
    """Test 'gitplumb hash-object'."""

    def test_hash_without_write(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")

        result = gitplumb("hash-object", "hello.txt", cwd=initialized_repo)

        assert result.returncode == 0
        assert result.stdout.strip() == HELLO_ID
        assert not (initialized_repo / ".git" / "objects" / "ce").exists()

    def test_hash_outside_repository(self, tmp_path, gitplumb):
        """Test that hashing without -w needs no repository."""
        (tmp_path / "hello.txt").write_bytes(b"hello\n")

        result = gitplumb("hash-object", "hello.txt", cwd=tmp_path)

        assert result.returncode == 0
        assert result.stdout.strip() == HELLO_ID

    def test_hash_with_write(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")

        result = gitplumb("hash-object", "-w", "hello.txt", cwd=initialized_repo)

        assert result.returncode == 0
        stored = initialized_repo / ".git" / "objects" / "ce" / HELLO_ID[2:]
        assert zlib.decompress(stored.read_bytes()) == b"blob 6\x00hello\n"

    def test_missing_file(self, initialized_repo, gitplumb):
        result = gitplumb("hash-object", "nope.txt", cwd=initialized_repo)
        assert result.returncode == 2

    def test_unsupported_type(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")
        result = gitplumb("hash-object", "-t", "tree", "hello.txt", cwd=initialized_repo)
        assert result.returncode == 1


class TestCatFile:
    """Test 'gitplumb cat-file'."""

    def _write_hello(self, workspace, gitplumb):
        (workspace / "hello.txt").write_bytes(b"hello\n")
        gitplumb("hash-object", "-w", "hello.txt", cwd=workspace)

    def test_type_size_content(self, initialized_repo, gitplumb):
        self._write_hello(initialized_repo, gitplumb)

        assert gitplumb("cat-file", "-t", HELLO_ID, cwd=initialized_repo).stdout == "blob\n"
        assert gitplumb("cat-file", "-s", HELLO_ID, cwd=initialized_repo).stdout == "6\n"
        assert gitplumb("cat-file", "-p", HELLO_ID, cwd=initialized_repo).stdout == "hello\n"

    def test_abbreviated_id(self, initialized_repo, gitplumb):
        self._write_hello(initialized_repo, gitplumb)

        result = gitplumb("cat-file", "-t", HELLO_ID[:7], cwd=initialized_repo)

        assert result.returncode == 0
        assert result.stdout == "blob\n"

    def test_binary_blob_verbatim(self, initialized_repo, gitplumb):
        (initialized_repo / "data.bin").write_bytes(b"\x00\xff\xfe")
        oid = gitplumb("hash-object", "-w", "data.bin", cwd=initialized_repo).stdout.strip()

        result = gitplumb("cat-file", "-p", oid, cwd=initialized_repo, text=False)

        assert result.stdout == b"\x00\xff\xfe"

    def test_requires_one_flag(self, initialized_repo, gitplumb):
        assert gitplumb("cat-file", HELLO_ID, cwd=initialized_repo).returncode == 1
        result = gitplumb("cat-file", "-t", "-s", HELLO_ID, cwd=initialized_repo)
        assert result.returncode == 1

    def test_missing_object(self, initialized_repo, gitplumb):
        result = gitplumb("cat-file", "-t", "a" * 40, cwd=initialized_repo)
        assert result.returncode == 1
        assert "not found" in result.stderr

    def test_corrupted_object(self, initialized_repo, gitplumb):
        shard = initialized_repo / ".git" / "objects" / "ab"
        shard.mkdir()
        (shard / ("c" * 38)).write_bytes(b"garbage")

        result = gitplumb("cat-file", "-p", "ab" + "c" * 38, cwd=initialized_repo)

        assert result.returncode == 3

    def test_not_a_repository(self, tmp_path, gitplumb):
        result = gitplumb("cat-file", "-t", HELLO_ID, cwd=tmp_path)
        assert result.returncode == 1
        assert "Not a gitplumb repository" in result.stderr


class TestTreesAndCommits:
    """Test 'write-tree', 'ls-tree' and 'commit-tree' together."""

    def test_empty_workspace_tree(self, initialized_repo, gitplumb):
        result = gitplumb("write-tree", cwd=initialized_repo)
        assert result.returncode == 0
        assert result.stdout.strip() == EMPTY_TREE_ID

    def test_write_and_list_tree(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")
        (initialized_repo / "sub").mkdir()
        (initialized_repo / "sub" / "inner.txt").write_text("inner\n")

        tree_id = gitplumb("write-tree", cwd=initialized_repo).stdout.strip()
        listing = gitplumb("ls-tree", tree_id, cwd=initialized_repo).stdout.splitlines()

        assert listing[0] == f"100644 blob {HELLO_ID}\thello.txt"
        assert listing[1].startswith("040000 tree ")
        assert listing[1].endswith("\tsub")
        assert len(listing) == 2

        names = gitplumb("ls-tree", "--name-only", tree_id, cwd=initialized_repo).stdout
        assert names == "hello.txt\nsub\n"

    def test_write_tree_from_subdirectory(self, initialized_repo, gitplumb):
        """Test that write-tree snapshots the workspace root, not the cwd."""
        (initialized_repo / "top.txt").write_text("top\n")
        nested = initialized_repo / "nested"
        nested.mkdir()
        (nested / "deep.txt").write_text("deep\n")

        from_root = gitplumb("write-tree", cwd=initialized_repo).stdout
        from_nested = gitplumb("write-tree", cwd=nested).stdout

        assert from_root == from_nested

    def test_ignore_file(self, initialized_repo, gitplumb):
        (initialized_repo / ".gitplumbignore").write_text("*.tmp\n")
        (initialized_repo / "keep.txt").write_text("keep\n")
        (initialized_repo / "scratch.tmp").write_text("drop\n")

        tree_id = gitplumb("write-tree", cwd=initialized_repo).stdout.strip()
        names = gitplumb("ls-tree", "--name-only", tree_id, cwd=initialized_repo).stdout

        assert names.splitlines() == [".gitplumbignore", "keep.txt"]

    def test_commit_chain(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")
        tree_id = gitplumb("write-tree", cwd=initialized_repo).stdout.strip()

        root = gitplumb("commit-tree", tree_id, "-m", "root", cwd=initialized_repo)
        assert root.returncode == 0
        root_id = root.stdout.strip()

        child = gitplumb(
            "commit-tree", tree_id[:8], "-p", root_id[:8], "-m", "second", cwd=initialized_repo
        )
        assert child.returncode == 0
        child_id = child.stdout.strip()

        assert gitplumb("cat-file", "-t", child_id, cwd=initialized_repo).stdout == "commit\n"
        shown = gitplumb("cat-file", "-p", child_id, cwd=initialized_repo).stdout
        assert shown.startswith(f"tree {tree_id}\nparent {root_id}\n")
        assert "author Test User <test@example.com> " in shown
        assert " +0000\ncommitter Test User" in shown
        assert shown.endswith("\n\nsecond\n")

        listing = gitplumb("ls-tree", "--name-only", child_id, cwd=initialized_repo).stdout
        assert listing == "hello.txt\n"

    def test_commit_tree_rejects_blob(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")
        gitplumb("hash-object", "-w", "hello.txt", cwd=initialized_repo)

        result = gitplumb("commit-tree", HELLO_ID, "-m", "bad", cwd=initialized_repo)

        assert result.returncode == 1
        assert "Not a tree object" in result.stderr

    def test_ls_tree_rejects_blob(self, initialized_repo, gitplumb):
        (initialized_repo / "hello.txt").write_bytes(b"hello\n")
        gitplumb("hash-object", "-w", "hello.txt", cwd=initialized_repo)

        result = gitplumb("ls-tree", HELLO_ID, cwd=initialized_repo)

        assert result.returncode == 1
