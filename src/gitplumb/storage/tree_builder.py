"""Convert a directory on disk into a graph of tree and blob objects."""

import fnmatch
import logging
import os
import stat
from pathlib import Path
from typing import Iterable, List, Optional

from gitplumb.constants import GIT_DIR
from gitplumb.objects.model import Blob, FileMode, GitObject, Tree, TreeEntry, encode_name
from gitplumb.storage.database import ObjectDatabase

logger = logging.getLogger(__name__)


class TreeBuilder:
    """Builds Tree objects from directories, persisting children as it goes.

    Entries are sorted by their encoded name so the resulting identifier
    is reproducible. Every blob and subtree is written to the database
    before its parent is assembled; the top-level tree is returned without
    being written.

    Attributes:
        database: ObjectDatabase receiving child objects
        ignore_patterns: Names or glob patterns to skip; a trailing "/"
            limits a pattern to directories
    """

    def __init__(
        self,
        database: ObjectDatabase,
        ignore_patterns: Optional[Iterable[str]] = None,
    ):
        self.database = database
        self.ignore_patterns = frozenset(ignore_patterns or ())

    def build_tree_from_directory(self, path: Path) -> Tree:
        """Recursively snapshot a directory.

        Args:
            path: Directory to convert

        Returns:
            Tree for ``path`` with materialized children (not persisted)

        Raises:
            OSError: If the directory or any file in it cannot be read
        """
        path = Path(path)
        with os.scandir(path) as it:
            dir_entries = sorted(it, key=lambda e: encode_name(e.name))

        entries: List[TreeEntry] = []
        for dir_entry in dir_entries:
            if self._is_excluded(dir_entry):
                logger.debug("Ignoring %s", dir_entry.path)
                continue

            child: GitObject
            if dir_entry.is_symlink():
                child = Blob(os.fsencode(os.readlink(dir_entry.path)))
                mode = FileMode.SYMLINK
            elif dir_entry.is_dir(follow_symlinks=False):
                child = self.build_tree_from_directory(Path(dir_entry.path))
                mode = FileMode.DIRECTORY
            elif dir_entry.is_file(follow_symlinks=False):
                with open(dir_entry.path, "rb") as f:
                    child = Blob(f.read())
                st_mode = dir_entry.stat(follow_symlinks=False).st_mode
                if st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
                    mode = FileMode.EXECUTABLE
                else:
                    mode = FileMode.REGULAR
            else:
                logger.debug("Skipping special file %s", dir_entry.path)
                continue

            self.database.persist(child)
            entries.append(TreeEntry(mode, dir_entry.name, child.id, child))
            logger.debug("%s %s %s", mode.display, child.id, dir_entry.path)

        return Tree(entries)

    def _is_excluded(self, dir_entry: os.DirEntry) -> bool:
        name = dir_entry.name
        if name == GIT_DIR:
            return True

        for pattern in self.ignore_patterns:
            if pattern.endswith("/"):
                if dir_entry.is_dir(follow_symlinks=False) and fnmatch.fnmatchcase(
                    name, pattern.rstrip("/")
                ):
                    return True
            elif fnmatch.fnmatchcase(name, pattern):
                return True
        return False
