"""Repository layout helpers.

Creates and locates the ``.git`` directory and reads the ignore list used
when snapshotting a working directory.
"""

import logging
from pathlib import Path
from typing import Optional, Set

from gitplumb.config import Settings
from gitplumb.constants import (
    DEFAULT_HEAD_CONTENT,
    GIT_DIR,
    HEAD_FILE,
    HEADS_DIR,
    IGNORE_FILE,
    OBJECTS_DIR,
    REFS_DIR,
)
from gitplumb.exceptions import ObjectEncodingError, RepositoryNotFoundError
from gitplumb.storage import ObjectDatabase, ObjectStore

logger = logging.getLogger(__name__)


def ensure_store_exists(root: Path) -> Path:
    """Create the repository skeleton under ``root`` if it is missing.

    Creates ``.git/``, ``.git/objects/``, ``.git/refs/heads/`` and a HEAD
    pointing at the default branch. Existing directories and an existing
    HEAD are left untouched.

    Args:
        root: Workspace root

    Returns:
        Path to the .git directory

    Raises:
        OSError: If a directory or HEAD cannot be created
    """
    git_dir = Path(root) / GIT_DIR
    (git_dir / OBJECTS_DIR).mkdir(parents=True, exist_ok=True)
    (git_dir / REFS_DIR / HEADS_DIR).mkdir(parents=True, exist_ok=True)

    head_file = git_dir / HEAD_FILE
    if not head_file.exists():
        head_file.write_text(DEFAULT_HEAD_CONTENT, encoding="utf-8")
        logger.debug("Created %s", head_file)
    return git_dir


def find_store(start: Path) -> Path:
    """Locate the .git directory at or above ``start``.

    Raises:
        RepositoryNotFoundError: If no ancestor contains a .git/objects directory
    """
    start = Path(start).resolve()
    for candidate in (start, *start.parents):
        git_dir = candidate / GIT_DIR
        if (git_dir / OBJECTS_DIR).is_dir():
            return git_dir
    raise RepositoryNotFoundError(
        f"Not a gitplumb repository (no {GIT_DIR}/ found in {start} or any parent)"
    )


def open_database(start: Path, settings: Optional[Settings] = None) -> ObjectDatabase:
    """Open the object database of the repository containing ``start``."""
    git_dir = find_store(start)
    store = ObjectStore(git_dir)
    if settings is None:
        return ObjectDatabase(store)
    return ObjectDatabase(store, max_depth=settings.max_depth)


def load_ignore_patterns(root: Path) -> Set[str]:
    """Load ignore patterns from the workspace's ignore file.

    Blank lines and lines starting with ``#`` are skipped. A missing file
    yields an empty set.

    Raises:
        OSError: If the file exists but cannot be read
        ObjectEncodingError: If the file is not UTF-8
    """
    ignore_file = Path(root) / IGNORE_FILE
    if not ignore_file.exists():
        return set()

    try:
        content = ignore_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ObjectEncodingError(f"{ignore_file} is not valid UTF-8: {e}") from e

    patterns = set()
    for line in content.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.add(line)
    logger.debug("Loaded %d ignore pattern(s) from %s", len(patterns), ignore_file)
    return patterns
