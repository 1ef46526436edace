"""Filesystem-backed loose object storage for gitplumb.

This module maps object identifiers to files under ``.git/objects/`` using
Git's two-level sharding. The store only moves compressed bytes around;
hashing, compression and parsing happen in the layers above it.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import List

from gitplumb.constants import HASH_LENGTH, MIN_PREFIX_LENGTH, OBJECTS_DIR
from gitplumb.exceptions import ObjectNotFoundError
from gitplumb.objects.hashing import HEX_DIGITS, is_object_id, validate_object_id

logger = logging.getLogger(__name__)


class ObjectStore:
    """Content-addressable storage for compressed objects.

    Storage layout:
        .git/objects/<id[:2]>/<id[2:]>

    Objects are never deleted. Writing an identifier that already exists
    overwrites the file, which is harmless because identical identifiers
    imply identical content.

    Attributes:
        git_dir: Path to the .git directory
        objects_dir: Path to the objects directory

    Example:
        >>> store = ObjectStore(Path(".git"))
        >>> store.write(object_id, compressed_bytes)
        >>> assert store.read(object_id) == compressed_bytes
    """

    def __init__(self, git_dir: Path) -> None:
        """Initialize the object store.

        Args:
            git_dir: Path to .git directory

        Raises:
            ValueError: If git_dir doesn't exist
        """
        self.git_dir = Path(git_dir)
        self.objects_dir = self.git_dir / OBJECTS_DIR

        if not self.git_dir.exists():
            raise ValueError(f"Git directory not found: {git_dir}")

    def write(self, object_id: str, compressed: bytes) -> Path:
        """Write compressed object bytes under their identifier.

        The shard directory is created if missing. Data goes to a temp file
        in the shard directory first and is then renamed over the target, so
        readers never observe a partially written object.

        Args:
            object_id: Hex identifier of the object
            compressed: zlib-compressed canonical bytes

        Returns:
            Path of the written object file

        Raises:
            ValueError: If object_id is malformed
            OSError: If the write fails (permissions, disk full, etc.)
        """
        object_path = self.object_path(object_id)
        object_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_fd, tmp_path = tempfile.mkstemp(
            dir=object_path.parent,
            prefix=".tmp_",
            suffix=".obj",
        )
        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(compressed)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, object_path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.debug("Wrote object %s (%d bytes)", object_id, len(compressed))
        return object_path

    def read(self, object_id: str) -> bytes:
        """Read the compressed bytes of an object.

        Args:
            object_id: Hex identifier of the object

        Returns:
            Compressed object bytes exactly as stored

        Raises:
            ObjectNotFoundError: If no file backs the identifier
            ValueError: If object_id is malformed
        """
        object_path = self.object_path(object_id)
        try:
            with open(object_path, "rb") as f:
                return f.read()
        except FileNotFoundError as e:
            raise ObjectNotFoundError(
                f"Object not found: {object_id} (tried {object_path})"
            ) from e

    def exists(self, object_id: str) -> bool:
        """Check if an object exists in the store.

        Malformed identifiers are reported as absent rather than raising.
        """
        if not is_object_id(object_id):
            return False
        return self.object_path(object_id).is_file()

    def object_path(self, object_id: str) -> Path:
        """Get the filesystem path for an object.

        Example:
            >>> store.object_path("ab" + "c" * 38)
            PosixPath('.git/objects/ab/ccc...')
        """
        validate_object_id(object_id)
        return self.objects_dir / object_id[:2] / object_id[2:]

    def resolve_prefix(self, prefix: str) -> str:
        """Expand an abbreviated identifier to the full stored identifier.

        Args:
            prefix: At least MIN_PREFIX_LENGTH hex characters (a full
                identifier is returned unchanged if it exists)

        Returns:
            The unique full identifier starting with ``prefix``

        Raises:
            ValueError: If prefix is too short or not hexadecimal
            ObjectNotFoundError: If no object, or more than one, matches
        """
        prefix = prefix.strip().lower()
        if len(prefix) < MIN_PREFIX_LENGTH or len(prefix) > HASH_LENGTH:
            raise ValueError(
                f"Object id prefix must be {MIN_PREFIX_LENGTH}-{HASH_LENGTH} "
                f"characters, got {len(prefix)}"
            )
        if not HEX_DIGITS.issuperset(prefix):
            raise ValueError(f"Object id prefix must be hexadecimal: {prefix!r}")

        if len(prefix) == HASH_LENGTH:
            if not self.exists(prefix):
                raise ObjectNotFoundError(f"Object not found: {prefix}")
            return prefix

        shard = self.objects_dir / prefix[:2]
        matches: List[str] = []
        if shard.is_dir():
            rest = prefix[2:]
            for entry in sorted(shard.iterdir()):
                object_id = prefix[:2] + entry.name
                if entry.name.startswith(rest) and is_object_id(object_id):
                    matches.append(object_id)

        if not matches:
            raise ObjectNotFoundError(f"Object not found: {prefix}")
        if len(matches) > 1:
            candidates = ", ".join(matches)
            raise ObjectNotFoundError(
                f"Object id prefix {prefix} is ambiguous: {candidates}"
            )
        return matches[0]
