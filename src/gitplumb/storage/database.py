"""Object database: encode, decode and persist objects.

``ObjectDatabase`` sits between the object model and the loose object
store. Reads go store -> zlib -> hash check -> parser; writes go
object -> canonical bytes -> zlib -> store.
"""

import logging
from typing import Dict, List, Optional, Tuple

from gitplumb.constants import BLOB_TYPE, DEFAULT_MAX_DEPTH
from gitplumb.exceptions import (
    ObjectCorruptedError,
    ObjectGraphTooDeepError,
    ObjectTypeError,
)
from gitplumb.objects.hashing import identifier_of, validate_object_id
from gitplumb.objects.model import Blob, Commit, GitObject, Tree, parse_object
from gitplumb.storage.codec import compress, decompress
from gitplumb.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class ObjectDatabase:
    """Typed access to the objects held by an ObjectStore.

    Attributes:
        store: Underlying loose object store
        max_depth: Deepest tree nesting followed when resolving graphs

    Example:
        >>> db = ObjectDatabase(ObjectStore(Path(".git")))
        >>> blob = db.encode_object_from_bytes("blob", b"hello\\n")
        >>> db.persist(blob)
        >>> assert db.decode_object(blob.id) == blob
    """

    def __init__(self, store: ObjectStore, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self.store = store
        self.max_depth = max_depth

    def read_raw(self, object_id: str) -> bytes:
        """Read and decompress an object, verifying its identifier.

        Args:
            object_id: Hex identifier of the object

        Returns:
            Canonical encoding of the object

        Raises:
            ObjectNotFoundError: If the object is not stored
            ObjectDecodeError: If the compressed stream is corrupt
            ObjectCorruptedError: If the content does not hash to object_id
        """
        raw = decompress(self.store.read(object_id))
        actual_id = identifier_of(raw)
        if actual_id != object_id:
            raise ObjectCorruptedError(
                f"Object corrupted: expected {object_id}, got {actual_id}"
            )
        return raw

    def decode_object(self, object_id: str, resolve: bool = True) -> GitObject:
        """Load and parse an object.

        With ``resolve`` set, tree entries and a commit's tree are decoded
        too, so the result carries its whole snapshot. Commit parents are
        not walked here; ``Commit.parents`` loads them from the store on
        first access. Objects shared within the graph are decoded once.

        Args:
            object_id: Hex identifier of the object
            resolve: Whether to materialize child objects

        Returns:
            Blob, Tree or Commit

        Raises:
            ValueError: If object_id is malformed
            ObjectNotFoundError: If the object or any resolved child is missing
            ObjectDecodeError: If any object is malformed
            ObjectGraphTooDeepError: If trees nest deeper than max_depth
            ObjectTypeError: If a child has a different kind than its
                reference promises
        """
        validate_object_id(object_id)
        if not resolve:
            return parse_object(self.read_raw(object_id))
        return self._decode_graph(object_id)

    def decode_tree(self, object_id: str) -> Tree:
        """Decode an object that must be a tree, peeling commits to their tree.

        Raises:
            ObjectTypeError: If the object is a blob
        """
        obj = self.decode_object(object_id, resolve=False)
        if isinstance(obj, Commit):
            obj = self.decode_object(obj.tree_id, resolve=False)
        if not isinstance(obj, Tree):
            raise ObjectTypeError(f"Not a tree object: {object_id} is a {obj.type_name}")
        return obj

    def encode_object_from_bytes(
        self,
        type_tag: str,
        raw_bytes: bytes,
        known_id: Optional[str] = None,
    ) -> Blob:
        """Build an (unpersisted) blob from raw content."""
        return encode_object_from_bytes(type_tag, raw_bytes, known_id)

    def persist(self, obj: GitObject) -> None:
        """Write an object to the store, skipping objects already stored.

        Children are not written; callers persist bottom-up.
        """
        if self.store.exists(obj.id):
            logger.debug("Object %s already stored, skipping write", obj.id)
            return
        self.store.write(obj.id, compress(obj.encode()))
        logger.debug("Persisted %s %s (%d bytes)", obj.type_name, obj.id, obj.size)

    def contains(self, object_id: str) -> bool:
        return self.store.exists(object_id)

    def resolve_id(self, prefix: str) -> str:
        """Expand a possibly abbreviated identifier."""
        return self.store.resolve_prefix(prefix)

    def _decode_graph(self, root_id: str) -> GitObject:
        # Iterative post-order walk: children are fully decoded before the
        # object that references them is rebuilt with a cache lookup.
        decoded: Dict[str, GitObject] = {}
        shallow: Dict[str, GitObject] = {}
        stack: List[Tuple[str, int]] = [(root_id, 0)]

        def lookup(object_id: str) -> GitObject:
            obj = decoded.get(object_id)
            if obj is None:
                # Only commit parents miss the cache; they load on demand.
                obj = self.decode_object(object_id)
            return obj

        while stack:
            object_id, depth = stack[-1]
            if object_id in decoded:
                stack.pop()
                continue

            obj = shallow.get(object_id)
            if obj is None:
                if depth > self.max_depth:
                    raise ObjectGraphTooDeepError(
                        f"Object graph deeper than {self.max_depth} levels at {object_id}"
                    )
                obj = parse_object(self.read_raw(object_id))
                shallow[object_id] = obj

            pending = [child_id for child_id in _child_ids(obj) if child_id not in decoded]
            if pending:
                stack.extend((child_id, depth + 1) for child_id in pending)
                continue

            stack.pop()
            decoded[object_id] = parse_object(obj.encode(), resolve=lookup)

        return decoded[root_id]


def _child_ids(obj: GitObject) -> List[str]:
    """Identifiers decoded together with ``obj`` (parents are excluded)."""
    if isinstance(obj, Tree):
        return [entry.child_id for entry in obj.entries]
    if isinstance(obj, Commit):
        return [obj.tree_id]
    return []


def encode_object_from_bytes(
    type_tag: str,
    raw_bytes: bytes,
    known_id: Optional[str] = None,
) -> Blob:
    """Build a blob from raw content.

    Args:
        type_tag: Object type; only "blob" is supported
        raw_bytes: File content
        known_id: Identifier the caller expects the content to have

    Returns:
        In-memory Blob (not persisted)

    Raises:
        ObjectTypeError: If type_tag is not "blob"
        ObjectCorruptedError: If known_id does not match the content
    """
    if type_tag != BLOB_TYPE:
        raise ObjectTypeError(
            f"Cannot create a {type_tag!r} object from raw bytes; only blobs are supported"
        )
    blob = Blob(raw_bytes)
    if known_id is not None and known_id != blob.id:
        raise ObjectCorruptedError(
            f"Content hashes to {blob.id}, not the expected {known_id}"
        )
    return blob
