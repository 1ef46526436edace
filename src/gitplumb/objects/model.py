"""Object model and canonical encodings.

Every object is framed as ``b"<type> <size>\\0<payload>"``; the identifier
is the SHA-1 of that whole byte string. Payload layouts:

* blob   - raw content bytes, never interpreted
* tree   - repeated ``b"<mode> <name>\\0"`` + 20 raw digest bytes
* commit - ``tree``/``parent``/``author``/``committer`` header lines, a blank
  line, then the message and a trailing newline

Objects are immutable once built. Children are referenced by identifier;
a decoded graph may additionally carry the resolved child objects.
"""

import enum
from abc import ABC, abstractmethod
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from gitplumb.config import validate_tz_offset
from gitplumb.constants import (
    BLOB_TYPE,
    COMMIT_TYPE,
    DIGEST_SIZE,
    OBJECT_TYPES,
    TREE_TYPE,
)
from gitplumb.exceptions import (
    ObjectDecodeError,
    ObjectEncodingError,
    ObjectTypeError,
)
from gitplumb.objects.hashing import (
    hex_to_raw,
    identifier_of,
    raw_to_hex,
    validate_object_id,
)

# Looks up (and decodes) a child object by identifier.
Resolver = Callable[[str], "GitObject"]


def encode_name(name: str) -> bytes:
    """Encode an entry name to the bytes stored in a tree.

    ``surrogateescape`` lets names that were not valid UTF-8 on disk
    round-trip byte for byte.
    """
    return name.encode("utf-8", "surrogateescape")


def frame(type_name: str, payload: bytes) -> bytes:
    """Wrap a payload in the canonical ``<type> <size>\\0`` header."""
    if type_name not in OBJECT_TYPES:
        raise ValueError(f"Unknown object type: {type_name!r}")
    return f"{type_name} {len(payload)}".encode("ascii") + b"\0" + payload


def parse_frame(raw: bytes) -> Tuple[str, bytes]:
    """Split canonical bytes into type tag and payload.

    The type token is whatever precedes the first space of the header, so
    ``blob``/``tree`` (4 bytes) and ``commit`` (6 bytes) are handled the
    same way.

    Args:
        raw: Decompressed canonical object bytes

    Returns:
        Tuple of (type name, payload bytes)

    Raises:
        ObjectDecodeError: If the header is malformed, the type tag is
            unknown, or the payload length disagrees with the header
    """
    nul = raw.find(b"\0")
    if nul < 0:
        raise ObjectDecodeError("Malformed object: missing null separator after header")

    header = raw[:nul]
    type_token, sep, size_token = header.partition(b" ")
    if not sep:
        raise ObjectDecodeError(f"Malformed object header: {header!r}")

    try:
        type_name = type_token.decode("ascii")
    except UnicodeDecodeError as e:
        raise ObjectDecodeError(f"Malformed object type tag: {type_token!r}") from e
    if type_name not in OBJECT_TYPES:
        raise ObjectDecodeError(f"Unexpected object type tag: {type_name!r}")

    if not size_token.isdigit() or (len(size_token) > 1 and size_token.startswith(b"0")):
        raise ObjectDecodeError(f"Malformed object size: {size_token!r}")
    size = int(size_token)

    payload = raw[nul + 1:]
    if len(payload) < size:
        raise ObjectDecodeError(
            f"Truncated {type_name} object: header says {size} bytes, got {len(payload)}"
        )
    if len(payload) > size:
        raise ObjectDecodeError(
            f"Oversized {type_name} object: header says {size} bytes, got {len(payload)}"
        )
    return type_name, payload


class FileMode(enum.Enum):
    """Mode of a tree entry, valued by its canonical token."""

    REGULAR = "100644"
    EXECUTABLE = "100755"
    SYMLINK = "120000"
    DIRECTORY = "40000"

    @property
    def token(self) -> str:
        """Token written into tree payloads."""
        return self.value

    @property
    def display(self) -> str:
        """Six-digit form used when listing trees (``040000``)."""
        return self.value.zfill(6)

    @property
    def object_type(self) -> str:
        """Type of object an entry with this mode points at."""
        return TREE_TYPE if self is FileMode.DIRECTORY else BLOB_TYPE

    @classmethod
    def from_token(cls, token) -> "FileMode":
        """Parse a mode token, accepting ``040000`` for directories.

        Raises:
            ObjectDecodeError: If the token is not a supported mode
        """
        if isinstance(token, bytes):
            try:
                token = token.decode("ascii")
            except UnicodeDecodeError as e:
                raise ObjectDecodeError(f"Invalid file mode: {token!r}") from e
        if token == "040000":
            return cls.DIRECTORY
        try:
            return cls(token)
        except ValueError as e:
            raise ObjectDecodeError(f"Invalid file mode: {token!r}") from e


class GitObject(ABC):
    """Base class for blobs, trees and commits.

    Subclasses build their payload in ``__init__`` and hand it to
    ``_finalize``, which fixes the identifier.

    Attributes:
        id: Hex identifier of the canonical encoding
    """

    type_name: str = ""

    id: str
    _payload: bytes

    def _finalize(self, payload: bytes) -> None:
        self._payload = payload
        self.id = identifier_of(self.encode())

    @property
    def payload(self) -> bytes:
        """Payload bytes (canonical encoding without the header)."""
        return self._payload

    @property
    def size(self) -> int:
        """Byte length of the payload."""
        return len(self._payload)

    def encode(self) -> bytes:
        """Full canonical encoding, the input to the identifier."""
        return frame(self.type_name, self._payload)

    @classmethod
    @abstractmethod
    def from_payload(
        cls, payload: bytes, resolve: Optional[Resolver] = None
    ) -> "GitObject":
        """Parse a payload of this object's type."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GitObject):
            return NotImplemented
        return self.type_name == other.type_name and self.id == other.id

    def __hash__(self) -> int:
        return hash((self.type_name, self.id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"


class Blob(GitObject):
    """Opaque file content."""

    type_name = BLOB_TYPE

    def __init__(self, content: bytes):
        if not isinstance(content, (bytes, bytearray, memoryview)):
            raise TypeError(f"Blob content must be bytes, got {type(content)}")
        self._finalize(bytes(content))

    @property
    def content(self) -> bytes:
        return self._payload

    @classmethod
    def from_payload(cls, payload: bytes, resolve: Optional[Resolver] = None) -> "Blob":
        return cls(payload)


class TreeEntry:
    """A named reference from a tree to a child object.

    Attributes:
        mode: FileMode of the entry
        name: Single path segment
        child_id: Identifier of the referenced blob or tree
        child: Decoded child object, if it has been materialized
    """

    def __init__(
        self,
        mode: FileMode,
        name: str,
        child_id: str,
        child: Optional[GitObject] = None,
    ):
        if not isinstance(mode, FileMode):
            raise ValueError(f"Tree entry mode must be a FileMode, got {mode!r}")
        if not name or name in (".", ".."):
            raise ValueError(f"Invalid tree entry name: {name!r}")
        if "/" in name or "\0" in name:
            raise ValueError(f"Tree entry name must be a single path segment: {name!r}")
        validate_object_id(child_id)
        if child is not None and child.id != child_id:
            raise ValueError(f"Child object {child.id} does not match entry id {child_id}")

        self.mode = mode
        self.name = name
        self.child_id = child_id
        self.child = child

    @property
    def object_type(self) -> str:
        return self.mode.object_type

    def encode(self) -> bytes:
        return (
            self.mode.token.encode("ascii")
            + b" "
            + encode_name(self.name)
            + b"\0"
            + hex_to_raw(self.child_id)
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TreeEntry):
            return NotImplemented
        return (self.mode, self.name, self.child_id) == (
            other.mode,
            other.name,
            other.child_id,
        )

    def __hash__(self) -> int:
        return hash((self.mode, self.name, self.child_id))

    def __repr__(self) -> str:
        return f"TreeEntry({self.mode.token} {self.name!r} {self.child_id})"


class Tree(GitObject):
    """An ordered list of entries describing one directory snapshot.

    Entries are encoded in the order given; callers building from a
    directory are expected to sort them by name first.
    """

    type_name = TREE_TYPE

    def __init__(self, entries: Iterable[TreeEntry] = ()):
        self._entries = tuple(entries)
        self._finalize(b"".join(entry.encode() for entry in self._entries))

    @property
    def entries(self) -> Tuple[TreeEntry, ...]:
        return self._entries

    def __iter__(self):
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @classmethod
    def from_payload(cls, payload: bytes, resolve: Optional[Resolver] = None) -> "Tree":
        """Parse a tree payload by scanning its delimiters.

        Args:
            payload: Tree payload bytes
            resolve: Optional lookup used to materialize each child

        Raises:
            ObjectDecodeError: If an entry is truncated or malformed
            ObjectTypeError: If a resolved child's kind disagrees with its mode
        """
        entries: List[TreeEntry] = []
        pos = 0
        end = len(payload)
        while pos < end:
            space = payload.find(b" ", pos)
            if space < 0:
                raise ObjectDecodeError(f"Tree entry at offset {pos} has no mode separator")
            mode = FileMode.from_token(payload[pos:space])

            nul = payload.find(b"\0", space + 1)
            if nul < 0:
                raise ObjectDecodeError(f"Tree entry at offset {pos} has no name terminator")
            name = payload[space + 1:nul].decode("utf-8", "surrogateescape")

            id_end = nul + 1 + DIGEST_SIZE
            if id_end > end:
                raise ObjectDecodeError(
                    f"Tree entry {name!r} is truncated: expected {DIGEST_SIZE} id bytes"
                )
            child_id = raw_to_hex(payload[nul + 1:id_end])

            child = None
            if resolve is not None:
                child = resolve(child_id)
                if child.type_name != mode.object_type:
                    raise ObjectTypeError(
                        f"Tree entry {name!r} has mode {mode.token} but "
                        f"{child_id} is a {child.type_name}"
                    )
            try:
                entries.append(TreeEntry(mode, name, child_id, child))
            except ValueError as e:
                raise ObjectDecodeError(f"Invalid tree entry: {e}") from e
            pos = id_end

        tree = cls(entries)
        # Keep stored bytes so non-canonical tokens (040000) keep their identifier.
        tree._finalize(payload)
        return tree


class Signature:
    """Author or committer line: ``Name <email> <timestamp> <tz>``.

    Attributes:
        name: Display name
        email: Email address
        timestamp: Seconds since the epoch
        tz_offset: Offset string such as "+0000"
    """

    def __init__(self, name: str, email: str, timestamp: int, tz_offset: str):
        for field, value in (("name", name), ("email", email)):
            if "<" in value or ">" in value or "\n" in value:
                raise ValueError(f"Signature {field} contains forbidden characters: {value!r}")
        validate_tz_offset(tz_offset)
        self.name = name
        self.email = email
        self.timestamp = int(timestamp)
        self.tz_offset = tz_offset

    def encode(self) -> str:
        return f"{self.name} <{self.email}> {self.timestamp} {self.tz_offset}"

    @classmethod
    def parse(cls, text: str) -> "Signature":
        """Parse the value of an author/committer header.

        Raises:
            ObjectDecodeError: If angle brackets, timestamp or offset are
                missing or malformed
        """
        lt = text.find("<")
        gt = text.find(">", lt + 1)
        if lt < 1 or gt < 0 or text[lt - 1] != " ":
            raise ObjectDecodeError(f"Malformed signature: {text!r}")

        name = text[:lt - 1]
        email = text[lt + 1:gt]
        rest = text[gt + 1:]
        if not rest.startswith(" "):
            raise ObjectDecodeError(f"Malformed signature: {text!r}")
        fields = rest[1:].split(" ")
        if len(fields) != 2 or not (fields[0].isascii() and fields[0].isdigit()):
            raise ObjectDecodeError(f"Malformed signature timestamp: {text!r}")

        try:
            return cls(name, email, int(fields[0]), fields[1])
        except ValueError as e:
            raise ObjectDecodeError(f"Malformed signature: {e}") from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signature):
            return NotImplemented
        return self.encode() == other.encode()

    def __hash__(self) -> int:
        return hash(self.encode())

    def __repr__(self) -> str:
        return f"Signature({self.encode()!r})"


class Commit(GitObject):
    """A snapshot pointer: one tree, zero or more parents, and metadata.

    Attributes:
        tree_id: Identifier of the root tree
        parent_ids: Identifiers of parent commits (empty for a root commit)
        author: Author signature
        committer: Committer signature
        message: Commit message without the encoding's trailing newline
        tree: Decoded root tree, if materialized
        parents: Decoded parent commits, if materialized or loadable through
            ``parent_loader``
    """

    type_name = COMMIT_TYPE

    def __init__(
        self,
        tree_id: str,
        parent_ids: Sequence[str],
        author: Signature,
        committer: Signature,
        message: str,
        tree: Optional[Tree] = None,
        parents: Optional[Sequence["Commit"]] = None,
        parent_loader: Optional[Resolver] = None,
    ):
        validate_object_id(tree_id)
        for parent_id in parent_ids:
            validate_object_id(parent_id)
        if tree is not None and tree.id != tree_id:
            raise ValueError(f"Tree object {tree.id} does not match tree id {tree_id}")
        if parents is not None and [p.id for p in parents] != list(parent_ids):
            raise ValueError("Parent objects do not match parent ids")

        self.tree_id = tree_id
        self.parent_ids = tuple(parent_ids)
        self.author = author
        self.committer = committer
        self.message = message
        self.tree = tree
        self._parents = tuple(parents) if parents is not None else None
        self._parent_loader = parent_loader

        lines = [f"tree {tree_id}"]
        lines.extend(f"parent {parent_id}" for parent_id in self.parent_ids)
        lines.append(f"author {author.encode()}")
        lines.append(f"committer {committer.encode()}")
        text = "\n".join(lines) + "\n\n" + message + "\n"
        self._finalize(text.encode("utf-8"))

    @property
    def parents(self) -> Optional[Tuple["Commit", ...]]:
        """Decoded parent commits, or None when they were never attached.

        Parents handed over by a decoder are loaded on first access, one
        generation at a time, so decoding a commit never walks its history.

        Raises:
            ObjectTypeError: If a loaded parent is not a commit
        """
        if self._parents is None and self._parent_loader is not None:
            parents = []
            for parent_id in self.parent_ids:
                parent = self._parent_loader(parent_id)
                if not isinstance(parent, Commit):
                    raise ObjectTypeError(
                        f"Commit parent {parent_id} is a {parent.type_name}, not a commit"
                    )
                parents.append(parent)
            self._parents = tuple(parents)
        return self._parents

    @property
    def is_root(self) -> bool:
        return not self.parent_ids

    @property
    def author_name(self) -> str:
        return self.author.name

    @property
    def author_email(self) -> str:
        return self.author.email

    @property
    def committer_name(self) -> str:
        return self.committer.name

    @property
    def committer_email(self) -> str:
        return self.committer.email

    @classmethod
    def from_payload(cls, payload: bytes, resolve: Optional[Resolver] = None) -> "Commit":
        """Parse a commit payload.

        Header lines must appear in the order tree, parent*, author,
        committer, followed by a blank line and the message. With
        ``resolve`` the tree is materialized immediately, while parents are
        only looked up when ``parents`` is first read.

        Raises:
            ObjectEncodingError: If the payload is not valid UTF-8
            ObjectDecodeError: If a header is missing, out of order or malformed
            ObjectTypeError: If the resolved tree is not a tree
        """
        try:
            text = payload.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ObjectEncodingError(f"Commit is not valid UTF-8: {e}") from e

        header, sep, body = text.partition("\n\n")
        if not sep:
            raise ObjectDecodeError("Commit has no blank line before the message")
        if not body.endswith("\n"):
            raise ObjectDecodeError("Commit message is missing its trailing newline")
        message = body[:-1]

        lines = header.split("\n")
        pos = 0

        def take(key: str) -> Optional[str]:
            nonlocal pos
            if pos < len(lines) and lines[pos].startswith(key + " "):
                value = lines[pos][len(key) + 1:]
                pos += 1
                return value
            return None

        tree_id = take("tree")
        if tree_id is None:
            raise ObjectDecodeError("Commit is missing its 'tree' header")
        parent_ids = []
        while True:
            parent_id = take("parent")
            if parent_id is None:
                break
            parent_ids.append(parent_id)
        author = take("author")
        if author is None:
            raise ObjectDecodeError("Commit is missing its 'author' header")
        committer = take("committer")
        if committer is None:
            raise ObjectDecodeError("Commit is missing its 'committer' header")
        if pos != len(lines):
            raise ObjectDecodeError(f"Unexpected commit header line: {lines[pos]!r}")

        for object_id in [tree_id] + parent_ids:
            try:
                validate_object_id(object_id)
            except ValueError as e:
                raise ObjectDecodeError(f"Invalid id in commit header: {e}") from e

        tree = None
        if resolve is not None:
            tree_obj = resolve(tree_id)
            if not isinstance(tree_obj, Tree):
                raise ObjectTypeError(f"Commit tree {tree_id} is a {tree_obj.type_name}, not a tree")
            tree = tree_obj

        commit = cls(
            tree_id,
            parent_ids,
            Signature.parse(author),
            Signature.parse(committer),
            message,
            tree=tree,
            parent_loader=resolve,
        )
        commit._finalize(payload)
        return commit


_OBJECT_CLASSES = {cls.type_name: cls for cls in (Blob, Tree, Commit)}


def parse_object(raw: bytes, resolve: Optional[Resolver] = None) -> GitObject:
    """Parse decompressed canonical bytes into an object.

    Args:
        raw: Canonical encoding ("<type> <size>\\0<payload>")
        resolve: Optional lookup used to materialize tree/commit children

    Raises:
        ObjectDecodeError: If framing or payload is malformed
    """
    type_name, payload = parse_frame(raw)
    return _OBJECT_CLASSES[type_name].from_payload(payload, resolve)
