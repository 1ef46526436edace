"""Rendering helpers for plumbing output.

These functions turn decoded objects into the byte/text forms printed by
``cat-file`` and ``ls-tree``. They never write to a stream themselves.
"""

from typing import List

from gitplumb.exceptions import ObjectEncodingError
from gitplumb.objects.model import Blob, Commit, GitObject, Tree


def pretty_print(obj: GitObject) -> bytes:
    """Render an object's payload for display.

    Blobs are returned verbatim, trees as one ``ls-tree`` line per entry,
    and commits as their canonical text.
    """
    if isinstance(obj, Blob):
        return obj.content
    if isinstance(obj, Tree):
        lines = format_tree_entries(obj)
        if not lines:
            return b""
        return ("\n".join(lines) + "\n").encode("utf-8", "surrogateescape")
    if isinstance(obj, Commit):
        return obj.payload
    raise TypeError(f"Cannot render {type(obj).__name__}")


def type_string(obj: GitObject) -> str:
    return obj.type_name


def size_string(obj: GitObject) -> str:
    return str(obj.size)


def format_tree_entries(tree: Tree, name_only: bool = False) -> List[str]:
    """Format tree entries like ``ls-tree``.

    Args:
        tree: Tree to list
        name_only: Emit only entry names

    Returns:
        Lines of the form ``"<mode> <type> <id>\\t<name>"``, or bare names
    """
    if name_only:
        return [entry.name for entry in tree.entries]
    return [
        f"{entry.mode.display} {entry.object_type} {entry.child_id}\t{entry.name}"
        for entry in tree.entries
    ]


def decode_text(data: bytes, what: str = "object") -> str:
    """Decode bytes that are about to be shown as text.

    Raises:
        ObjectEncodingError: If ``data`` is not valid UTF-8
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ObjectEncodingError(f"{what} is not valid UTF-8 text: {e}") from e
