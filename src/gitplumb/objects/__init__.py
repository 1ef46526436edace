"""Object model for gitplumb.

Blobs, trees and commits together with their canonical binary encodings.
"""

from gitplumb.objects.model import (
    Blob,
    Commit,
    FileMode,
    GitObject,
    Signature,
    Tree,
    TreeEntry,
    frame,
    parse_frame,
    parse_object,
)

__all__ = [
    "GitObject",
    "Blob",
    "Tree",
    "TreeEntry",
    "Commit",
    "Signature",
    "FileMode",
    "frame",
    "parse_frame",
    "parse_object",
]
