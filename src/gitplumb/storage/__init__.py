"""Storage layer for gitplumb.

This module provides the loose object store, the zlib codec, the object
database façade and the tree/commit builders.
"""

from gitplumb.storage.commit_builder import CommitBuilder
from gitplumb.storage.database import ObjectDatabase
from gitplumb.storage.object_store import ObjectStore
from gitplumb.storage.tree_builder import TreeBuilder

__all__ = [
    "ObjectStore",
    "ObjectDatabase",
    "TreeBuilder",
    "CommitBuilder",
]
