"""gitplumb - Git-compatible object database plumbing.

gitplumb stores blobs, trees and commits as content-addressed, zlib-compressed
loose objects, byte-compatible with Git's on-disk object format.
"""

__version__ = "0.1.0"
__author__ = "gitplumb Contributors"

__all__ = ["__version__", "__author__"]
