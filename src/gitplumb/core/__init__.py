"""Core repository functionality for gitplumb."""

from gitplumb.core.repository import (
    ensure_store_exists,
    find_store,
    load_ignore_patterns,
    open_database,
)

__all__ = [
    "ensure_store_exists",
    "find_store",
    "load_ignore_patterns",
    "open_database",
]
