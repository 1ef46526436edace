"""zlib codec for loose objects.

Compression is applied after the identifier is computed, so the level
never influences object identity.
"""

import zlib

from gitplumb.constants import COMPRESSION_LEVEL
from gitplumb.exceptions import ObjectDecodeError


def compress(data: bytes) -> bytes:
    """Compress canonical object bytes for storage."""
    return zlib.compress(data, COMPRESSION_LEVEL)


def decompress(data: bytes) -> bytes:
    """Decompress a stored object.

    Args:
        data: zlib stream as read from the object store

    Returns:
        Canonical object bytes

    Raises:
        ObjectDecodeError: If the stream is corrupt, truncated, or followed
            by trailing garbage
    """
    decompressor = zlib.decompressobj()
    try:
        content = decompressor.decompress(data)
        content += decompressor.flush()
    except zlib.error as e:
        raise ObjectDecodeError(f"Corrupt compressed object: {e}") from e

    if not decompressor.eof:
        raise ObjectDecodeError("Corrupt compressed object: truncated stream")
    if decompressor.unused_data:
        raise ObjectDecodeError(
            f"Corrupt compressed object: {len(decompressor.unused_data)} "
            "trailing bytes after stream"
        )
    return content
