"""Object identifiers.

An identifier is the SHA-1 digest of an object's full canonical encoding
(header included), rendered as 40 lowercase hex characters. Tree payloads
embed the same digest in its raw 20-byte form.
"""

import hashlib

from gitplumb.constants import DIGEST_SIZE, HASH_ALGORITHM, HASH_LENGTH

HEX_DIGITS = frozenset("0123456789abcdef")


def identifier_of(data: bytes) -> str:
    """Compute the identifier of a canonical encoding.

    Args:
        data: Full canonical bytes ("<type> <size>\\0<payload>")

    Returns:
        Hex digest (40 lowercase characters)
    """
    hasher = hashlib.new(HASH_ALGORITHM)
    hasher.update(data)
    return hasher.hexdigest()


def hex_to_raw(object_id: str) -> bytes:
    """Convert a hex identifier to its raw digest bytes."""
    validate_object_id(object_id)
    return bytes.fromhex(object_id)


def raw_to_hex(raw: bytes) -> str:
    """Convert raw digest bytes to a hex identifier.

    Raises:
        ValueError: If ``raw`` is not exactly one digest wide
    """
    if len(raw) != DIGEST_SIZE:
        raise ValueError(f"Raw digest must be {DIGEST_SIZE} bytes, got {len(raw)}")
    return raw.hex()


def is_object_id(value: object) -> bool:
    """Return True if ``value`` is a well-formed hex identifier."""
    try:
        validate_object_id(value)  # type: ignore[arg-type]
    except ValueError:
        return False
    return True


def validate_object_id(object_id: str) -> None:
    """Validate that an identifier string is properly formatted.

    Args:
        object_id: Identifier to validate

    Raises:
        ValueError: If the identifier is not 40 lowercase hex characters
    """
    if not isinstance(object_id, str):
        raise ValueError(f"Object id must be string, got {type(object_id)}")

    if len(object_id) != HASH_LENGTH:
        raise ValueError(
            f"Object id must be {HASH_LENGTH} characters, got {len(object_id)}"
        )

    if not HEX_DIGITS.issuperset(object_id):
        raise ValueError(f"Object id must be lowercase hexadecimal: {object_id!r}")
