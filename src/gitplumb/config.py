"""Runtime configuration for gitplumb.

Settings are read from environment variables, falling back to values
derived from the current user and host:

    GITPLUMB_AUTHOR_NAME    identity name written into commits
    GITPLUMB_AUTHOR_EMAIL   identity email written into commits
    GITPLUMB_TZ_OFFSET      timezone offset for new commits (e.g. "+0200")
    GITPLUMB_MAX_DEPTH      maximum depth when resolving object graphs
"""

import os
import re
import socket
import time
from typing import Mapping, Optional

from gitplumb.constants import DEFAULT_MAX_DEPTH

_TZ_PATTERN = re.compile(r"^[+-]\d{4}$")
_FORBIDDEN_IDENTITY_CHARS = ("<", ">", "\n")


class Identity:
    """Author/committer identity stamped onto new commits.

    Attributes:
        name: Display name (no angle brackets or newlines)
        email: Email address (no angle brackets, spaces or newlines)
    """

    def __init__(self, name: str, email: str):
        _check_identity_field("name", name)
        _check_identity_field("email", email)
        if not name.strip():
            raise ValueError("Identity name must not be empty")
        if " " in email:
            raise ValueError(f"Identity email must not contain spaces: {email!r}")
        self.name = name
        self.email = email

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return (self.name, self.email) == (other.name, other.email)

    def __repr__(self) -> str:
        return f"Identity({self.name!r}, {self.email!r})"


class Settings:
    """Resolved configuration for one gitplumb invocation.

    Attributes:
        identity: Identity used for both author and committer
        tz_offset: Fixed timezone offset ("+HHMM"), or None for local time
        max_depth: Maximum recursion depth when decoding object graphs
    """

    def __init__(
        self,
        identity: Identity,
        tz_offset: Optional[str] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        if tz_offset is not None:
            validate_tz_offset(tz_offset)
        if max_depth < 1:
            raise ValueError(f"max_depth must be positive, got {max_depth}")
        self.identity = identity
        self.tz_offset = tz_offset
        self.max_depth = max_depth

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Validated Settings instance

        Raises:
            ValueError: If any configured value is malformed
        """
        env = os.environ if environ is None else environ

        username = env.get("USER") or env.get("USERNAME") or "unknown"
        hostname = socket.gethostname() or "localhost"

        name = env.get("GITPLUMB_AUTHOR_NAME") or username
        email = env.get("GITPLUMB_AUTHOR_EMAIL") or f"{username}@{hostname}"
        tz_offset = env.get("GITPLUMB_TZ_OFFSET") or None

        raw_depth = env.get("GITPLUMB_MAX_DEPTH")
        if raw_depth:
            try:
                max_depth = int(raw_depth)
            except ValueError as e:
                raise ValueError(
                    f"GITPLUMB_MAX_DEPTH must be an integer, got {raw_depth!r}"
                ) from e
        else:
            max_depth = DEFAULT_MAX_DEPTH

        return cls(Identity(name, email), tz_offset=tz_offset, max_depth=max_depth)


def validate_tz_offset(tz_offset: str) -> None:
    """Validate a "+HHMM"/"-HHMM" timezone offset.

    Raises:
        ValueError: If the offset is malformed
    """
    if not isinstance(tz_offset, str) or not _TZ_PATTERN.match(tz_offset):
        raise ValueError(f"Timezone offset must look like +HHMM, got {tz_offset!r}")
    if int(tz_offset[3:]) >= 60:
        raise ValueError(f"Timezone minutes out of range: {tz_offset!r}")


def local_tz_offset(timestamp: float) -> str:
    """Return the local timezone offset at ``timestamp`` as "+HHMM"."""
    offset = time.localtime(timestamp).tm_gmtoff
    sign = "-" if offset < 0 else "+"
    hours, minutes = divmod(abs(offset) // 60, 60)
    return f"{sign}{hours:02d}{minutes:02d}"


def _check_identity_field(field: str, value: str) -> None:
    if not isinstance(value, str):
        raise ValueError(f"Identity {field} must be a string, got {type(value)}")
    for char in _FORBIDDEN_IDENTITY_CHARS:
        if char in value:
            raise ValueError(f"Identity {field} must not contain {char!r}: {value!r}")
