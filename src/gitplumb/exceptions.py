"""Exception hierarchy for gitplumb.

Filesystem failures are not wrapped: they surface as the ``OSError`` raised
by the underlying call.
"""


class GitPlumbError(Exception):
    """Base class for all gitplumb errors."""


class ObjectNotFoundError(GitPlumbError):
    """Raised when an object identifier has no backing file in the store."""


class ObjectDecodeError(GitPlumbError):
    """Raised when a stored object is corrupt or its framing is malformed."""


class ObjectCorruptedError(ObjectDecodeError):
    """Raised when an object's content does not hash to its identifier."""


class ObjectTypeError(GitPlumbError):
    """Raised when an object of one kind is used where another is required."""


class ObjectEncodingError(GitPlumbError):
    """Raised when bytes that must be read as text are not valid UTF-8."""


class RepositoryNotFoundError(GitPlumbError):
    """Raised when no object store can be located."""


class ObjectGraphTooDeepError(GitPlumbError):
    """Raised when resolving an object graph nests deeper than the configured limit."""
