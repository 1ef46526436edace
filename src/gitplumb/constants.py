"""Constants used throughout gitplumb."""

# Version
VERSION = "0.1.0"

# Directory names
GIT_DIR = ".git"
OBJECTS_DIR = "objects"
REFS_DIR = "refs"
HEADS_DIR = "heads"

# File names
HEAD_FILE = "HEAD"
IGNORE_FILE = ".gitplumbignore"

# Default branch HEAD points at
DEFAULT_BRANCH = "main"
DEFAULT_HEAD_CONTENT = f"ref: {REFS_DIR}/{HEADS_DIR}/{DEFAULT_BRANCH}\n"

# Hash algorithm
HASH_ALGORITHM = "sha1"
HASH_LENGTH = 40  # SHA-1 produces 40 hex characters
DIGEST_SIZE = 20  # raw bytes per identifier inside tree payloads
MIN_PREFIX_LENGTH = 4

# Object type tags
BLOB_TYPE = "blob"
TREE_TYPE = "tree"
COMMIT_TYPE = "commit"
OBJECT_TYPES = (BLOB_TYPE, TREE_TYPE, COMMIT_TYPE)

# Identifier of the canonical encoding b"tree 0\x00"
EMPTY_TREE_ID = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

# zlib level used for loose objects (does not affect identifiers)
COMPRESSION_LEVEL = 6

# Upper bound on child resolution depth when decoding object graphs
DEFAULT_MAX_DEPTH = 1024

# Exit codes
EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2
EXIT_DATA_ERROR = 3
EXIT_INTERRUPTED = 130
