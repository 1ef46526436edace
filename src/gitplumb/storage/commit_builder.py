"""Commit object builder.

This module composes commit objects from an existing tree and parent
commits, stamping them with the configured identity and the current time.
"""

import logging
import time
from typing import Callable, List, Optional, Sequence

from gitplumb.config import Identity, local_tz_offset, validate_tz_offset
from gitplumb.exceptions import ObjectTypeError
from gitplumb.objects.model import Commit, Signature, Tree
from gitplumb.storage.database import ObjectDatabase

logger = logging.getLogger(__name__)


class CommitBuilder:
    """Builder for commit objects.

    The tree and parents must already be stored; the builder checks their
    kinds but never rewrites them. Author and committer are both set to
    ``identity``.

    Attributes:
        database: ObjectDatabase used to look up the tree and parents
        identity: Identity stamped on new commits
        clock: Callable returning the current time in epoch seconds
        tz_offset: Fixed "+HHMM" offset, or None to use the local offset
    """

    def __init__(
        self,
        database: ObjectDatabase,
        identity: Identity,
        clock: Callable[[], float] = time.time,
        tz_offset: Optional[str] = None,
    ):
        if tz_offset is not None:
            validate_tz_offset(tz_offset)
        self.database = database
        self.identity = identity
        self.clock = clock
        self.tz_offset = tz_offset

    def build_commit(
        self,
        message: str,
        tree_id: str,
        parent_ids: Optional[Sequence[str]] = None,
    ) -> Commit:
        """Create a new commit object.

        Args:
            message: Commit message
            tree_id: Identifier of a stored tree
            parent_ids: Identifiers of stored parent commits (None or empty
                for a root commit)

        Returns:
            In-memory Commit carrying the decoded tree and parents (not persisted)

        Raises:
            ObjectNotFoundError: If the tree or a parent is not stored
            ObjectTypeError: If tree_id is not a tree or a parent is not a commit
        """
        tree = self.database.decode_object(tree_id, resolve=False)
        if not isinstance(tree, Tree):
            raise ObjectTypeError(f"Not a tree object: {tree_id} is a {tree.type_name}")

        parents: List[Commit] = []
        for parent_id in parent_ids or ():
            parent = self.database.decode_object(parent_id, resolve=False)
            if not isinstance(parent, Commit):
                raise ObjectTypeError(
                    f"Not a commit object: parent {parent_id} is a {parent.type_name}"
                )
            parents.append(parent)

        timestamp = int(self.clock())
        tz_offset = self.tz_offset or local_tz_offset(timestamp)
        signature = Signature(self.identity.name, self.identity.email, timestamp, tz_offset)

        commit = Commit(
            tree.id,
            [parent.id for parent in parents],
            author=signature,
            committer=signature,
            message=message,
            tree=tree,
            parents=parents,
        )
        logger.debug(
            "Built commit %s (tree %s, %d parent(s))", commit.id, tree.id, len(parents)
        )
        return commit
