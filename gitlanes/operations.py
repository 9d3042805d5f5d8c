# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import dataclasses
import enum

from gitlanes.graph.rowdiff import DiffHint


class Operation(enum.StrEnum):
    REPO_OPENED = "repository-opened"
    CHECKOUT = "checkout"
    CHECKOUT_REMOTE_BRANCH = "checkout-remote-branch"
    FETCH = "fetch"
    PULL = "pull"
    PUSH = "push"
    FORCE_PUSH = "force-push"
    REF_CHANGED = "ref-pointer-changed-only"
    REFRESH = "manual-refresh"
    COMMIT = "commit"
    AMEND = "amend"
    STAGE = "stage"
    UNSTAGE = "unstage"


@dataclasses.dataclass(frozen=True)
class Classification:
    needsWalk: bool
    """ False if the reachable commits can't have changed; only ref labels get recomputed. """

    hint: DiffHint
    """ Expected shape of the change, for the row differ. """


_TABLE = {
    Operation.FETCH:                    Classification(True, DiffHint.PREPEND_ONLY),
    Operation.PULL:                     Classification(True, DiffHint.PREPEND_ONLY),
    Operation.COMMIT:                   Classification(True, DiffHint.PREPEND_ONLY),
    Operation.PUSH:                     Classification(True, DiffHint.POSSIBLE_REWRITE),
    Operation.FORCE_PUSH:               Classification(True, DiffHint.POSSIBLE_REWRITE),
    Operation.AMEND:                    Classification(True, DiffHint.POSSIBLE_REWRITE),
    Operation.REPO_OPENED:              Classification(True, DiffHint.UNKNOWN),
    Operation.CHECKOUT:                 Classification(True, DiffHint.UNKNOWN),
    Operation.CHECKOUT_REMOTE_BRANCH:   Classification(True, DiffHint.UNKNOWN),
    Operation.REFRESH:                  Classification(True, DiffHint.UNKNOWN),
    Operation.REF_CHANGED:              Classification(False, DiffHint.UNKNOWN),
    Operation.STAGE:                    Classification(False, DiffHint.UNKNOWN),
    Operation.UNSTAGE:                  Classification(False, DiffHint.UNKNOWN),
}


def classify(operation: Operation | str) -> Classification:
    """
    Map a triggering action to whether a revision walk is needed and which
    diff strategy to try first. Raises ValueError for unknown operation tags.
    """
    return _TABLE[Operation(operation)]
