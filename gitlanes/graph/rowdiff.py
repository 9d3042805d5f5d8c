# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Compare the oid sequence of a fresh revision walk against the sequence of
the previous walk, and boil the difference down to created and deleted rows.

Rows that survive keep their oid but may still move (e.g. everything shifts
down when commits appear on top), so downstream stages re-derive row indices
and lanes for the whole walk. The diff only tells them which commits are new
and which ones are gone.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Sequence

from gitlanes.backend import Oid

logger = logging.getLogger(__name__)


class DiffHint(enum.Enum):
    PREPEND_ONLY = enum.auto()
    """ New commits may only have appeared above the existing history (fetch, pull, commit). """

    POSSIBLE_REWRITE = enum.auto()
    """ The top of history may have been replaced (push, force-push, amend). """

    UNKNOWN = enum.auto()
    """ Anything goes (repository opened, checkout, manual refresh). """


class ChangeKind(enum.StrEnum):
    CREATED = "created"
    DELETED = "deleted"


@dataclasses.dataclass(frozen=True)
class RowChange:
    oid: Oid
    row: int
    kind: ChangeKind


@dataclasses.dataclass
class DiffResult:
    created: list[RowChange] = dataclasses.field(default_factory=list)
    """ Rows of the new sequence (new row indices). """

    deleted: list[RowChange] = dataclasses.field(default_factory=list)
    """ Rows of the previous sequence (old row indices). """

    fullReset: bool = False
    """ If set, `created` holds every new row and `deleted` every old row. Rebuild everything. """

    def isEmpty(self):
        return not self.created and not self.deleted and not self.fullReset

    def __repr__(self):
        return (f"DiffResult(+{len(self.created)} -{len(self.deleted)}"
                f"{' RESET' if self.fullReset else ''})")


def _created(sequence: Sequence[Oid], rows: range | Sequence[int]) -> list[RowChange]:
    return [RowChange(sequence[i], i, ChangeKind.CREATED) for i in rows]


def _deleted(sequence: Sequence[Oid], rows: range | Sequence[int]) -> list[RowChange]:
    return [RowChange(sequence[i], i, ChangeKind.DELETED) for i in rows]


def fullReset(previous: Sequence[Oid], current: Sequence[Oid]) -> DiffResult:
    return DiffResult(
        created=_created(current, range(len(current))),
        deleted=_deleted(previous, range(len(previous))),
        fullReset=True)


def matchPrepend(previous: Sequence[Oid], current: Sequence[Oid]) -> DiffResult | None:
    """
    Find the top of the previous sequence in the current one and make sure
    that the previous rows follow it in the same order. Everything above the
    match point is created.

    Old rows that fall past the end of the current sequence (only possible
    if the walk was truncated) are deleted; new rows past the end of the
    previous sequence (the commit limit was raised) are created.

    Returns None if there's no stable match point.
    """
    assert previous

    try:
        k = current.index(previous[0])
    except ValueError:
        return None

    overlap = min(len(current) - k, len(previous))
    for i in range(overlap):
        if current[k + i] != previous[i]:
            return None

    created = list(range(k)) + list(range(k + overlap, len(current)))
    return DiffResult(
        created=_created(current, created),
        deleted=_deleted(previous, range(overlap, len(previous))))


def matchSuffix(previous: Sequence[Oid], current: Sequence[Oid]) -> DiffResult | None:
    """
    Find the longest common suffix of both sequences (the shared ancestry).
    Rows above the divergence point are deleted from the previous sequence and
    created in the current one.

    Returns None if the sequences share no suffix at all.
    """
    assert previous

    suffix = 0
    while (suffix < len(previous) and suffix < len(current)
           and previous[-1 - suffix] == current[-1 - suffix]):
        suffix += 1

    if suffix == 0:
        return None

    oldTop = len(previous) - suffix
    newTop = len(current) - suffix

    return DiffResult(
        created=_created(current, range(newTop)),
        deleted=_deleted(previous, range(oldTop)))


def diffRows(previous: Sequence[Oid], current: Sequence[Oid], hint: DiffHint) -> DiffResult:
    """
    Compute the row changes that turn `previous` into `current`.

    An ambiguous alignment isn't an error: it escalates to a full reset,
    which always yields a correct (if more expensive) layout.
    """

    if list(previous) == list(current):
        return DiffResult()

    if not previous:
        # Empty baseline: every row is new, but there's nothing to tear down
        return DiffResult(created=_created(current, range(len(current))))

    if hint == DiffHint.PREPEND_ONLY:
        strategies = [matchPrepend]
    elif hint == DiffHint.POSSIBLE_REWRITE:
        strategies = [matchSuffix]
    else:
        strategies = [matchPrepend, matchSuffix]

    for strategy in strategies:
        result = strategy(previous, current)
        if result is not None:
            logger.debug(f"{strategy.__name__}: {result}")
            return result

    logger.info(f"No stable alignment for hint {hint.name}, resetting the whole graph")
    return fullReset(previous, current)
