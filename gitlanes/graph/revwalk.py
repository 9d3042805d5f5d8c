# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import dataclasses
import heapq
import logging
from collections.abc import Callable, Iterable, Iterator

from gitlanes import settings
from gitlanes.backend import CommitFacts, MalformedDataError, Oid, RepoBackend
from gitlanes.toolbox import Benchmark

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class WalkResult:
    sequence: list[Oid]
    """ Oids newest first. A commit's row is its index in this list. """

    facts: dict[Oid, CommitFacts]
    """ Facts gathered during the walk, so that the node builder needn't fetch them again. """

    truncated: bool = False
    """ The walk stopped at the commit limit; some parents may lie past the bottom row. """

    def rowOf(self) -> dict[Oid, int]:
        return {oid: row for row, oid in enumerate(self.sequence)}


def sortNewestFirst(
        tips: Iterable[Oid],
        lookup: Callable[[Oid], CommitFacts],
) -> Iterator[CommitFacts]:
    """
    Order the commits reachable from `tips` newest first, never yielding a
    commit before all of its children. Commits with the same commit time come
    out in the order they were discovered (tips first, then depth-first along
    parents).
    """

    # Discover the reachable set
    discovery: dict[Oid, int] = {}
    facts: dict[Oid, CommitFacts] = {}
    stack = list(reversed(list(tips)))
    while stack:
        oid = stack.pop()
        if oid in discovery:
            continue
        commit = lookup(oid)
        discovery[oid] = len(discovery)
        facts[oid] = commit
        stack.extend(p for p in reversed(commit.parentOids) if p not in discovery)

    # Count unvisited children per commit
    pendingChildren = dict.fromkeys(facts, 0)
    for commit in facts.values():
        for parent in set(commit.parentOids):
            pendingChildren[parent] += 1

    def heapKey(c: CommitFacts):
        return -c.commitTime, discovery[c.oid], c.oid

    ready = [heapKey(c) for c in facts.values() if pendingChildren[c.oid] == 0]
    heapq.heapify(ready)

    while ready:
        _, _, oid = heapq.heappop(ready)
        commit = facts[oid]
        yield commit
        for parent in set(commit.parentOids):
            pendingChildren[parent] -= 1
            if pendingChildren[parent] == 0:
                heapq.heappush(ready, heapKey(facts[parent]))


def walkRevisions(backend: RepoBackend, maxCommits: int = 0) -> WalkResult:
    sequence = []
    facts = {}
    truncated = False

    with Benchmark("walkRevisions"):
        for commit in backend.walkCommits(maxCommits):
            if commit.oid in facts:
                raise MalformedDataError(f"commit {commit.oid} came out of the walk twice")
            sequence.append(commit.oid)
            facts[commit.oid] = commit

    # Did the limit cut off any ancestry?
    if maxCommits and len(sequence) >= maxCommits:
        truncated = any(p not in facts for c in facts.values() for p in c.parentOids)

    result = WalkResult(sequence, facts, truncated)

    if settings.DEVDEBUG:
        rows = result.rowOf()
        for commit in facts.values():
            for parent in commit.parentOids:
                assert rows.get(parent, len(sequence)) > rows[commit.oid], \
                    f"parent {parent} comes before its child {commit.oid} in the walk"

    logger.debug(f"Walked {len(sequence)} commits (truncated: {truncated})")
    return result
