# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import dataclasses
import logging

from gitlanes.backend import CommitFacts, Oid, RepoBackend
from gitlanes.graph.commitnode import NodeArena, NodeBuilder
from gitlanes.graph.drawprops import RowDrawProperty, emitRowProperties
from gitlanes.graph.laneweaver import LaneWeaver, weaveLanes
from gitlanes.graph.revwalk import walkRevisions
from gitlanes.graph.rowdiff import DiffHint, DiffResult, diffRows
from gitlanes.toolbox import Benchmark

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class LayoutSnapshot:
    """
    Outcome of the last successful layout computation.
    Never mutated once published: the next computation builds a new one.
    """

    sequence: tuple[Oid, ...] = ()
    arena: NodeArena = dataclasses.field(default_factory=NodeArena)
    rowProps: dict[Oid, RowDrawProperty] = dataclasses.field(default_factory=dict)
    truncated: bool = False
    peakLaneCount: int = 0

    def __len__(self):
        return len(self.sequence)

    def __contains__(self, oid: Oid):
        return oid in self.rowProps

    def lanes(self) -> dict[Oid, int]:
        return {oid: p.lane for oid, p in self.rowProps.items()}


@dataclasses.dataclass
class LayoutDelta:
    diff: DiffResult
    created: list[RowDrawProperty]
    """ Draw properties of the created rows, in row order. """

    updated: list[RowDrawProperty]
    """ Surviving rows whose position, lane or connectors changed. Empty on a full reset. """

    truncated: bool = False


def computeLayout(
        backend: RepoBackend,
        previous: LayoutSnapshot,
        hint: DiffHint,
        maxCommits: int = 0,
) -> tuple[LayoutSnapshot, LayoutDelta]:
    """
    Walk the repository, diff the walk against the previous snapshot and lay
    out the whole graph again. `previous` is left untouched, so the caller can
    keep it if anything raises.
    """

    with Benchmark("computeLayout") as bench:
        bench.enter("walk")
        walk = walkRevisions(backend, maxCommits)

        bench.enter("diff")
        diff = diffRows(previous.sequence, walk.sequence, hint)

        def fetch(oid: Oid) -> CommitFacts:
            try:
                return walk.facts[oid]
            except KeyError:
                return backend.readCommit(oid)

        bench.enter("build")
        arena = NodeBuilder(previous.arena, fetch).build(diff)
        assert len(arena) == len(walk.sequence), "arena is out of sync with the walk"

        bench.enter("weave")
        weaver: LaneWeaver = weaveLanes(walk.sequence, arena)

        bench.enter("emit")
        props = emitRowProperties(walk.sequence, arena, weaver)

    created = [props[change.oid] for change in diff.created]

    if diff.fullReset:
        updated = []
    else:
        createdOids = {change.oid for change in diff.created}
        updated = [p for oid, p in props.items()
                   if oid not in createdOids and previous.rowProps.get(oid) != p]

    snapshot = LayoutSnapshot(
        sequence=tuple(walk.sequence),
        arena=arena,
        rowProps=props,
        truncated=walk.truncated,
        peakLaneCount=weaver.peakLaneCount)

    delta = LayoutDelta(diff=diff, created=created, updated=updated, truncated=walk.truncated)

    logger.info(f"Layout: {len(snapshot)} rows, {weaver.peakLaneCount} lanes, "
                f"+{len(created)} ~{len(updated)} -{len(diff.deleted)}"
                f"{' (full reset)' if diff.fullReset else ''}")

    return snapshot, delta
