# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import bisect
import collections
import dataclasses
import logging
from collections.abc import Sequence

from gitlanes import settings
from gitlanes.backend import Oid
from gitlanes.graph.commitnode import NodeArena
from gitlanes.toolbox import Benchmark

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class Reservation:
    """
    A lane held by an edge that is waiting for its target commit to appear
    further down the walk.
    """

    lane: int
    target: Oid
    openedBy: Oid
    openedAt: int
    closedAt: int = -1
    refCount: int = 1
    """ Number of children whose edge to `target` runs through this reservation. """

    junctions: list[tuple[int, Oid]] = dataclasses.field(default_factory=list)
    """ (row, child) pairs for children that plugged into this reservation after it was opened. """

    def __repr__(self):
        return f"Reservation({self.openedBy}->{self.target} @{self.lane} rows {self.openedAt}..{self.closedAt})"


@dataclasses.dataclass(frozen=True)
class OccupiedRow:
    row: int
    oid: Oid
    lane: int
    """ The commit's own lane. """

    lanesBefore: frozenset[int]
    """ Lanes open above the commit. """

    lanesAfter: frozenset[int]
    """ Lanes open below the commit. """

    passing: frozenset[int]
    """ Lanes whose reservations flow through this row without touching the commit. """


class OccupiedTable:
    """ Per-row record of which lanes are taken. """

    def __init__(self):
        self.rows: list[OccupiedRow] = []

    def __len__(self):
        return len(self.rows)

    def __getitem__(self, row: int) -> OccupiedRow:
        return self.rows[row]

    def __iter__(self):
        return iter(self.rows)


class LaneWeaver:
    """
    Assign a lane to each commit of a walk, newest to oldest.

    Each commit opens one reservation per parent. The first parent inherits
    the commit's own lane, so a straight line of history stays in one lane.
    Further parents plug into a reservation that already targets them, or
    take the leftmost free lane.
    """

    freeLanes: list[int]
    openLanes: list[Reservation | None]
    parentLookup: collections.defaultdict[Oid, list[Reservation]]
    lanes: dict[Oid, int]
    edges: dict[Oid, dict[Oid, Reservation]]
    table: OccupiedTable
    peakLaneCount: int

    def __init__(self):
        self.freeLanes = []
        self.openLanes = []
        self.parentLookup = collections.defaultdict(list)
        self.lanes = {}
        self.edges = {}
        self.table = OccupiedTable()
        self.peakLaneCount = 0
        self.row = -1

    def _claimLane(self) -> int:
        if self.freeLanes:
            # Pick leftmost free lane
            return self.freeLanes.pop(0)
        # All lanes are taken; add one on the right
        self.openLanes.append(None)
        return len(self.openLanes) - 1

    def _reserve(self, lane: int, target: Oid, openedBy: Oid, row: int) -> Reservation:
        assert self.openLanes[lane] is None, f"lane {lane} is already held by {self.openLanes[lane]}"
        reservation = Reservation(lane=lane, target=target, openedBy=openedBy, openedAt=row)
        self.openLanes[lane] = reservation
        self.parentLookup[target].append(reservation)
        return reservation

    def newCommit(self, me: Oid, myParents: Sequence[Oid]) -> int:
        """ Place the next commit in the walk. Returns its lane. """

        row = self.row + 1
        self.row = row

        above = list(self.openLanes)
        parents = list(dict.fromkeys(myParents))  # drop duplicate parents, keep order
        hasParents = bool(parents)

        # Close the reservations that my children opened higher up,
        # waiting for me to appear in the walk.
        myReservations = self.parentLookup.pop(me, [])
        if myReservations:
            homeLane = min(r.lane for r in myReservations)
            for r in myReservations:
                r.closedAt = row
                self.openLanes[r.lane] = None
                if not (hasParents and r.lane == homeLane):
                    bisect.insort(self.freeLanes, r.lane)
        elif hasParents:
            # Nobody was looking for me, so I'm the tip of a new branch
            homeLane = self._claimLane()
        else:
            # Lone commit (no children, no parents): sit in a free lane, but don't hold on to it.
            homeLane = self.freeLanes[0] if self.freeLanes else len(self.openLanes)

        myEdges = {}
        for i, parent in enumerate(parents):
            if i == 0:
                # Hand off my lane to my first parent
                myEdges[parent] = self._reserve(homeLane, parent, me, row)
                continue

            pending = self.parentLookup.get(parent)
            if pending:
                # Somebody is already heading to this parent: join them
                r = min(pending, key=lambda p: p.lane)
                r.refCount += 1
                r.junctions.append((row, me))
                myEdges[parent] = r
            else:
                myEdges[parent] = self._reserve(self._claimLane(), parent, me, row)

        self.lanes[me] = homeLane
        self.edges[me] = myEdges

        lanesBefore = frozenset(lane for lane, r in enumerate(above) if r is not None)
        lanesAfter = frozenset(lane for lane, r in enumerate(self.openLanes) if r is not None)
        passing = frozenset(lane for lane, r in enumerate(above) if r is not None and r.target != me)
        self.table.rows.append(OccupiedRow(row=row, oid=me, lane=homeLane,
                                           lanesBefore=lanesBefore, lanesAfter=lanesAfter, passing=passing))

        self.peakLaneCount = max(self.peakLaneCount, len(self.openLanes), homeLane + 1)

        if settings.DEVDEBUG:
            self.testConsistency()

        return homeLane

    def openReservations(self) -> list[Reservation]:
        return [r for pending in self.parentLookup.values() for r in pending]

    def isDangling(self) -> bool:
        """ True if some edges are still waiting for parents that never showed up in the walk. """
        return len(self.parentLookup) > 0

    def testConsistency(self):
        open = self.openReservations()
        lanes = [r.lane for r in open]
        assert len(lanes) == len(set(lanes)), "two open reservations share a lane!"
        assert sorted(lanes) == [i for i, r in enumerate(self.openLanes) if r is not None]
        assert self.freeLanes == [i for i, r in enumerate(self.openLanes) if r is None]


def weaveLanes(sequence: Sequence[Oid], arena: NodeArena) -> LaneWeaver:
    """ Assign rows and lanes to every node of the arena, following the order of the walk. """

    weaver = LaneWeaver()

    with Benchmark("weaveLanes"):
        for row, oid in enumerate(sequence):
            node = arena.node(oid)
            node.row = row
            node.lane = weaver.newCommit(oid, node.parentOids)

    logger.debug(f"Wove {len(sequence)} rows into {weaver.peakLaneCount} lanes "
                 f"(dangling: {weaver.isDangling()})")
    return weaver
