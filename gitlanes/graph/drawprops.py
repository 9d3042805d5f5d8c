# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Turn lane assignments into abstract drawing instructions: one point per
commit, one connector per parent edge, and stacked labels for refs.

Coordinates are (lane, row) pairs. Rasterizing them is up to the
presentation layer.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
from collections.abc import Iterable, Mapping, Sequence

from gitlanes.backend import Oid, RefFacts, RefKind
from gitlanes.graph.commitnode import NodeArena
from gitlanes.graph.laneweaver import LaneWeaver
from gitlanes.toolbox import Benchmark

logger = logging.getLogger(__name__)

Point = tuple[int, int]


class ConnectorKind(enum.StrEnum):
    STRAIGHT = "straight"
    """ Vertical segment: the child, its parent and the edge share one lane. """

    BEND = "bend"
    """ The edge changes lanes on its way from the child to the parent. """

    DANGLING = "dangling"
    """ The parent lies past the bottom of a truncated walk. The edge runs off the bottom edge. """


@dataclasses.dataclass(frozen=True)
class Connector:
    parent: Oid
    start: Point
    end: Point
    lane: int
    """ Lane that the edge runs down between the child row and the parent row. """

    kind: ConnectorKind
    points: tuple[Point, ...]
    """ Polyline from start to end. Intermediate points always sit in `lane`. """

    def toJson(self) -> dict:
        return {
            "parent_oid": self.parent,
            "start": list(self.start),
            "end": list(self.end),
            "lane": self.lane,
            "kind": str(self.kind),
            "points": [list(p) for p in self.points],
        }


@dataclasses.dataclass(frozen=True)
class RowDrawProperty:
    oid: Oid
    summary: str
    lane: int
    row: int
    parentOids: tuple[Oid, ...]
    childOids: tuple[Oid, ...]
    connectors: tuple[Connector, ...]

    def toJson(self) -> dict:
        return {
            "oid": self.oid,
            "summary": self.summary,
            "x": self.lane,
            "y": self.row,
            "parent_oids": list(self.parentOids),
            "child_oids": list(self.childOids),
            "connectors": [c.toJson() for c in self.connectors],
        }


@dataclasses.dataclass(frozen=True)
class RefLabel:
    label: str
    kind: RefKind
    offset: int
    lane: int
    isHead: bool = False

    def toJson(self) -> dict:
        return {
            "label": self.label,
            "type": str(self.kind),
            "offset": self.offset,
            "lane": self.lane,
            "is_head": self.isHead,
        }


def _dedupe(points: Iterable[Point]) -> tuple[Point, ...]:
    out = []
    for p in points:
        if not out or out[-1] != p:
            out.append(p)
    return tuple(out)


def routeConnector(start: Point, edgeLane: int, end: Point, dangling: bool = False) -> tuple[ConnectorKind, tuple[Point, ...]]:
    """
    Route an edge from a child at `start` to a parent at `end`.

    The edge leaves the child row into `edgeLane`, runs down that lane and
    enters the parent row. Lane exclusivity guarantees that nothing else is
    drawn in `edgeLane` at the rows strictly between both ends.
    """
    childLane, childRow = start
    parentLane, parentRow = end

    points = [start]

    if dangling:
        points.append((edgeLane, childRow + 1))
        points.append((edgeLane, parentRow))
        return ConnectorKind.DANGLING, _dedupe(points)

    if parentRow - childRow > 1:
        if edgeLane != childLane:
            points.append((edgeLane, childRow + 1))
        if edgeLane != parentLane:
            points.append((edgeLane, parentRow - 1))
    points.append(end)

    if childLane == edgeLane == parentLane:
        kind = ConnectorKind.STRAIGHT
    else:
        kind = ConnectorKind.BEND
    return kind, _dedupe(points)


def emitRowProperties(sequence: Sequence[Oid], arena: NodeArena, weaver: LaneWeaver) -> dict[Oid, RowDrawProperty]:
    """
    Draw properties for every row of the walk, keyed by oid in row order.
    The arena's nodes must have their rows and lanes assigned already.
    """
    props = {}
    bottomRow = len(sequence)

    with Benchmark("emitRowProperties"):
        for oid in sequence:
            node = arena.node(oid)
            start = (node.lane, node.row)
            edges = weaver.edges[oid]

            connectors = []
            for parentOid in dict.fromkeys(node.parentOids):
                reservation = edges[parentOid]
                if parentOid in arena:
                    parent = arena.node(parentOid)
                    end = (parent.lane, parent.row)
                    kind, points = routeConnector(start, reservation.lane, end)
                else:
                    end = (reservation.lane, bottomRow)
                    kind, points = routeConnector(start, reservation.lane, end, dangling=True)
                connectors.append(Connector(parent=parentOid, start=start, end=end,
                                            lane=reservation.lane, kind=kind, points=points))

            children = sorted(arena.childNodes(node), key=lambda c: c.row)

            props[oid] = RowDrawProperty(
                oid=oid,
                summary=node.summary,
                lane=node.lane,
                row=node.row,
                parentOids=node.parentOids,
                childOids=tuple(c.oid for c in children),
                connectors=tuple(connectors))

    return props


_KIND_ORDER = {RefKind.LOCAL: 0, RefKind.REMOTE: 1, RefKind.TAG: 2}


def placeRefLabels(
        refs: Iterable[RefFacts],
        lanes: Mapping[Oid, int],
        detachedHead: Oid = "",
        spacing: int = 1,
) -> dict[Oid, list[RefLabel]]:
    """
    Group refs by target commit and stack their labels.

    Within a commit, the HEAD ref comes first, then local branches, remote
    branches and tags, each group sorted alphabetically. Refs aimed at
    commits that aren't laid out are skipped.
    """

    grouped: dict[Oid, list[tuple[str, RefKind, bool]]] = {}

    for ref in refs:
        if ref.target not in lanes:
            continue
        grouped.setdefault(ref.target, []).append((ref.shorthand, ref.kind, ref.isHead))

    if detachedHead and detachedHead in lanes:
        grouped.setdefault(detachedHead, []).append(("HEAD", RefKind.LOCAL, True))

    placements = {}
    for oid, entries in grouped.items():
        entries.sort(key=lambda e: (not e[2], _KIND_ORDER[e[1]], e[0]))
        lane = lanes[oid]
        placements[oid] = [
            RefLabel(label=label, kind=kind, offset=i * spacing, lane=lane, isHead=isHead)
            for i, (label, kind, isHead) in enumerate(entries)]

    return placements
