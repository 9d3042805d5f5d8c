# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from itertools import zip_longest

from gitlanes.backend import Oid
from gitlanes.graph.laneweaver import LaneWeaver, OccupiedRow

LANE_WIDTH = 2
BEND_GLYPHS = frozenset("╭╮╰╯┤├")


def _parseChain(token: str) -> list[tuple[Oid, list[Oid]]]:
    head, colon, tail = token.partition(":")
    if not head or "," in head or ":" in tail or (colon and "-" in tail):
        raise ValueError(f"malformed chain '{token}'")

    chain = head.split("-")
    if not all(chain):
        raise ValueError(f"empty commit name in '{token}'")

    lastParents = [p for p in tail.split(",") if p]
    return [(commit, [parent]) for commit, parent in zip(chain, chain[1:])] + [(chain[-1], lastParents)]


def parseDefinition(text: str) -> tuple[list[Oid], dict[Oid, list[Oid]], list[Oid]]:
    """
    Build a toy history from a compact definition such as "m:a,b a-c b-c".

    Whitespace separates chains. Within a chain, "a-b" makes b the first
    parent of a, and ":x,y" after the last commit of a chain gives it
    parents x and y. Commits are listed newest first. A commit may be
    defined only once.

    Returns (sequence, parents of each commit, heads). Heads are the commits
    that nothing written before them names as a parent.
    """
    sequence: list[Oid] = []
    parentMap: dict[Oid, list[Oid]] = {}
    heads: list[Oid] = []
    referenced: set[Oid] = set()

    for token in text.split():
        for commit, parents in _parseChain(token):
            if commit in parentMap:
                raise ValueError(f"commit '{commit}' defined twice")
            parentMap[commit] = parents
            sequence.append(commit)
            if commit not in referenced:
                heads.append(commit)
            referenced.update(parents)

    return sequence, parentMap, heads


class GraphDiagram:
    """
    Renders the lanes chosen by a LaneWeaver with box-drawing characters.
    Handy in test failure output and in `python -m gitlanes.graph`.

    Each commit takes one text line, plus a second one when edges bend
    below it. The commit glyph tells which way its lane continues:
    ┯ down only, ┷ up only, ┿ both, ╳ neither.
    """

    @staticmethod
    def diagram(weaver: LaneWeaver, maxRows=50, verbose=False) -> str:
        canvas = GraphDiagram()
        for occupied in weaver.table:
            if occupied.row >= maxRows:
                break
            canvas.drawCommit(occupied, weaver, verbose)
        return canvas.render()

    def __init__(self):
        self.lines: list[dict[int, str]] = []
        self.labels: list[list[str]] = []

    def _newLine(self, labels=()) -> int:
        self.lines.append({})
        self.labels.append(list(labels))
        return len(self.lines) - 1

    def _put(self, y: int, lane: int, glyph: str):
        self.lines[y][lane * LANE_WIDTH] = glyph

    def _span(self, y: int, fromLane: int, toLane: int):
        line = self.lines[y]
        lo, hi = sorted((fromLane, toLane))
        for col in range(lo * LANE_WIDTH, hi * LANE_WIDTH + 1):
            crossed = line.get(col, " ")
            if crossed == " ":
                line[col] = "─"
            elif crossed == "│":
                line[col] = "┼"

    def _bendTo(self, y: int, home: int, lane: int, glyphs: str):
        """ Horizontal run from the commit's lane to `lane`, capped by glyphs[0] (left) or glyphs[1] (right). """
        self._span(y, home, lane)
        self._put(y, lane, glyphs[lane > home])

    def drawCommit(self, occupied: OccupiedRow, weaver: LaneWeaver, verbose: bool):
        labels = [str(occupied.row), occupied.oid] if verbose else [occupied.oid]
        top = self._newLine(labels)
        bottom = self._newLine()
        home = occupied.lane

        for lane in occupied.passing:
            self._put(top, lane, "│")
            self._put(bottom, lane, "│")

        endsHere = sorted(occupied.lanesBefore - occupied.passing - {home})
        startsHere = sorted(occupied.lanesAfter - occupied.passing - {home})

        for lane in endsHere:
            self._bendTo(top, home, lane, "╰╯")

        # Branch out on the commit's own line unless merges already use it
        branchLine = bottom if endsHere else top
        for lane in startsHere:
            self._bendTo(branchLine, home, lane, "╭╮")
            if branchLine == top:
                self._put(bottom, lane, "│")

        for reservation in weaver.edges[occupied.oid].values():
            if reservation.openedBy != occupied.oid:
                self._bendTo(branchLine, home, reservation.lane, "┤├")

        continuesDown = home in occupied.lanesAfter and home not in occupied.passing
        continuesUp = home in occupied.lanesBefore and home not in occupied.passing
        self._put(top, home, "╳┷┯┿"[continuesDown << 1 | continuesUp])
        if continuesDown:
            self._put(bottom, home, "│")

        if not BEND_GLYPHS.intersection(self.lines[bottom].values()):
            del self.lines[bottom], self.labels[bottom]

    def render(self) -> str:
        columnCount = max(map(len, self.labels), default=0)
        widths = [max((len(row[i]) for row in self.labels if len(row) > i), default=0) for i in range(columnCount)]

        out = []
        for labels, line in zip(self.labels, self.lines):
            margin = "".join(text.rjust(width) + " " for width, text in zip_longest(widths, labels, fillvalue=""))
            glyphs = [" "] * (max(line, default=-1) + 1)
            for col, glyph in line.items():
                glyphs[col] = glyph
            out.append((margin + "".join(glyphs)).rstrip())
        return "\n".join(out)
