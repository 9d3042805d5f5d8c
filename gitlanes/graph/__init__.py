# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from gitlanes.graph.rowdiff import (
    ChangeKind,
    DiffHint,
    DiffResult,
    RowChange,
    diffRows,
)
from gitlanes.graph.revwalk import WalkResult, sortNewestFirst, walkRevisions
from gitlanes.graph.commitnode import CommitNode, Handle, NO_HANDLE, NodeArena, NodeBuilder
from gitlanes.graph.laneweaver import LaneWeaver, OccupiedRow, OccupiedTable, Reservation, weaveLanes
from gitlanes.graph.drawprops import (
    Connector,
    ConnectorKind,
    RefLabel,
    RowDrawProperty,
    emitRowProperties,
    placeRefLabels,
    routeConnector,
)
from gitlanes.graph.layout import LayoutDelta, LayoutSnapshot, computeLayout
from gitlanes.graph.graphdiagram import GraphDiagram, parseDefinition
