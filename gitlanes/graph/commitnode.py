# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import collections
import dataclasses
import logging
from collections.abc import Callable, Iterator

from gitlanes import settings
from gitlanes.backend import CommitFacts, Oid
from gitlanes.graph.rowdiff import DiffResult

logger = logging.getLogger(__name__)

Handle = int
NO_HANDLE: Handle = -1


@dataclasses.dataclass
class CommitNode:
    oid: Oid
    summary: str
    parentOids: tuple[Oid, ...]
    commitTime: int = 0

    parents: list[Handle] = dataclasses.field(default_factory=list)
    """ Aligned with parentOids. NO_HANDLE if that parent isn't in the arena. """

    children: list[Handle] = dataclasses.field(default_factory=list)

    lane: int = -1
    row: int = -1

    def copy(self) -> CommitNode:
        return dataclasses.replace(self, parents=list(self.parents), children=list(self.children))


class NodeArena:
    """
    Commit nodes addressed by stable integer handles.
    Relations between nodes are lists of handles, never direct references.

    A handle stays valid until its node is removed; freed handles get recycled.
    """

    nodes: list[CommitNode | None]
    handles: dict[Oid, Handle]
    freeHandles: list[Handle]
    waitingFor: collections.defaultdict[Oid, list[Handle]]
    """ Oid of an absent parent -> children whose parents list has a hole for it. """

    def __init__(self):
        self.nodes = []
        self.handles = {}
        self.freeHandles = []
        self.waitingFor = collections.defaultdict(list)

    def __len__(self):
        return len(self.handles)

    def __contains__(self, oid: Oid):
        return oid in self.handles

    def __getitem__(self, handle: Handle) -> CommitNode:
        node = self.nodes[handle]
        assert node is not None, f"stale handle {handle}"
        return node

    def __iter__(self) -> Iterator[CommitNode]:
        return (node for node in self.nodes if node is not None)

    def handleOf(self, oid: Oid) -> Handle:
        return self.handles.get(oid, NO_HANDLE)

    def node(self, oid: Oid) -> CommitNode:
        return self[self.handles[oid]]

    def copy(self) -> NodeArena:
        """ Deep copy that can be mutated without affecting this arena. """
        dupe = NodeArena()
        dupe.nodes = [n.copy() if n is not None else None for n in self.nodes]
        dupe.handles = dict(self.handles)
        dupe.freeHandles = list(self.freeHandles)
        dupe.waitingFor = collections.defaultdict(list, {k: list(v) for k, v in self.waitingFor.items()})
        return dupe

    def add(self, facts: CommitFacts) -> Handle:
        assert facts.oid not in self.handles, f"{facts.oid} is already in the arena"

        node = CommitNode(oid=facts.oid, summary=facts.summary,
                          parentOids=tuple(facts.parentOids), commitTime=facts.commitTime)

        if self.freeHandles:
            handle = self.freeHandles.pop()
            self.nodes[handle] = node
        else:
            handle = len(self.nodes)
            self.nodes.append(node)
        self.handles[node.oid] = handle

        # Link up to my parents, or wait for them to show up
        for parentOid in node.parentOids:
            parentHandle = self.handles.get(parentOid, NO_HANDLE)
            node.parents.append(parentHandle)
            if parentHandle == NO_HANDLE:
                self.waitingFor[parentOid].append(handle)
            elif handle not in self[parentHandle].children:
                self[parentHandle].children.append(handle)

        # Adopt the children that were waiting for me
        for childHandle in self.waitingFor.pop(node.oid, []):
            child = self[childHandle]
            for i, parentOid in enumerate(child.parentOids):
                if parentOid == node.oid:
                    child.parents[i] = handle
            if childHandle not in node.children:
                node.children.append(childHandle)

        return handle

    def remove(self, oid: Oid):
        handle = self.handles.pop(oid)
        node = self[handle]

        # Unlink from my parents
        for parentOid, parentHandle in zip(node.parentOids, node.parents):
            if parentHandle == NO_HANDLE:
                waiting = self.waitingFor[parentOid]
                waiting.remove(handle)
                if not waiting:
                    del self.waitingFor[parentOid]
            elif handle in self[parentHandle].children:
                self[parentHandle].children.remove(handle)

        # My children now have a hole where I used to be. Like add(), wait
        # once per hole so that a repeated parent unwinds cleanly later.
        for childHandle in node.children:
            child = self[childHandle]
            for i, parentHandle in enumerate(child.parents):
                if parentHandle == handle:
                    child.parents[i] = NO_HANDLE
                    self.waitingFor[oid].append(childHandle)

        self.nodes[handle] = None
        self.freeHandles.append(handle)

    def parentNodes(self, node: CommitNode) -> list[CommitNode]:
        return [self[h] for h in node.parents if h != NO_HANDLE]

    def childNodes(self, node: CommitNode) -> list[CommitNode]:
        return [self[h] for h in node.children]

    def testConsistency(self):
        """ Expensive: make sure that every link goes both ways. """
        for oid, handle in self.handles.items():
            node = self[handle]
            assert node.oid == oid
            assert len(node.parents) == len(node.parentOids)
            for parentOid, parentHandle in zip(node.parentOids, node.parents):
                if parentHandle == NO_HANDLE:
                    assert parentOid not in self.handles, f"{oid} has a stale hole for {parentOid}"
                    assert handle in self.waitingFor.get(parentOid, ())
                else:
                    assert self[parentHandle].oid == parentOid
                    assert handle in self[parentHandle].children
            for childHandle in node.children:
                assert handle in self[childHandle].parents
        for oid, waiting in self.waitingFor.items():
            assert oid not in self.handles, f"children still waiting for {oid} although it's here"


class NodeBuilder:
    """
    Bring a copy of the previous arena up to date with a DiffResult.

    The previous arena is never touched: if fetching any commit fails, the
    exception propagates and the copy is simply dropped.
    """

    def __init__(self, previous: NodeArena | None, fetch: Callable[[Oid], CommitFacts]):
        self.previous = previous
        self.fetch = fetch

    def build(self, diff: DiffResult) -> NodeArena:
        if diff.fullReset or self.previous is None:
            arena = NodeArena()
        else:
            arena = self.previous.copy()

        # Fetch everything first so that a failure can't leave a half-built arena behind
        createdFacts = [self.fetch(change.oid) for change in diff.created]

        for change in diff.deleted:
            if change.oid in arena:
                arena.remove(change.oid)

        for facts in createdFacts:
            arena.add(facts)

        if settings.DEVDEBUG:
            arena.testConsistency()

        logger.debug(f"Arena: +{len(diff.created)} -{len(diff.deleted)} = {len(arena)} nodes")
        return arena
