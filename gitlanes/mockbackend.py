# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterator

from gitlanes.backend import *
from gitlanes.graph.graphdiagram import parseDefinition
from gitlanes.graph.revwalk import sortNewestFirst

logger = logging.getLogger(__name__)


class MockBackend(RepoBackend):
    """
    In-memory repository built from a one-line graph definition (see
    `parseDefinition`). Commits written first are the most recent ones.

    Unless refs are given explicitly, every head of the definition gets a
    local branch named after it, and HEAD points to the first one.
    """

    def __init__(self, definition: str = "", refs: list[RefFacts] | None = None):
        self.commits: dict[Oid, CommitFacts] = {}
        self.refs: list[RefFacts] = []
        self.detached: Oid = ""
        self.hasUpstream = False
        self.state = OperationState.NONE
        self.remotes: list[str] = []
        self.changes = WorkdirChanges()
        self.corrupt: set[Oid] = set()
        self.setHistory(definition, refs)

    def setHistory(self, definition: str, refs: list[RefFacts] | None = None):
        sequence, parentMap, heads = parseDefinition(definition)

        # Newest first: give the first commit the highest timestamp
        self.commits = {}
        for i, oid in enumerate(sequence):
            self.commits[oid] = CommitFacts(
                oid=oid,
                summary=f"Commit {oid}",
                parentOids=tuple(parentMap[oid]),
                commitTime=1_700_000_000 + len(sequence) - i)

        if refs is None:
            refs = [RefFacts(shorthand=f"branch-{head}", fullName=f"refs/heads/branch-{head}",
                             kind=RefKind.LOCAL, target=head, isHead=(i == 0))
                    for i, head in enumerate(heads)]
        self.refs = list(refs)

    def setRef(self, shorthand: str, target: Oid, kind: RefKind = RefKind.LOCAL, isHead: bool | None = None):
        """ Move an existing ref, or create it. """
        prefix = {RefKind.LOCAL: "refs/heads/", RefKind.REMOTE: "refs/remotes/", RefKind.TAG: "refs/tags/"}[kind]
        old = next((r for r in self.refs if r.shorthand == shorthand and r.kind == kind), None)
        if isHead is None:
            isHead = old.isHead if old else False
        ref = RefFacts(shorthand=shorthand, fullName=prefix + shorthand, kind=kind, target=target, isHead=isHead)
        if old:
            self.refs[self.refs.index(old)] = ref
        else:
            self.refs.append(ref)

    def tips(self) -> list[Oid]:
        # Most recent tips first, HEAD's tip first among equals
        tips = [r.target for r in sorted(self.refs, key=lambda r: not r.isHead)]
        if self.detached:
            tips.insert(0, self.detached)
        return list(dict.fromkeys(tips))

    def readCommit(self, oid: Oid) -> CommitFacts:
        if oid in self.corrupt:
            raise MissingObjectError(oid, "corrupt object")
        try:
            return self.commits[oid]
        except KeyError as e:
            raise MissingObjectError(oid) from e

    def walkCommits(self, maxCommits: int = 0) -> Iterator[CommitFacts]:
        ordered = sortNewestFirst(self.tips(), self.readCommit)
        if maxCommits:
            ordered = itertools.islice(ordered, maxCommits)
        yield from ordered

    def listRefs(self) -> list[RefFacts]:
        return list(self.refs)

    def detachedHead(self) -> Oid:
        return self.detached

    def headHasUpstream(self) -> bool:
        return self.hasUpstream

    def operationState(self) -> OperationState:
        return self.state

    def listRemotes(self) -> list[str]:
        return list(self.remotes)

    def workdirChanges(self) -> WorkdirChanges:
        return self.changes
