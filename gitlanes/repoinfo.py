# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Payload pushed to the presentation layer after each triggering action.

The payload maps each section name to exactly one kind of value; every kind
knows how to turn itself into JSON-friendly data.
"""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
from collections.abc import Iterable

from gitlanes.backend import (
    FileDelta, OperationState, Oid, RefFacts, RefKind, RepoBackend, WorkdirChanges,
)
from gitlanes.graph.drawprops import RefLabel, RowDrawProperty
from gitlanes.graph.layout import LayoutDelta
from gitlanes.graph.rowdiff import RowChange

logger = logging.getLogger(__name__)


class Section(enum.StrEnum):
    GENERAL = "general_info"
    COMMITS = "commit_info_list"
    BRANCHES = "branch_info_list"
    REMOTES = "remote_info_list"
    FILES_CHANGED = "files_changed_info_list"


def _flag(b: bool) -> str:
    return "true" if b else "false"


@dataclasses.dataclass(frozen=True)
class GeneralInfo:
    headHasUpstream: bool = False
    state: OperationState = OperationState.NONE

    def toJson(self) -> dict[str, str]:
        return {
            "head_has_upstream": _flag(self.headHasUpstream),
            "is_merging": _flag(self.state == OperationState.MERGE),
            "is_rebasing": _flag(self.state == OperationState.REBASE),
            "is_cherrypicking": _flag(self.state == OperationState.CHERRYPICK),
            "is_reverting": _flag(self.state == OperationState.REVERT),
        }


@dataclasses.dataclass
class CommitsInfo:
    created: list[RowDrawProperty] = dataclasses.field(default_factory=list)
    updated: list[RowDrawProperty] = dataclasses.field(default_factory=list)
    deleted: list[RowChange] = dataclasses.field(default_factory=list)
    fullReset: bool = False
    truncated: bool = False
    refLabels: dict[Oid, list[RefLabel]] = dataclasses.field(default_factory=dict)

    @staticmethod
    def fromDelta(delta: LayoutDelta, refLabels: dict[Oid, list[RefLabel]]) -> CommitsInfo:
        return CommitsInfo(
            created=delta.created,
            updated=delta.updated,
            deleted=delta.diff.deleted,
            fullReset=delta.diff.fullReset,
            truncated=delta.truncated,
            refLabels=refLabels)

    def toJson(self) -> dict:
        return {
            "created": [p.toJson() for p in self.created],
            "updated": [p.toJson() for p in self.updated],
            "deleted": [{"oid": d.oid, "row": d.row} for d in self.deleted],
            "full_reset": self.fullReset,
            "truncated": self.truncated,
            "ref_draw_properties": {
                oid: [label.toJson() for label in labels]
                for oid, labels in self.refLabels.items()},
        }


@dataclasses.dataclass(frozen=True)
class BranchInfo:
    shorthand: str
    fullName: str
    isHead: bool
    kind: RefKind
    ahead: int = 0
    behind: int = 0

    @staticmethod
    def fromRef(ref: RefFacts) -> BranchInfo:
        return BranchInfo(shorthand=ref.shorthand, fullName=ref.fullName, isHead=ref.isHead,
                          kind=ref.kind, ahead=ref.ahead, behind=ref.behind)

    def toJson(self) -> dict:
        return {
            "branch_shorthand": self.shorthand,
            "full_branch_name": self.fullName,
            "is_head": self.isHead,
            "branch_type": str(self.kind),
            "ahead": self.ahead,
            "behind": self.behind,
        }


@dataclasses.dataclass
class BranchTreeNode:
    """ Ref names split on slashes, e.g. origin/feature/x -> origin > feature > x. """

    text: str = ""
    branchInfo: BranchInfo | None = None
    children: list[BranchTreeNode] = dataclasses.field(default_factory=list)

    def insert(self, info: BranchInfo):
        assert self.text == "", "insert from the root node"
        node = self
        parts = info.shorthand.split("/")
        for i, part in enumerate(parts):
            child = next((c for c in node.children if c.text == part), None)
            if child is None:
                child = BranchTreeNode(part)
                node.children.append(child)
            if i == len(parts) - 1:
                child.branchInfo = info
            node = child

    def find(self, path: str) -> BranchTreeNode | None:
        node = self
        for part in path.split("/"):
            node = next((c for c in node.children if c.text == part), None)
            if node is None:
                return None
        return node

    def toJson(self) -> dict:
        return {
            "text": self.text,
            "branch_info": self.branchInfo.toJson() if self.branchInfo else None,
            "children": [c.toJson() for c in self.children],
        }


@dataclasses.dataclass
class BranchesInfo:
    local: BranchTreeNode = dataclasses.field(default_factory=BranchTreeNode)
    remote: BranchTreeNode = dataclasses.field(default_factory=BranchTreeNode)
    tags: BranchTreeNode = dataclasses.field(default_factory=BranchTreeNode)

    @staticmethod
    def fromRefs(refs: Iterable[RefFacts]) -> BranchesInfo:
        info = BranchesInfo()
        roots = {RefKind.LOCAL: info.local, RefKind.REMOTE: info.remote, RefKind.TAG: info.tags}
        for ref in sorted(refs, key=lambda r: r.fullName):
            # Remote HEADs are symbolic refs that point to another remote branch
            if ref.kind == RefKind.REMOTE and ref.shorthand.endswith("/HEAD"):
                continue
            roots[ref.kind].insert(BranchInfo.fromRef(ref))
        return info

    def toJson(self) -> dict:
        return {
            "local_branch_info_tree": self.local.toJson(),
            "remote_branch_info_tree": self.remote.toJson(),
            "tag_branch_info_tree": self.tags.toJson(),
        }


@dataclasses.dataclass(frozen=True)
class RemotesInfo:
    names: tuple[str, ...] = ()

    def toJson(self) -> list[str]:
        return list(self.names)


@dataclasses.dataclass(frozen=True)
class FilesChangedInfo:
    changes: WorkdirChanges = dataclasses.field(default_factory=WorkdirChanges)

    @staticmethod
    def _deltaJson(delta: FileDelta) -> dict:
        return {"status": delta.status, "path": delta.path}

    def toJson(self) -> dict:
        return {
            "files_changed": self.changes.filesChanged,
            "unstaged_files": [self._deltaJson(d) for d in self.changes.unstaged],
            "staged_files": [self._deltaJson(d) for d in self.changes.staged],
        }


SectionValue = GeneralInfo | CommitsInfo | BranchesInfo | RemotesInfo | FilesChangedInfo

_SECTION_TYPES = {
    Section.GENERAL: GeneralInfo,
    Section.COMMITS: CommitsInfo,
    Section.BRANCHES: BranchesInfo,
    Section.REMOTES: RemotesInfo,
    Section.FILES_CHANGED: FilesChangedInfo,
}


class RepoInfo:
    """ One payload, keyed by section. A section may only hold its own kind of value. """

    def __init__(self):
        self.sections: dict[Section, SectionValue] = {}

    def __setitem__(self, section: Section, value: SectionValue):
        expected = _SECTION_TYPES[section]
        if not isinstance(value, expected):
            raise TypeError(f"{section} expects {expected.__name__}, not {type(value).__name__}")
        self.sections[section] = value

    def __getitem__(self, section: Section) -> SectionValue:
        return self.sections[section]

    def __contains__(self, section: Section):
        return section in self.sections

    @property
    def commits(self) -> CommitsInfo:
        return self.sections[Section.COMMITS]

    def toJson(self) -> dict:
        return {str(section): value.toJson() for section, value in self.sections.items()}

    def dumps(self, indent: int | None = None) -> str:
        return json.dumps(self.toJson(), indent=indent)


def gatherRepoInfo(
        backend: RepoBackend,
        commits: CommitsInfo,
        refs: list[RefFacts] | None = None,
) -> RepoInfo:
    """ Assemble a full payload around a commit-layout section. """

    if refs is None:
        refs = backend.listRefs()

    info = RepoInfo()
    info[Section.GENERAL] = GeneralInfo(
        headHasUpstream=backend.headHasUpstream(),
        state=backend.operationState())
    info[Section.COMMITS] = commits
    info[Section.BRANCHES] = BranchesInfo.fromRefs(refs)
    info[Section.REMOTES] = RemotesInfo(tuple(backend.listRemotes()))
    info[Section.FILES_CHANGED] = FilesChangedInfo(backend.workdirChanges())
    return info
