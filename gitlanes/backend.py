# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Raw repository facts consumed by the layout engine, and the interface that
repository backends implement to supply them.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterator

Oid = str
""" Full hexadecimal commit hash. """


class ErrorKind(enum.StrEnum):
    NO_REPOSITORY = "no-open-repository"
    MALFORMED_DATA = "malformed-data"
    MISSING_OBJECT = "missing-object"
    BACKEND_FAILURE = "backend-failure"


class BackendError(Exception):
    """ Base class for failures that abort a layout computation. """
    kind = ErrorKind.BACKEND_FAILURE


class NoRepositoryError(BackendError):
    kind = ErrorKind.NO_REPOSITORY


class MalformedDataError(BackendError):
    """ Ref names, paths or commit messages that can't be decoded as text. """
    kind = ErrorKind.MALFORMED_DATA


class MissingObjectError(BackendError):
    kind = ErrorKind.MISSING_OBJECT

    def __init__(self, oid: Oid = "", reason: str = ""):
        message = "missing or corrupt object"
        if oid:
            message += f" {oid}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.oid = oid


class RefKind(enum.StrEnum):
    LOCAL = "local"
    REMOTE = "remote"
    TAG = "tag"


class OperationState(enum.Enum):
    NONE = enum.auto()
    MERGE = enum.auto()
    REBASE = enum.auto()
    CHERRYPICK = enum.auto()
    REVERT = enum.auto()


@dataclasses.dataclass(frozen=True)
class CommitFacts:
    oid: Oid
    summary: str
    parentOids: tuple[Oid, ...]
    commitTime: int = 0


@dataclasses.dataclass(frozen=True)
class RefFacts:
    shorthand: str
    fullName: str
    kind: RefKind
    target: Oid
    isHead: bool = False
    ahead: int = 0
    behind: int = 0


@dataclasses.dataclass(frozen=True)
class FileDelta:
    status: int
    path: str


@dataclasses.dataclass(frozen=True)
class WorkdirChanges:
    filesChanged: int = 0
    unstaged: tuple[FileDelta, ...] = ()
    staged: tuple[FileDelta, ...] = ()


class RepoBackend:
    """
    Supplies raw facts about a repository.

    Implementations must raise a `BackendError` subclass for any failure
    so that the layout computation can abort cleanly.
    """

    def walkCommits(self, maxCommits: int = 0) -> Iterator[CommitFacts]:
        """
        Yield every commit reachable from any branch tip, any tag and HEAD,
        newest first, never yielding a commit before one of its children.
        Stop after `maxCommits` commits unless it's 0.
        """
        raise NotImplementedError()

    def readCommit(self, oid: Oid) -> CommitFacts:
        raise NotImplementedError()

    def listRefs(self) -> list[RefFacts]:
        """ Local branches, remote branches (excluding symbolic refs) and tags peeled to commits. """
        raise NotImplementedError()

    def detachedHead(self) -> Oid:
        """ Commit that HEAD points to if it's detached, otherwise an empty string. """
        raise NotImplementedError()

    def headHasUpstream(self) -> bool:
        raise NotImplementedError()

    def operationState(self) -> OperationState:
        raise NotImplementedError()

    def listRemotes(self) -> list[str]:
        raise NotImplementedError()

    def workdirChanges(self) -> WorkdirChanges:
        raise NotImplementedError()
