# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator

from gitlanes.backend import *
from gitlanes.porcelain import (
    Commit, GitError, InvalidSpecError, RefPrefix, Repo, RepositoryState, commit_summary,
)

logger = logging.getLogger(__name__)

_STATE_MAP = {
    RepositoryState.MERGE: OperationState.MERGE,
    RepositoryState.REVERT: OperationState.REVERT,
    RepositoryState.REVERT_SEQUENCE: OperationState.REVERT,
    RepositoryState.CHERRYPICK: OperationState.CHERRYPICK,
    RepositoryState.CHERRYPICK_SEQUENCE: OperationState.CHERRYPICK,
    RepositoryState.REBASE: OperationState.REBASE,
    RepositoryState.REBASE_INTERACTIVE: OperationState.REBASE,
    RepositoryState.REBASE_MERGE: OperationState.REBASE,
}


@contextlib.contextmanager
def _translateErrors(what: str):
    """ Re-raise low-level pygit2/decoding errors as BackendErrors. """
    try:
        yield
    except BackendError:
        raise
    except UnicodeError as e:
        raise MalformedDataError(f"{what}: non-decodable text ({e})") from e
    except GitError as e:
        raise BackendError(f"{what}: {e}") from e
    except OSError as e:
        raise BackendError(f"{what}: {e}") from e


class Pygit2Backend(RepoBackend):
    """ Repository facts read from an on-disk repository through pygit2. """

    repo: Repo

    def __init__(self, repo: Repo):
        self.repo = repo

    @staticmethod
    def open(path: str) -> Pygit2Backend:
        try:
            repo = Repo(path)
        except GitError as e:
            raise NoRepositoryError(f"no repository at '{path}': {e}") from e
        if repo.is_bare:
            raise NoRepositoryError(f"bare repositories aren't supported: '{path}'")
        logger.debug(f"Opened {repo.workdir}")
        return Pygit2Backend(repo)

    @property
    def workdir(self) -> str:
        return self.repo.workdir

    @staticmethod
    def _facts(commit: Commit) -> CommitFacts:
        oid = str(commit.id)
        try:
            summary = commit_summary(commit.message)
        except (UnicodeError, LookupError) as e:
            # LookupError: unknown encoding declared in the commit header
            raise MalformedDataError(f"commit {oid}: non-decodable message ({e})") from e
        return CommitFacts(
            oid=oid,
            summary=summary,
            parentOids=tuple(str(p) for p in commit.parent_ids),
            commitTime=commit.commit_time)

    def walkCommits(self, maxCommits: int = 0) -> Iterator[CommitFacts]:
        with _translateErrors("walk"):
            tips = self.repo.walk_tips()
        if not tips:
            return

        walker = self.repo.walk_from(tips)
        count = 0
        while True:
            try:
                commit = next(walker)
            except StopIteration:
                break
            except (GitError, KeyError) as e:
                raise MissingObjectError(reason=f"walk interrupted: {e}") from e
            yield self._facts(commit)
            count += 1
            if maxCommits and count >= maxCommits:
                break

    def readCommit(self, oid: Oid) -> CommitFacts:
        try:
            obj = self.repo[oid]
            commit = obj.peel(Commit)
        except (KeyError, ValueError, InvalidSpecError) as e:
            raise MissingObjectError(oid, str(e)) from e
        except GitError as e:
            raise MissingObjectError(oid, f"corrupt object: {e}") from e
        return self._facts(commit)

    def listRefs(self) -> list[RefFacts]:
        refs = []
        repo = self.repo

        with _translateErrors("refs"):
            headName = ""
            if not repo.head_is_unborn and not repo.head_is_detached:
                headName = repo.head.name

            for ref in repo.direct_refs():
                prefix, shorthand = RefPrefix.split(ref.name)
                if prefix == RefPrefix.HEADS:
                    kind = RefKind.LOCAL
                elif prefix == RefPrefix.REMOTES:
                    kind = RefKind.REMOTE
                elif prefix == RefPrefix.TAGS:
                    kind = RefKind.TAG
                else:
                    continue

                try:
                    target = str(ref.peel(Commit).id)
                except (InvalidSpecError, GitError) as e:
                    logger.info(f"{e} - Skipping ref '{ref.name}'")
                    continue

                ahead = behind = 0
                if kind == RefKind.LOCAL:
                    branch = repo.branches.local.get(shorthand)
                    if branch is not None:
                        ahead, behind = repo.upstream_ahead_behind(branch)

                refs.append(RefFacts(
                    shorthand=shorthand,
                    fullName=ref.name,
                    kind=kind,
                    target=target,
                    isHead=ref.name == headName,
                    ahead=ahead,
                    behind=behind))

        return refs

    def detachedHead(self) -> Oid:
        with _translateErrors("HEAD"):
            if self.repo.head_is_unborn or not self.repo.head_is_detached:
                return ""
            return str(self.repo.head_commit.id)

    def headHasUpstream(self) -> bool:
        with _translateErrors("upstream"):
            return self.repo.head_has_upstream()

    def operationState(self) -> OperationState:
        with _translateErrors("state"):
            state = self.repo.state()
        return _STATE_MAP.get(state, OperationState.NONE)

    def listRemotes(self) -> list[str]:
        with _translateErrors("remotes"):
            return [remote.name for remote in self.repo.remotes]

    def workdirChanges(self) -> WorkdirChanges:
        with _translateErrors("working tree"):
            unstagedDiff = self.repo.get_unstaged_changes()
            stagedDiff = self.repo.get_staged_changes()

            unstaged = tuple(FileDelta(int(d.status), d.new_file.path) for d in unstagedDiff.deltas)
            staged = tuple(FileDelta(int(d.status), d.new_file.path) for d in stagedDiff.deltas)

            filesChanged = unstagedDiff.stats.files_changed + stagedDiff.stats.files_changed

        return WorkdirChanges(filesChanged=filesChanged, unstaged=unstaged, staged=staged)
