# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Thin layer over pygit2 exposing the handful of repository queries that
feed the commit graph. Nothing in here knows about lanes or rows.
"""

from __future__ import annotations as _annotations

import logging as _logging

from pygit2 import (
    Branch,
    Commit,
    Diff,
    GitError,
    InvalidSpecError,
    Oid,
    Reference,
    Repository as _VanillaRepository,
    Signature,
    Walker,
)

from pygit2.enums import (
    DeltaStatus,
    DiffOption,
    ReferenceType,
    RepositoryState,
    SortMode,
)

_logger = _logging.getLogger(__name__)

_WORKDIR_DIFF_FLAGS = DiffOption.INCLUDE_UNTRACKED | DiffOption.RECURSE_UNTRACKED_DIRS | DiffOption.INCLUDE_TYPECHANGE


class RefPrefix:
    HEADS = "refs/heads/"
    REMOTES = "refs/remotes/"
    TAGS = "refs/tags/"

    @classmethod
    def split(cls, refname: str) -> tuple[str, str]:
        """ ("refs/heads/", "main") for "refs/heads/main"; ("", refname) for anything unrecognized. """
        prefix = next((p for p in (cls.HEADS, cls.REMOTES, cls.TAGS) if refname.startswith(p)), "")
        return prefix, refname[len(prefix):]


def commit_summary(message: str) -> str:
    """ Title paragraph of a commit message, joined into one line like `git log --oneline`. """
    title, _, _ = message.strip().partition("\n\n")
    return " ".join(part.strip() for part in title.splitlines())


class Repo(_VanillaRepository):
    """ pygit2.Repository plus the queries the revision walk depends on. """

    @property
    def head_commit(self) -> Commit:
        return self.head.peel(Commit)

    def direct_refs(self) -> list[Reference]:
        """ Direct refs only: symbolic refs such as origin/HEAD and the stash are left out. """
        return [ref for ref in self.listall_reference_objects()
                if ref.type == ReferenceType.DIRECT and ref.name != "refs/stash"]

    def walk_tips(self) -> list[Oid]:
        """
        Commits that the revision walk starts from: every ref tip plus HEAD,
        oldest first. Feeding them in this order keeps repeated walks of the
        same history stable.
        """
        tips: dict[str, Commit] = {}

        for ref in self.direct_refs():
            try:
                tips[ref.name] = ref.peel(Commit)
            except (InvalidSpecError, GitError) as e:
                _logger.info(f"Ref '{ref.name}' isn't a commit, skipping: {e}")

        # Inserted last so HEAD wins ties against other tips with the same timestamp
        if not self.head_is_unborn:
            try:
                tips["HEAD"] = self.head_commit
            except (GitError, InvalidSpecError) as e:
                _logger.info(f"Unreadable HEAD: {e}")

        ordered = sorted(tips.values(), key=lambda c: c.commit_time)
        return [commit.id for commit in ordered]

    def walk_from(self, tips: list[Oid]) -> Walker:
        # TIME alone could emit a parent ahead of a child whose clock ran
        # behind; TOPOLOGICAL rules that out. Tips go in oldest first because
        # the topological walk pops the most recent push first.
        walker = self.walk(None, SortMode.TOPOLOGICAL | SortMode.TIME)
        for tip in tips:
            walker.push(tip)
        return walker

    def head_has_upstream(self) -> bool:
        if self.head_is_unborn or self.head_is_detached:
            return False
        branch = self.branches.local.get(self.head.shorthand)
        return branch is not None and branch.upstream is not None

    def upstream_ahead_behind(self, branch: Branch) -> tuple[int, int]:
        upstream = branch.upstream
        if upstream is None:
            return 0, 0
        try:
            return self.ahead_behind(branch.target, upstream.target)
        except GitError as e:
            _logger.info(f"{branch.branch_name}: can't compare with upstream: {e}")
            return 0, 0

    def get_unstaged_changes(self) -> Diff:
        """ Index vs. working directory, untracked files included. """
        return self.diff(None, None, flags=_WORKDIR_DIFF_FLAGS)

    def get_staged_changes(self) -> Diff:
        """ HEAD vs. index. In an unborn repo, everything in the index counts as added. """
        if self.head_is_unborn:
            indexTree = self[self.index.write_tree()]
            return indexTree.diff_to_tree(swap=True, flags=DiffOption.INCLUDE_TYPECHANGE)

        diff = self.diff("HEAD", None, cached=True, flags=DiffOption.INCLUDE_TYPECHANGE)
        diff.find_similar()
        return diff
