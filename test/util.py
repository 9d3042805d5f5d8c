# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import os

import pygit2
from pygit2.enums import FileMode

from gitlanes.backend import RefFacts, RefKind
from gitlanes.porcelain import Oid, Repo, Signature

TEST_SIGNATURE = Signature("Test Person", "toto@example.com", 1672600000, 0)


def makeRepo(parentDir: str, name="TestGitRepository") -> Repo:
    path = os.path.realpath(os.path.join(parentDir, name))
    pygit2.init_repository(path, initial_head="main")
    return Repo(path)


def signatureAt(time: int) -> Signature:
    return Signature(TEST_SIGNATURE.name, TEST_SIGNATURE.email, TEST_SIGNATURE.time + time, 0)


def makeCommit(repo: Repo, message: str, parents: list[Oid], time: int, ref: str | None = None, fileName="", contents="") -> Oid:
    """
    Create a commit with a single file. If `ref` is given, it's updated to point to the new commit.
    `time` is an offset from TEST_SIGNATURE's timestamp, in seconds.
    """
    fileName = fileName or f"{message.split()[0].lower()}.txt"
    blob = repo.create_blob((contents or message).encode("utf-8"))
    builder = repo.TreeBuilder()
    builder.insert(fileName, blob, FileMode.BLOB)
    tree = builder.write()
    sig = signatureAt(time)
    return repo.create_commit(ref, sig, sig, message, tree, parents)


def writeFile(path: str, text: str):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def localRef(name: str, target: str, isHead=False) -> RefFacts:
    return RefFacts(name, f"refs/heads/{name}", RefKind.LOCAL, target, isHead=isHead)


def remoteRef(name: str, target: str) -> RefFacts:
    return RefFacts(name, f"refs/remotes/{name}", RefKind.REMOTE, target)


def tagRef(name: str, target: str) -> RefFacts:
    return RefFacts(name, f"refs/tags/{name}", RefKind.TAG, target)
