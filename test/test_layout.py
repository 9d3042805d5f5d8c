# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import pytest

from gitlanes.backend import MissingObjectError
from gitlanes.graph import ConnectorKind, DiffHint, LayoutSnapshot, computeLayout
from gitlanes.mockbackend import MockBackend


def oidsAndRows(props):
    return [(p.oid, p.row) for p in props]


def testFirstLayoutCreatesEverything():
    backend = MockBackend("a-b-c")
    snapshot, delta = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)

    assert oidsAndRows(delta.created) == [("a", 0), ("b", 1), ("c", 2)]
    assert delta.updated == []
    assert delta.diff.deleted == []
    assert not delta.diff.fullReset
    assert not delta.truncated

    assert snapshot.sequence == ("a", "b", "c")
    assert snapshot.lanes() == {"a": 0, "b": 0, "c": 0}
    assert snapshot.peakLaneCount == 1
    assert "b" in snapshot
    assert "z" not in snapshot

    a = delta.created[0]
    assert a.summary == "Commit a"
    assert a.parentOids == ("b",)
    assert a.childOids == ()
    assert [c.parent for c in a.connectors] == ["b"]


def testNothingChanged():
    backend = MockBackend("a-b-c")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)
    again, delta = computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY)

    assert delta.diff.isEmpty()
    assert delta.created == []
    assert delta.updated == []
    assert again.rowProps == snapshot.rowProps


def testNewCommitsOnTop():
    backend = MockBackend("a-b-c")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)

    backend.setHistory("x-y-z-a-b-c")
    newSnapshot, delta = computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY)

    assert oidsAndRows(delta.created) == [("x", 0), ("y", 1), ("z", 2)]
    assert delta.diff.deleted == []
    assert oidsAndRows(delta.updated) == [("a", 3), ("b", 4), ("c", 5)]
    assert newSnapshot.rowProps["a"].childOids == ("z",)

    # The previous snapshot is left alone
    assert snapshot.sequence == ("a", "b", "c")
    assert snapshot.rowProps["a"].row == 0
    assert snapshot.arena.node("a").row == 0
    assert "x" not in snapshot.arena


def testRewrittenTop():
    backend = MockBackend("x-y-a-b-c")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)

    backend.setHistory("p-q-a-b-c")
    _, delta = computeLayout(backend, snapshot, DiffHint.POSSIBLE_REWRITE)

    assert oidsAndRows(delta.created) == [("p", 0), ("q", 1)]
    assert [(d.oid, d.row) for d in delta.diff.deleted] == [("x", 0), ("y", 1)]
    # Only "a" gained a new child; "b" and "c" look exactly the same as before
    assert oidsAndRows(delta.updated) == [("a", 2)]


def testUnrelatedHistoryResets():
    backend = MockBackend("a-b-c")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)

    backend.setHistory("x-y")
    newSnapshot, delta = computeLayout(backend, snapshot, DiffHint.UNKNOWN)

    assert delta.diff.fullReset
    assert oidsAndRows(delta.created) == [("x", 0), ("y", 1)]
    assert [d.oid for d in delta.diff.deleted] == ["a", "b", "c"]
    assert delta.updated == []
    assert sorted(n.oid for n in newSnapshot.arena) == ["x", "y"]


def testBranchesSideBySide():
    backend = MockBackend("c:b d:b b-a")
    snapshot, delta = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)

    assert snapshot.lanes() == {"c": 0, "d": 1, "b": 0, "a": 0}
    assert snapshot.peakLaneCount == 2
    assert snapshot.rowProps["b"].childOids == ("c", "d")


def testCommitLimitMakesDanglingEdge():
    backend = MockBackend("a-b-c-d-e")
    snapshot, delta = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN, maxCommits=3)

    assert snapshot.sequence == ("a", "b", "c")
    assert snapshot.truncated
    assert delta.truncated

    [connector] = snapshot.rowProps["c"].connectors
    assert connector.kind == ConnectorKind.DANGLING
    assert connector.parent == "d"
    assert connector.end == (0, 3)


def testCommitLimitPushesBottomRowOut():
    backend = MockBackend("a-b-c-d-e")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN, maxCommits=3)

    backend.setHistory("n-a-b-c-d-e")
    newSnapshot, delta = computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY, maxCommits=3)

    assert newSnapshot.sequence == ("n", "a", "b")
    assert oidsAndRows(delta.created) == [("n", 0)]
    assert [(d.oid, d.row) for d in delta.diff.deleted] == [("c", 2)]
    assert "c" not in newSnapshot.arena

    bConnector = newSnapshot.rowProps["b"].connectors[0]
    assert bConnector.kind == ConnectorKind.DANGLING
    assert bConnector.end == (0, 3)
    assert [p.oid for p in delta.updated] == ["a", "b"]


def testFailureRaisesAndKeepsPrevious():
    backend = MockBackend("a-b-c")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN)

    backend.setHistory("x-a-b-c")
    backend.corrupt.add("x")
    with pytest.raises(MissingObjectError):
        computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY)

    assert snapshot.sequence == ("a", "b", "c")
    assert sorted(n.oid for n in snapshot.arena) == ["a", "b", "c"]


def testCommitLimitSlidesPastRepeatedParent():
    backend = MockBackend("a-m:p,p p-q")
    snapshot, _ = computeLayout(backend, LayoutSnapshot(), DiffHint.UNKNOWN, maxCommits=3)
    assert snapshot.sequence == ("a", "m", "p")

    # "p" falls off the bottom, leaving two holes in "m"
    backend.setHistory("n-a-m:p,p p-q")
    snapshot, _ = computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY, maxCommits=3)
    assert snapshot.sequence == ("n", "a", "m")
    [connector] = snapshot.rowProps["m"].connectors
    assert connector.kind == ConnectorKind.DANGLING

    # Then "m" itself goes
    backend.setHistory("o-n-a-m:p,p p-q")
    snapshot, delta = computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY, maxCommits=3)
    assert snapshot.sequence == ("o", "n", "a")
    assert [d.oid for d in delta.diff.deleted] == ["m"]
    assert "p" not in snapshot.arena.waitingFor
    snapshot.arena.testConsistency()

    # And later refreshes keep working
    backend.setHistory("z-o-n-a-m:p,p p-q")
    snapshot, delta = computeLayout(backend, snapshot, DiffHint.PREPEND_ONLY, maxCommits=3)
    assert snapshot.sequence == ("z", "o", "n")
    assert oidsAndRows(delta.created) == [("z", 0)]
