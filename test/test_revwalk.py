import pytest

from gitlanes.backend import CommitFacts, MalformedDataError, MissingObjectError
from gitlanes.graph import sortNewestFirst, walkRevisions
from gitlanes.mockbackend import MockBackend
from .util import *


def makeLookup(times: dict[str, int], parents: dict[str, list[str]]):
    def lookup(oid):
        return CommitFacts(oid=oid, summary=oid, parentOids=tuple(parents.get(oid, [])), commitTime=times[oid])
    return lookup


def testNewestFirst():
    lookup = makeLookup(
        times={"a": 5, "b": 3, "c": 4, "d": 1},
        parents={"a": ["b"], "c": ["d"], "b": ["d"]})
    order = [c.oid for c in sortNewestFirst(["a", "c"], lookup)]
    assert order == ["a", "c", "b", "d"]


def testChildNeverAfterParent():
    # Parent "p" has a more recent timestamp than its child "c" (clock skew)
    lookup = makeLookup(times={"c": 1, "p": 100, "x": 50}, parents={"c": ["p"]})
    order = [c.oid for c in sortNewestFirst(["c", "x"], lookup)]
    assert order.index("c") < order.index("p")
    assert order == ["x", "c", "p"]


def testTiesBrokenByDiscoveryOrder():
    lookup = makeLookup(times={"a": 7, "b": 7, "c": 7, "r": 1}, parents={"a": ["r"], "b": ["r"], "c": ["r"]})
    assert [c.oid for c in sortNewestFirst(["b", "c", "a"], lookup)] == ["b", "c", "a", "r"]


def testSharedAncestryComesOutOnce():
    lookup = makeLookup(times={"m": 9, "x": 8, "y": 7, "r": 1}, parents={"m": ["x", "y"], "x": ["r"], "y": ["r"]})
    order = [c.oid for c in sortNewestFirst(["m", "x", "y", "r"], lookup)]
    assert order == ["m", "x", "y", "r"]


def testWalkRowsAreContiguous():
    backend = MockBackend("a-b:c,d c:e d-e")
    walk = walkRevisions(backend)
    assert walk.sequence == ["a", "b", "c", "d", "e"]
    assert walk.rowOf() == {"a": 0, "b": 1, "c": 2, "d": 3, "e": 4}
    assert set(walk.facts) == set(walk.sequence)
    assert not walk.truncated


def testWalkTruncation():
    backend = MockBackend("a-b-c-d-e")
    walk = walkRevisions(backend, maxCommits=3)
    assert walk.sequence == ["a", "b", "c"]
    assert walk.truncated


def testWalkLimitNotReached():
    backend = MockBackend("a-b-c")
    walk = walkRevisions(backend, maxCommits=3)
    assert walk.sequence == ["a", "b", "c"]
    assert not walk.truncated


def testWalkIncludesTagsAndDetachedHead():
    backend = MockBackend("a-b-c x:b t:c", refs=[localRef("main", "a", isHead=True), tagRef("v1", "t")])
    backend.detached = "x"
    walk = walkRevisions(backend)
    assert set(walk.sequence) == {"a", "b", "c", "x", "t"}


def testWalkMissingParent():
    backend = MockBackend("a-b-c")
    backend.corrupt.add("b")
    with pytest.raises(MissingObjectError):
        walkRevisions(backend)


def testWalkRejectsDuplicates():
    class StutteringBackend(MockBackend):
        def walkCommits(self, maxCommits=0):
            for commit in super().walkCommits(maxCommits):
                yield commit
                yield commit

    with pytest.raises(MalformedDataError):
        walkRevisions(StutteringBackend("a-b"))
