from gitlanes.backend import RefKind
from gitlanes.graph import ConnectorKind, placeRefLabels, routeConnector
from .util import *


def testRouteAdjacentRows():
    assert routeConnector((0, 3), 0, (0, 4)) == (ConnectorKind.STRAIGHT, ((0, 3), (0, 4)))
    assert routeConnector((2, 3), 2, (0, 4)) == (ConnectorKind.BEND, ((2, 3), (0, 4)))


def testRouteLongStraightEdge():
    kind, points = routeConnector((1, 0), 1, (1, 10))
    assert kind == ConnectorKind.STRAIGHT
    assert points == ((1, 0), (1, 10))


def testRouteForkOutToSideLane():
    kind, points = routeConnector((0, 0), 2, (2, 5))
    assert kind == ConnectorKind.BEND
    assert points == ((0, 0), (2, 1), (2, 5))


def testRouteMergeBackIntoParentLane():
    kind, points = routeConnector((2, 1), 2, (0, 5))
    assert kind == ConnectorKind.BEND
    assert points == ((2, 1), (2, 4), (0, 5))


def testRouteThroughThirdLane():
    kind, points = routeConnector((0, 0), 1, (2, 4))
    assert kind == ConnectorKind.BEND
    assert points == ((0, 0), (1, 1), (1, 3), (2, 4))


def testRouteThroughThirdLaneOverTwoRows():
    # Both bends land on the single row in between
    kind, points = routeConnector((0, 0), 1, (2, 2))
    assert points == ((0, 0), (1, 1), (2, 2))


def testRouteDangling():
    kind, points = routeConnector((0, 2), 1, (1, 3), dangling=True)
    assert kind == ConnectorKind.DANGLING
    assert points == ((0, 2), (1, 3))

    kind, points = routeConnector((1, 0), 1, (1, 6), dangling=True)
    assert kind == ConnectorKind.DANGLING
    assert points == ((1, 0), (1, 1), (1, 6))


def testLabelsStackedHeadFirst():
    refs = [
        tagRef("v2", "a"),
        remoteRef("origin/main", "a"),
        localRef("zeta", "a"),
        localRef("main", "a", isHead=True),
        localRef("alpha", "a"),
        tagRef("v1", "a"),
    ]
    labels = placeRefLabels(refs, {"a": 3})["a"]

    assert [l.label for l in labels] == ["main", "alpha", "zeta", "origin/main", "v1", "v2"]
    assert [l.kind for l in labels] == [RefKind.LOCAL] * 3 + [RefKind.REMOTE] + [RefKind.TAG] * 2
    assert [l.offset for l in labels] == [0, 1, 2, 3, 4, 5]
    assert all(l.lane == 3 for l in labels)
    assert [l.isHead for l in labels] == [True] + [False] * 5


def testLabelSpacing():
    refs = [localRef("b", "x"), localRef("a", "x"), tagRef("t", "y")]
    placements = placeRefLabels(refs, {"x": 0, "y": 1}, spacing=4)
    assert [(l.label, l.offset) for l in placements["x"]] == [("a", 0), ("b", 4)]
    assert [(l.label, l.offset, l.lane) for l in placements["y"]] == [("t", 0, 1)]


def testLabelsSkipCommitsOutsideLayout():
    refs = [localRef("main", "a", isHead=True), localRef("far", "zzz")]
    placements = placeRefLabels(refs, {"a": 0})
    assert list(placements) == ["a"]


def testDetachedHeadLabel():
    refs = [localRef("main", "a"), tagRef("v1", "b")]
    placements = placeRefLabels(refs, {"a": 0, "b": 1}, detachedHead="b")

    labels = placements["b"]
    assert [l.label for l in labels] == ["HEAD", "v1"]
    assert labels[0].isHead
    assert labels[0].kind == RefKind.LOCAL
    assert not placements["a"][0].isHead


def testLabelJson():
    [label] = placeRefLabels([remoteRef("origin/dev", "c")], {"c": 2})["c"]
    assert label.toJson() == {"label": "origin/dev", "type": "remote", "offset": 0, "lane": 2, "is_head": False}
