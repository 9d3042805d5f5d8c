# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

# Draws the lanes for a toy history, e.g.:
#   python -m gitlanes.graph "m:a,b a-c b-c"

if __name__ == '__main__':
    from argparse import ArgumentParser
    from gitlanes.graph import GraphDiagram, parseDefinition, weaveLanes, NodeArena
    from gitlanes.backend import CommitFacts

    parser = ArgumentParser(description="Print the lane layout of a toy commit history")
    parser.add_argument("chains", nargs="+", help="history definition, newest commits first (e.g. \"m:a,b a:c b-c\")")
    parser.add_argument("-n", "--max-rows", type=int, default=50, help="stop drawing after this many commits")
    parser.add_argument("-v", "--verbose", action="store_true", help="show row numbers, heads and lane count")
    args = parser.parse_args()

    sequence, parentMap, heads = parseDefinition(" ".join(args.chains))

    arena = NodeArena()
    for oid in sequence:
        arena.add(CommitFacts(oid=oid, summary="", parentOids=tuple(parentMap[oid])))
    weaver = weaveLanes(sequence, arena)

    print(GraphDiagram.diagram(weaver, maxRows=args.max_rows, verbose=args.verbose))
    if args.verbose:
        print(f"heads: {' '.join(heads)}; peak lane count: {weaver.peakLaneCount}")
