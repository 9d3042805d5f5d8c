# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import logging
import sys
from argparse import ArgumentParser

from gitlanes.appconsts import APP_DISPLAY_NAME, APP_VERSION

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    from gitlanes.operations import Operation

    parser = ArgumentParser(prog="gitlanes", description=f"{APP_DISPLAY_NAME} commit graph layout")
    parser.add_argument("path", nargs="?", default=".", help="Path to a git repository")
    parser.add_argument("-n", "--max-commits", type=int, default=-1,
                        help="Stop walking after this many commits (0: no limit, default: from prefs)")
    parser.add_argument("-o", "--operation", default=str(Operation.REPO_OPENED),
                        choices=[str(op) for op in Operation])
    parser.add_argument("-i", "--indent", type=int, default=None, help="Pretty-print the JSON payload")
    parser.add_argument("--test-mode", action="store_true", help="Don't touch the user's prefs")
    parser.add_argument("--debug", action="store_true", help="Verbose logging and expensive assertions")
    parser.add_argument("--version", action="version", version=f"{APP_DISPLAY_NAME} {APP_VERSION}")
    args = parser.parse_args(argv)

    from gitlanes import settings

    if args.test_mode:
        settings.TEST_MODE = True
    else:
        settings.prefs.load()

    if args.debug:
        settings.DEVDEBUG = True
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=settings.prefs.verbosity)

    if args.max_commits >= 0:
        settings.prefs.maxCommits = args.max_commits

    from gitlanes.backend import BackendError
    from gitlanes.gitbackend import Pygit2Backend
    from gitlanes.reposession import RepoSession

    try:
        session = RepoSession(Pygit2Backend.open(args.path))
        info = session.compute(args.operation)
    except BackendError as exc:
        sys.stderr.write(f"{exc.kind}: {exc}\n")
        return 1

    print(info.dumps(indent=args.indent))
    return 0


if __name__ == '__main__':
    sys.exit(main())
