# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import dataclasses
import enum
import logging
import sys

from gitlanes.prefsfile import PrefsFile
from gitlanes.toolbox.benchmark import BENCHMARK_LOGGING_LEVEL

TEST_MODE = "pytest" in sys.modules
""" Set while running under pytest: prefs go to a scratch directory and work runs inline. """

DEVDEBUG = TEST_MODE
""" Turns on costly consistency checks throughout the graph package. """


class LoggingLevel(enum.IntEnum):
    BENCHMARK = BENCHMARK_LOGGING_LEVEL
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING


@dataclasses.dataclass
class Prefs(PrefsFile):
    _filename = "prefs.json"

    # Graph
    maxCommits          : int           = 0
    labelSpacing        : int           = 1

    # Advanced
    verbosity           : LoggingLevel  = LoggingLevel.WARNING
    forceSerialWork     : bool          = False

    def effectiveMaxCommits(self) -> int:
        """ Commit cap for the revision walk. Zero (or anything below) means unlimited. """
        return max(0, self.maxCommits)


prefs = Prefs()
