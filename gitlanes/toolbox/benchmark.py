# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import logging
import os
import time

logger = logging.getLogger(__name__)

BENCHMARK_LOGGING_LEVEL = 5
logging.addLevelName(BENCHMARK_LOGGING_LEVEL, "BENCHMARK")

try:
    import psutil
except ModuleNotFoundError:
    logger.info("Install psutil to see memory deltas in benchmark logs.")
    psutil = None


def _residentBytes() -> int:
    return psutil.Process(os.getpid()).memory_info().rss if psutil else 0


class Benchmark:
    """
    Stopwatch for a block of code, logged at BENCHMARK_LOGGING_LEVEL.

    Use it as a context manager. Within the block, `enter("phase")` closes
    the running phase (logging it) and starts timing the next one, so a
    multi-step computation gets one log line per step. Nested benchmarks
    show up as "outer/inner" in the logs.
    """

    _stack: list[str] = []

    def __init__(self, name: str):
        self.name = name
        self.phase = ""
        self._t0 = None
        self._rss0 = 0

    def enter(self, phase=""):
        if self._t0 is not None:
            self.exit()
        Benchmark._stack.append(self.name)
        self.phase = phase
        self._rss0 = _residentBytes()
        self._t0 = time.perf_counter()

    def exit(self):
        ms = (time.perf_counter() - self._t0) * 1000
        rssDelta = (_residentBytes() - self._rss0) >> 10

        label = "/".join(Benchmark._stack)
        if self.phase:
            label = f"{label} [{self.phase}]"
        logger.log(BENCHMARK_LOGGING_LEVEL, f"{label}: {ms:.2f} ms, {rssDelta:+,d} KiB")

        Benchmark._stack.pop()
        self._t0 = None
        self.phase = ""

    def __enter__(self):
        self.enter()
        return self

    def __exit__(self, *excInfo):
        self.exit()
