# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import logging
from typing import Callable

from gitlanes import settings
from gitlanes.qt import *

logger = logging.getLogger(__name__)

WorkFunc = Callable[[], object]
ResultCallback = Callable[[object], None]
ErrorCallback = Callable[[Exception], None]


class WorkerSignals(QObject):
    """ Carries a worker's outcome back to the thread that owns this object. """
    succeeded = Signal(object)
    failed = Signal(object)
    done = Signal()


class Worker(QRunnable):
    def __init__(self, work: WorkFunc):
        super().__init__()
        self.work = work
        self.signals = WorkerSignals()

    def run(self):
        try:
            outcome = self.work()
        except Exception as exc:
            self.signals.failed.emit(exc)
        else:
            self.signals.succeeded.emit(outcome)
        self.signals.done.emit()


class WorkQueue:
    """
    First-in, first-out runner for layout computations.

    With the default single thread, work items never overlap, and every item
    ends in exactly one call to `then` or `onError`, on the app thread.
    """

    ForceSerial = settings.TEST_MODE
    """ Run work inline on the calling thread instead of the pool. """

    def __init__(self, parent: QObject, maxThreadCount: int = 1):
        self.threadpool = QThreadPool(parent)
        self.threadpool.setMaxThreadCount(maxThreadCount)
        self.pending: set[Worker] = set()

    def put(self, work: WorkFunc, then: ResultCallback, onError: ErrorCallback, caption: str = "work"):
        """
        Schedule `work`. Its return value goes to `then`; an exception it
        raises goes to `onError` instead.
        """
        if WorkQueue.ForceSerial or settings.prefs.forceSerialWork:
            logger.debug(f"Running inline: {caption}")
            try:
                outcome = work()
            except Exception as exc:
                onError(exc)
            else:
                then(outcome)
            return

        logger.debug(f"Queuing: {caption}")
        worker = Worker(work)
        # The pool mustn't delete the worker (and its signals) before we've been notified
        worker.setAutoDelete(False)
        self.pending.add(worker)

        def deliver(outcome):
            assert onAppThread()
            then(outcome)

        def fail(exc):
            assert onAppThread()
            onError(exc)

        worker.signals.succeeded.connect(deliver)
        worker.signals.failed.connect(fail)
        worker.signals.done.connect(lambda: self.pending.discard(worker))
        self.threadpool.start(worker)

    def waitForDone(self, msecs: int = -1) -> bool:
        return self.threadpool.waitForDone(msecs)
