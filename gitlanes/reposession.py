# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging

from gitlanes import settings
from gitlanes.backend import BackendError, ErrorKind, NoRepositoryError, RefFacts, RepoBackend
from gitlanes.graph import LayoutSnapshot, computeLayout, placeRefLabels
from gitlanes.graph.rowdiff import DiffHint
from gitlanes.operations import Operation, classify
from gitlanes.qt import *
from gitlanes.repoinfo import CommitsInfo, RepoInfo, gatherRepoInfo
from gitlanes.toolbox import Benchmark, excStrings
from gitlanes.workqueue import WorkQueue

logger = logging.getLogger(__name__)


class RepoSession(QObject):
    """
    Owns a repository backend and the layout of its last successful walk.

    Each call to `trigger` produces exactly one `payloadReady` or one
    `errorOccurred` signal. Computations never overlap: they run one at a
    time, in the order they were triggered. A failed computation leaves the
    previous layout in place.
    """

    payloadReady = Signal(object)
    """ RepoInfo """

    errorOccurred = Signal(str, str)
    """ Error kind, message """

    def __init__(self, backend: RepoBackend | None = None, parent: QObject | None = None):
        super().__init__(parent)
        self._backend = backend
        self._snapshot = LayoutSnapshot()
        self._mutex = QMutex()
        self.workQueue = WorkQueue(self)

    @property
    def snapshot(self) -> LayoutSnapshot:
        """ The last published layout. Either the old one or the new one, never anything in between. """
        return self._snapshot

    @property
    def backend(self) -> RepoBackend | None:
        return self._backend

    def setBackend(self, backend: RepoBackend | None):
        """ Switch to another repository. The next computation starts from a blank layout. """
        with QMutexLocker(self._mutex):
            self._backend = backend
            self._snapshot = LayoutSnapshot()

    def trigger(self, operation: Operation | str):
        operation = Operation(operation)
        self.workQueue.put(
            lambda: self.compute(operation),
            then=self.payloadReady.emit,
            onError=self._reportError,
            caption=str(operation))

    def compute(self, operation: Operation | str) -> RepoInfo:
        """
        Run one computation synchronously and publish its layout.
        Raises on failure, in which case nothing is published.
        """
        classification = classify(operation)

        with QMutexLocker(self._mutex), Benchmark(f"compute {operation}"):
            backend = self._backend
            if backend is None:
                raise NoRepositoryError("no repository is open")

            previous = self._snapshot
            refs = backend.listRefs()
            detachedHead = backend.detachedHead()
            spacing = settings.prefs.labelSpacing

            needsWalk = classification.needsWalk
            hint = classification.hint
            if not needsWalk and self._refsLeftLayout(previous, refs, detachedHead):
                logger.info(f"{operation}: refs point outside the layout, walking after all")
                needsWalk = True
                hint = DiffHint.UNKNOWN

            if needsWalk:
                snapshot, delta = computeLayout(backend, previous, hint, settings.prefs.effectiveMaxCommits())
                labels = placeRefLabels(refs, snapshot.lanes(), detachedHead, spacing)
                commits = CommitsInfo.fromDelta(delta, labels)
            else:
                snapshot = previous
                labels = placeRefLabels(refs, previous.lanes(), detachedHead, spacing)
                commits = CommitsInfo(truncated=previous.truncated, refLabels=labels)

            info = gatherRepoInfo(backend, commits, refs)

            # Publish only once everything has succeeded
            self._snapshot = snapshot

        return info

    @staticmethod
    def _refsLeftLayout(previous: LayoutSnapshot, refs: list[RefFacts], detachedHead: str) -> bool:
        """ True if the set of reachable commits may have changed under our feet. """
        if not previous.sequence:
            return True
        if previous.truncated:
            # Refs past the commit limit legitimately point outside the layout
            return False
        targets = [r.target for r in refs]
        if detachedHead:
            targets.append(detachedHead)
        return any(t not in previous for t in targets)

    def _reportError(self, exc: Exception):
        if isinstance(exc, BackendError):
            kind = exc.kind
            message = str(exc)
            logger.warning(f"Layout computation failed ({kind}): {message}")
        else:
            kind = ErrorKind.BACKEND_FAILURE
            message, details = excStrings(exc)
            logger.warning(f"Unexpected error during layout computation:\n{details}")
        self.errorOccurred.emit(str(kind), message)
