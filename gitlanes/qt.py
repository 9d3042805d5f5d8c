# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

# Single import point for QtCore. Nothing in GitLanes touches QtGui or QtWidgets.
#
# Bindings are tried in this order: PyQt6, PySide6, PyQt5. Setting QT_API to
# one of "pyqt6", "pyside6" or "pyqt5" moves that binding to the front.
# Under pytest, set PYTEST_QT_API instead (test/__init__.py syncs the two).

import logging as _logging
import os as _os
import sys as _sys

from gitlanes.appconsts import *

_logger = _logging.getLogger(__name__)

QT_BINDING = ""
QT_BINDING_VERSION = ""


def _candidateBindings() -> list[str]:
    known = ["pyqt6", "pyside6", "pyqt5"]
    wanted = APP_FREEZE_QT or _os.environ.get("QT_API", "").lower()

    if APP_FREEZE_QT:
        return [APP_FREEZE_QT]
    if not wanted:
        return known
    if wanted not in known:
        _logger.warning(f"QT_API names an unknown binding, ignoring it: '{wanted}'")
        return known
    return [wanted] + [b for b in known if b != wanted]


for _candidate in _candidateBindings():
    try:
        if _candidate == "pyqt6":
            from PyQt6.QtCore import *
            QT_BINDING, QT_BINDING_VERSION = "PyQt6", PYQT_VERSION_STR
        elif _candidate == "pyside6":
            from PySide6.QtCore import *
            from PySide6 import __version__ as QT_BINDING_VERSION
            QT_BINDING = "PySide6"
        elif _candidate == "pyqt5":
            from PyQt5.QtCore import *
            QT_BINDING, QT_BINDING_VERSION = "PyQt5", PYQT_VERSION_STR
    except ImportError:
        _logger.debug(f"Qt binding unavailable: {_candidate}")
        continue
    if QT_BINDING:
        break

if not QT_BINDING:
    _sys.stderr.write("GitLanes needs QtCore from PyQt6, PySide6 or PyQt5; none of them could be imported.\n")
    _sys.exit(1)

_logger.debug(f"Using {QT_BINDING} {QT_BINDING_VERSION}")

# PySide6 naming for signals on every binding
if QT_BINDING.startswith("PyQt"):
    Signal = pyqtSignal


def onAppThread() -> bool:
    """ True on the thread that owns the QCoreApplication, or anywhere if no app exists yet. """
    app = QCoreApplication.instance()
    return app is None or app.thread() is QThread.currentThread()
