# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import logging
import os

logging.basicConfig(level=logging.DEBUG)
logging.captureWarnings(True)

# Headless runs (CI, containers)
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

# gitlanes.qt reads QT_API; pytest-qt reads PYTEST_QT_API. Make both name the same binding.
_binding = os.environ.get("PYTEST_QT_API") or os.environ.get("QT_API")
if not _binding:
    from pytestqt.qt_compat import qt_api
    qt_api.set_qt_api("")
    _binding = qt_api.pytest_qt_api
os.environ["PYTEST_QT_API"] = os.environ["QT_API"] = _binding

from gitlanes.qt import *  # noqa: E402
