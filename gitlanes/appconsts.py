# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

APP_SYSTEM_NAME = "gitlanes"
APP_DISPLAY_NAME = "GitLanes"
APP_VERSION = "0.1"

APP_FREEZE_QT = ""
"""
Force a specific Qt binding (e.g. "pyqt6") in frozen builds.
Leave empty to honor the QT_API environment variable.
"""
