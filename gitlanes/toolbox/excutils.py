# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import os
import traceback


def excStrings(exc: BaseException) -> tuple[str, str]:
    """
    (one-line summary, compact traceback) for an exception.

    Traceback frames are shown as "module.py:123 in function" so that
    error payloads stay readable.
    """
    summary = "".join(traceback.format_exception_only(exc)).strip()

    frames = [f"{os.path.basename(fs.filename)}:{fs.lineno} in {fs.name}"
              for fs in traceback.extract_tb(exc.__traceback__)]
    details = "\n".join(frames + [summary])

    return summary, details
