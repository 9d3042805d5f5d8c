# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
JSON persistence for the dataclasses in settings.py.

Only non-default, public fields (no leading underscore) make it to disk, so
a prefs file stays short and survives changes to the defaults.
"""

import dataclasses
import enum
import json
import logging
import os
import tempfile
import typing
from types import NoneType, UnionType
from typing import Any

from gitlanes.appconsts import APP_SYSTEM_NAME
from gitlanes.qt import QStandardPaths

logger = logging.getLogger(__name__)


def _fieldDefault(field: dataclasses.Field) -> Any:
    if field.default_factory is not dataclasses.MISSING:
        return field.default_factory()
    return field.default


def _unwrapOptional(hint):
    """ Turn `T | None` into `T`. Other hints pass through. """
    if type(hint) is not UnionType:
        return hint
    members = [t for t in typing.get_args(hint) if t is not NoneType]
    if len(members) != 1:
        raise TypeError(f"unsupported union in prefs: {hint}")
    return members[0]


def toJson(value: Any) -> Any:
    """ Make a field value palatable to the json module. """
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


def fromJson(value: Any, hint) -> Any:
    """
    Rebuild a field value of type `hint` from what json.load produced.

    Raises ValueError if the JSON value has the wrong shape for the field.
    """
    target = _unwrapOptional(hint)

    if target is set:
        wireType = list
    elif isinstance(target, type) and issubclass(target, enum.StrEnum):
        wireType = str
    elif isinstance(target, type) and issubclass(target, enum.Enum):
        wireType = int
    else:
        wireType = target

    # bool is a subclass of int, but `"maxCommits": true` is still a mistake
    wrongShape = not isinstance(value, wireType) or (wireType is int and type(value) is bool)
    if wrongShape:
        raise ValueError(f"expected {wireType.__name__}, got {type(value).__name__}")

    return value if wireType is target else target(value)


class PrefsFile:
    """
    Mixin for a dataclass that can be saved to and loaded from `_filename`.
    """

    _filename = ""

    overrideDir = ""
    """ When set, prefs files live here instead of the platform's config location. """

    _scratchDir = ""

    def getParentDir(self) -> str:
        from gitlanes.settings import TEST_MODE

        if PrefsFile.overrideDir:
            return PrefsFile.overrideDir

        if not TEST_MODE:
            return QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppConfigLocation)

        # Keep the user's real config out of reach during tests
        if not PrefsFile._scratchDir:
            PrefsFile._scratchDir = tempfile.mkdtemp(prefix=f"{APP_SYSTEM_NAME}-test-prefs-")
        return PrefsFile._scratchDir

    def filePath(self) -> str:
        assert self._filename, f"{type(self).__name__} needs a _filename"
        parentDir = self.getParentDir()
        return os.path.join(parentDir, self._filename) if parentDir else ""

    def _persistedFields(self):
        assert dataclasses.is_dataclass(self)
        return [f for f in dataclasses.fields(self) if not f.name.startswith("_")]

    def reset(self):
        """ Put every field back to its default value. """
        for field in dataclasses.fields(self):
            setattr(self, field.name, _fieldDefault(field))

    def nonDefaultValues(self) -> dict[str, Any]:
        return {
            field.name: toJson(getattr(self, field.name))
            for field in self._persistedFields()
            if getattr(self, field.name) != _fieldDefault(field)
        }

    def write(self) -> str:
        """
        Save the non-default values. If everything is at its default, any
        existing file is removed instead.

        Returns the path that was written, or an empty string if nothing was.
        """
        path = self.filePath()
        if not path:
            logger.warning(f"No config location available for {self._filename}")
            return ""

        payload = self.nonDefaultValues()

        if not payload:
            if os.path.isfile(path):
                logger.debug(f"All prefs at default; removing {path}")
                os.unlink(path)
            return ""

        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wt", encoding="utf-8") as f:
            json.dump(payload, f, indent="\t")

        logger.info(f"Wrote {path}")
        return path

    def load(self) -> bool:
        """
        Overlay the values found on disk onto this object.

        Unknown keys and malformed values are skipped with a warning.
        Returns False if there's no usable file at all.
        """
        path = self.filePath()
        if not path or not os.path.isfile(path):
            return False

        try:
            with open(path, "rt", encoding="utf-8") as f:
                blob = json.load(f)
        except ValueError as error:
            logger.warning(f"{path}: not valid JSON: {error}")
            return False

        if type(blob) is not dict:
            logger.warning(f"{path}: expected a JSON object at top level")
            return False

        hints = {f.name: f.type for f in self._persistedFields()}

        for key, raw in blob.items():
            if key not in hints:
                logger.warning(f"{path}: ignoring unknown key {key}")
            elif raw is not None:
                try:
                    setattr(self, key, fromJson(raw, hints[key]))
                except (TypeError, ValueError) as error:
                    logger.warning(f"{path}: ignoring {key}: {error}")

        return True
