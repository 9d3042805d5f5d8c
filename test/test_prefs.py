# -----------------------------------------------------------------------------
# Copyright (C) 2024 Iliyas Jorio.
# This file is part of GitLanes, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import json
import os

from gitlanes import settings
from gitlanes.settings import LoggingLevel, Prefs


def prefsPath():
    return os.path.join(Prefs().getParentDir(), "prefs.json")


def testDefaultsAreNotWritten():
    prefs = Prefs()
    assert prefs.nonDefaultValues() == {}
    assert prefs.write() == ""
    assert not os.path.exists(prefsPath())


def testRoundTrip():
    prefs = Prefs()
    prefs.maxCommits = 500
    prefs.verbosity = LoggingLevel.DEBUG
    path = prefs.write()

    assert path == prefsPath()
    with open(path, encoding="utf-8") as f:
        assert json.load(f) == {"maxCommits": 500, "verbosity": LoggingLevel.DEBUG.value}

    loaded = Prefs()
    assert loaded.load()
    assert loaded.maxCommits == 500
    assert loaded.verbosity is LoggingLevel.DEBUG
    assert loaded.labelSpacing == 1


def testBackToDefaultsDeletesFile():
    prefs = Prefs()
    prefs.labelSpacing = 3
    prefs.write()
    assert os.path.isfile(prefsPath())

    prefs.reset()
    prefs.write()
    assert not os.path.exists(prefsPath())


def testLoadDropsBadValues():
    os.makedirs(os.path.dirname(prefsPath()), exist_ok=True)
    with open(prefsPath(), "w", encoding="utf-8") as f:
        json.dump({
            "maxCommits": True,
            "labelSpacing": "wide",
            "verbosity": 20,
            "forceSerialWork": True,
            "_hidden": 1,
            "someOldSetting": 42,
        }, f)

    prefs = Prefs()
    assert prefs.load()
    assert prefs.maxCommits == 0
    assert prefs.labelSpacing == 1
    assert prefs.verbosity is LoggingLevel.INFO
    assert prefs.forceSerialWork is True
    assert not hasattr(prefs, "someOldSetting")


def testLoadGarbage():
    os.makedirs(os.path.dirname(prefsPath()), exist_ok=True)
    with open(prefsPath(), "w", encoding="utf-8") as f:
        f.write("{ this isn't json")
    assert not Prefs().load()

    with open(prefsPath(), "w", encoding="utf-8") as f:
        f.write("[1, 2, 3]")
    assert not Prefs().load()


def testMissingFile():
    assert not Prefs().load()


def testEffectiveMaxCommits():
    prefs = Prefs()
    assert prefs.effectiveMaxCommits() == 0
    prefs.maxCommits = -5
    assert prefs.effectiveMaxCommits() == 0
    prefs.maxCommits = 1000
    assert prefs.effectiveMaxCommits() == 1000


def testGlobalPrefsStartFromDefaults(isolatedPrefs):
    assert isolatedPrefs is settings.prefs
    assert settings.prefs.nonDefaultValues() == {}
