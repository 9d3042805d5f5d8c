import tempfile

import pygit2
import pytest

from gitlanes import settings
from gitlanes.prefsfile import PrefsFile
from gitlanes.workqueue import WorkQueue


@pytest.fixture(scope="session", autouse=True)
def maskHostGitConfig():
    """ Hide the host's global/system git config from pygit2. """
    for level in (pygit2.enums.ConfigLevel.GLOBAL, pygit2.enums.ConfigLevel.XDG,
                  pygit2.enums.ConfigLevel.SYSTEM, pygit2.enums.ConfigLevel.PROGRAMDATA):
        pygit2.settings.search_path[level] = ""


@pytest.fixture
def tempDir():
    with tempfile.TemporaryDirectory(prefix="gitlanestest-") as td:
        yield td


@pytest.fixture(autouse=True)
def isolatedPrefs(tmp_path):
    """ Fresh default prefs for every test, saved under tmp_path. """
    assert settings.TEST_MODE
    PrefsFile.overrideDir = str(tmp_path / "config")
    settings.prefs.reset()
    yield settings.prefs
    settings.prefs.reset()
    PrefsFile.overrideDir = ""


@pytest.fixture
def taskThread():
    """ Let this test's work queue use its thread pool. """
    assert WorkQueue.ForceSerial
    WorkQueue.ForceSerial = False
    yield
    WorkQueue.ForceSerial = True
