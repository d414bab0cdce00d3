"""
Shared pytest fixtures for tar-gist.
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    tmp_dir = Path(tempfile.mkdtemp())
    yield tmp_dir
    shutil.rmtree(tmp_dir, ignore_errors=True)


@pytest.fixture
def chdir(temp_dir):
    """Run the test from inside ``temp_dir``."""
    previous = os.getcwd()
    os.chdir(temp_dir)
    yield temp_dir
    os.chdir(previous)


@pytest.fixture
def sample_tree(chdir):
    """
    Create ``d/`` with ``d/a.txt`` ("hi") and ``d/b -> a.txt``.

    Returns the directory the tree lives in; the tests run from there.
    """
    (chdir / "d").mkdir()
    (chdir / "d" / "a.txt").write_bytes(b"hi")
    os.symlink("a.txt", chdir / "d" / "b")
    return chdir
