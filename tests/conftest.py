"""Shared fixtures for rid_index tests."""

import shutil
import tempfile
from pathlib import Path

import pytest

from rid_index.components.recordfile import write_records


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    yield Path(tmpdir)
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def make_records(temp_dir):
    """Write a record file from a list of keys; payload is '<key>/<n>'."""

    def _make(keys, name="reads.rec"):
        path = temp_dir / name
        write_records(path, ((k, f"{k}/{n}".encode()) for n, k in enumerate(keys)))
        return path

    return _make
