import subprocess

import pytest


@pytest.fixture
def in_tmp_path(tmp_path, monkeypatch):
    """Run the test with ``tmp_path`` as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def completed():
    def _completed(returncode=0):
        return subprocess.CompletedProcess(args=[], returncode=returncode)
    return _completed
