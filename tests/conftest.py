"""Shared fixtures: isolated config and scratch files per test."""

import pytest

from hunk_editor.config import Config, set_config
from hunk_editor.editing.scratch import ScratchFiles


@pytest.fixture(autouse=True)
def isolated_config():
    """Use built-in defaults instead of any .hunk_editor.yaml on the machine."""
    cfg = Config({})
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def scratch(tmp_path):
    files = ScratchFiles(directory=str(tmp_path / "scratch"))
    yield files
    files.sweep()


@pytest.fixture
def make_file(tmp_path):
    """Write *content* to a file under tmp_path and return its path."""
    def _make(content: str, name: str = "target.txt") -> str:
        path = tmp_path / name
        path.write_bytes(content.encode("utf-8"))
        return str(path)
    return _make
