"""Root test configuration: session-level cleanup of runtime artifacts"""

import logging
import os
import shutil
from pathlib import Path

import pytest

from docsite.logging import HANDLER_NAME


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["docsite.db", "test.db"]
_CLEANUP_DIRS = [".docsite", "site"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files, staging and output directories created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Keep DOCSITE_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.startswith("DOCSITE_"):
            monkeypatch.delenv(key)


@pytest.fixture(autouse=True)
def detach_cli_handler():
    """CLI runs attach a stderr handler bound to CliRunner's stream; drop it after each test."""
    yield
    root = logging.getLogger()
    for h in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(h)
