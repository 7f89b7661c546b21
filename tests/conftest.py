"""Shared test fixtures for Gemini Session Bridge."""

import os
import sys
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication for tests that need Qt."""
    os.environ["QT_QPA_PLATFORM"] = "offscreen"
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv[:1] or ["test"])
    yield app


@pytest.fixture
def gemini_home(tmp_path) -> Path:
    """Create a temporary ~/.gemini directory with an empty tmp/ tree."""
    home = tmp_path / ".gemini"
    (home / "tmp").mkdir(parents=True)
    return home


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """A real project directory registered under the ID 'proj1'."""
    path = tmp_path / "work" / "myapp"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def registered_project(gemini_home, project_dir) -> Path:
    from helpers import write_registry

    write_registry(gemini_home, {str(project_dir): "proj1"})
    (gemini_home / "tmp" / "proj1" / "chats").mkdir(parents=True)
    return project_dir
