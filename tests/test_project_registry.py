"""Tests for gemini_bridge.services.project_registry."""

import os

import pytest

from gemini_bridge.services.project_registry import load_registry, resolve_project_id
from helpers import write_registry


# ---------------------------------------------------------------------------
# 1. Exact path match
# ---------------------------------------------------------------------------

def test_exact_match(gemini_home, project_dir):
    """A registered absolute path resolves to its ID."""
    write_registry(gemini_home, {str(project_dir): "abc123"})
    assert resolve_project_id(str(project_dir), gemini_home) == "abc123"


# ---------------------------------------------------------------------------
# 2. Symlinked alias resolves through realpath
# ---------------------------------------------------------------------------

def test_symlink_alias_resolves(gemini_home, project_dir, tmp_path):
    """A project registered under a symlinked alias still resolves."""
    alias = tmp_path / "alias"
    os.symlink(project_dir, alias)
    write_registry(gemini_home, {str(alias): "aliased-id"})

    assert resolve_project_id(str(project_dir), gemini_home) == "aliased-id"


def test_lookup_through_symlink(gemini_home, project_dir, tmp_path):
    """Looking up via a symlink finds the project registered by its real path."""
    alias = tmp_path / "alias"
    os.symlink(project_dir, alias)
    write_registry(gemini_home, {str(project_dir): "real-id"})

    assert resolve_project_id(str(alias), gemini_home) == "real-id"


# ---------------------------------------------------------------------------
# 3. Not found cases
# ---------------------------------------------------------------------------

def test_unregistered_path(gemini_home, project_dir, tmp_path):
    other = tmp_path / "other"
    other.mkdir()
    write_registry(gemini_home, {str(project_dir): "abc123"})
    assert resolve_project_id(str(other), gemini_home) is None


def test_missing_registry(gemini_home, project_dir):
    assert resolve_project_id(str(project_dir), gemini_home) is None


def test_malformed_registry(gemini_home, project_dir):
    (gemini_home / "projects.json").write_text("{not json")
    assert resolve_project_id(str(project_dir), gemini_home) is None


def test_non_string_entries_ignored(gemini_home, project_dir, tmp_path):
    """Valid JSON with odd entry types resolves as not registered."""
    alias = tmp_path / "alias"
    os.symlink(project_dir, alias)
    write_registry(gemini_home, {str(project_dir): 123, str(alias): ["x"]})

    assert load_registry(gemini_home / "projects.json") == {}
    assert resolve_project_id(str(project_dir), gemini_home) is None


def test_registry_without_projects_key(gemini_home, project_dir):
    (gemini_home / "projects.json").write_text('{"version": 1}')
    assert load_registry(gemini_home / "projects.json") == {}
    assert resolve_project_id(str(project_dir), gemini_home) is None


def test_broken_entries_skipped(gemini_home, project_dir, tmp_path):
    """Registered paths that no longer exist don't break the realpath scan."""
    alias = tmp_path / "alias"
    os.symlink(project_dir, alias)
    write_registry(gemini_home, {
        str(tmp_path / "deleted-project"): "gone",
        str(alias): "aliased-id",
    })
    assert resolve_project_id(str(project_dir), gemini_home) == "aliased-id"


def test_empty_path(gemini_home):
    assert resolve_project_id("", gemini_home) is None


def test_registry_never_written(gemini_home, project_dir):
    write_registry(gemini_home, {str(project_dir): "abc123"})
    before = (gemini_home / "projects.json").read_text()
    resolve_project_id(str(project_dir), gemini_home)
    assert (gemini_home / "projects.json").read_text() == before
