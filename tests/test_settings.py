"""Tests for SettingsManager config layering."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from dep_trace.models import TraceConfig
from dep_trace.settings import SettingsManager


@pytest.fixture
def dirs(tmp_path: Path, monkeypatch):
    """Project and user settings directories, with a clean environment."""
    monkeypatch.delenv("DEP_TRACE_MAX_DEPTH", raising=False)
    monkeypatch.delenv("DEP_TRACE_CACHE_TTL", raising=False)
    project = tmp_path / "project"
    user = tmp_path / "user"
    (project / ".dep-trace").mkdir(parents=True)
    user.mkdir()
    return project, user


def test_defaults_without_settings(dirs):
    project, user = dirs
    config = SettingsManager(project_dir=project, user_dir=user).build_config()

    assert config == TraceConfig()
    assert config.max_depth == 5
    assert config.cache_ttl == 4.0


def test_project_overrides_user(dirs):
    project, user = dirs
    (user / "settings.yaml").write_text(dedent("""
        trace:
          max_depth: 3
          cache_ttl: 10
    """))
    (project / ".dep-trace" / "settings.yaml").write_text(dedent("""
        trace:
          max_depth: 7
    """))

    config = SettingsManager(project_dir=project, user_dir=user).build_config()

    assert config.max_depth == 7
    assert config.cache_ttl == 10.0


def test_environment_overrides_files(dirs, monkeypatch):
    project, user = dirs
    (project / ".dep-trace" / "settings.yaml").write_text("trace:\n  max_depth: 7\n")
    monkeypatch.setenv("DEP_TRACE_MAX_DEPTH", "9")

    config = SettingsManager(project_dir=project, user_dir=user).build_config()

    assert config.max_depth == 9


def test_explicit_overrides_win(dirs, monkeypatch):
    project, user = dirs
    monkeypatch.setenv("DEP_TRACE_MAX_DEPTH", "9")

    config = SettingsManager(project_dir=project, user_dir=user).build_config(max_depth=2, cache_ttl=None)

    assert config.max_depth == 2
    assert config.cache_ttl == 4.0


def test_invalid_environment_value_is_ignored(dirs, monkeypatch, caplog):
    project, user = dirs
    monkeypatch.setenv("DEP_TRACE_MAX_DEPTH", "lots")

    with caplog.at_level("WARNING", logger="dep_trace.settings"):
        config = SettingsManager(project_dir=project, user_dir=user).build_config()

    assert config.max_depth == 5
    assert "Ignoring invalid environment values" in caplog.text


def test_malformed_yaml_is_skipped(dirs, caplog):
    project, user = dirs
    (project / ".dep-trace" / "settings.yaml").write_text("trace: [unclosed\n")

    with caplog.at_level("WARNING", logger="dep_trace.settings"):
        config = SettingsManager(project_dir=project, user_dir=user).build_config()

    assert config == TraceConfig()
    assert "Failed to read settings" in caplog.text


def test_non_mapping_trace_section_is_skipped(dirs):
    project, user = dirs
    (project / ".dep-trace" / "settings.yaml").write_text("trace: 5\n")

    assert SettingsManager(project_dir=project, user_dir=user).get_trace_settings() == {}


def test_empty_settings_file(dirs):
    project, user = dirs
    (project / ".dep-trace" / "settings.yaml").write_text("")

    assert SettingsManager(project_dir=project, user_dir=user).get_trace_settings() == {}


def test_invalid_explicit_override_raises(dirs):
    project, user = dirs

    with pytest.raises(ValidationError):
        SettingsManager(project_dir=project, user_dir=user).build_config(max_depth=-1)


def test_config_is_frozen():
    config = TraceConfig()

    with pytest.raises(ValidationError):
        config.max_depth = 10
