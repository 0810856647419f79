"""Tests for configuration loading."""

import textwrap
from pathlib import Path

import pytest

from denote_contacts.config import Config, load_config, resolve_directories
from denote_contacts.errors import ConfigError
from denote_contacts.paths import get_config_path


@pytest.fixture
def home(tmp_path):
    path = tmp_path / "home"
    path.mkdir()
    return path


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path, home):
        config = load_config(tmp_path / "missing.toml", home=home)
        assert config.notes_directory == home / "Documents" / "denote"
        assert config.tasks_directory == home / "notes"

    def test_file_values_with_home_expansion(self, tmp_path, home):
        path = tmp_path / "config.toml"
        path.write_text(textwrap.dedent("""\
            notes_directory = "~/people"
            tasks_directory = "/srv/tasks"
        """), encoding="utf-8")
        config = load_config(path, home=home)
        assert config.notes_directory == home / "people"
        assert config.tasks_directory == Path("/srv/tasks")

    def test_partial_file_keeps_defaults(self, tmp_path, home):
        path = tmp_path / "config.toml"
        path.write_text('notes_directory = "~"\n', encoding="utf-8")
        config = load_config(path, home=home)
        assert config.notes_directory == home
        assert config.tasks_directory == home / "notes"

    def test_invalid_toml(self, tmp_path, home):
        path = tmp_path / "config.toml"
        path.write_text("notes_directory = \n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_config(path, home=home)

    def test_wrong_type(self, tmp_path, home):
        path = tmp_path / "config.toml"
        path.write_text("notes_directory = 42\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must be a string"):
            load_config(path, home=home)


class TestResolveDirectories:
    def test_environment_overrides(self):
        config = Config(Path("/a"), Path("/b"))
        resolved = resolve_directories(
            config, {"DENOTE_CONTACTS_DIR": "/env/contacts", "DENOTE_TASKS_DIR": "/env/tasks"}
        )
        assert resolved == Config(Path("/env/contacts"), Path("/env/tasks"))

    def test_empty_environment_keeps_config(self):
        config = Config(Path("/a"), Path("/b"))
        assert resolve_directories(config, {"DENOTE_CONTACTS_DIR": ""}) == config


class TestConfigPath:
    def test_xdg_config_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "denote-contacts" / "config.toml"

    def test_defaults_to_dot_config(self, tmp_path, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_config_path() == tmp_path / ".config" / "denote-contacts" / "config.toml"
