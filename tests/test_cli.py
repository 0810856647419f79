"""Tests for the command-line entry point and key decoding."""

import pytest

from denote_contacts.cli import main
from denote_contacts.terminal import decode_keys


class TestCli:
    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--version"])
        assert exc.value.code == 0
        assert capsys.readouterr().out.strip() == "denote-contacts v0.1.0"

    def test_bad_config_exits_1(self, tmp_path, monkeypatch, capsys):
        config = tmp_path / "config.toml"
        config.write_text("notes_directory = [\n", encoding="utf-8")
        monkeypatch.setattr("denote_contacts.config.get_config_path", lambda: config)
        monkeypatch.setattr("denote_contacts.cli.get_log_path", lambda: tmp_path / "test.log")
        assert main([]) == 1
        assert "Error:" in capsys.readouterr().err


class TestDecodeKeys:
    def test_printable_and_control(self):
        assert decode_keys("ab \r\x7f") == ["a", "b", " ", "enter", "backspace"]

    def test_arrows_and_navigation(self):
        assert decode_keys("\x1b[A\x1b[B\x1b[H\x1b[F") == ["up", "down", "home", "end"]

    def test_lone_escape(self):
        assert decode_keys("\x1b") == ["esc"]

    def test_ctrl_keys(self):
        assert decode_keys("\x03\x04\x15\x13\x11") == ["ctrl+c", "ctrl+d", "ctrl+u", "ctrl+s", "ctrl+q"]

    def test_unknown_sequence_dropped(self):
        assert decode_keys("\x1b[15~x") == ["x"]
