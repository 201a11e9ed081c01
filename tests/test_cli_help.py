"""Tests for CLI help text."""

from __future__ import annotations

import pytest

from listmark.cli import main


def _render_help(capsys: pytest.CaptureFixture[str]) -> str:
    """Run `listmark --help` via CLI entrypoint and return captured stdout."""
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    return capsys.readouterr().out


def test_help_includes_tagline(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "listmark: Pandoc extended lists for Markdown" in out


def test_help_includes_common_usage(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "Common usage:" in out
    assert "listmark notes.md" in out
    assert "listmark --renumber --inplace docs/" in out
    assert "listmark --list-files ." in out


def test_help_lists_actions(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    for flag in ["--renumber", "--labels", "--check", "--strict", "--no-custom-labels"]:
        assert flag in out


def test_actions_are_exclusive(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--renumber", "--check", "x.md"])
    assert exc.value.code == 2
    assert "not allowed with" in capsys.readouterr().err
