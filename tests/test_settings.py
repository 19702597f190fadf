"""Tests for lazily-read environment settings."""

from __future__ import annotations

from pathlib import Path

import pytest

import ary.settings as settings
from ary import paths


def test_defaults(monkeypatch):
    for name in (
        "ARY_MIN_ENTRIES_TO_FINISH",
        "ARY_GRAPH_PATH",
        "ARY_PROFILES_PATH",
        "ARY_EXPORT_SESSIONS",
        "ARY_EXPORT_DIR",
        "ARY_MAX_MESSAGE_CHARS",
    ):
        monkeypatch.delenv(name, raising=False)
    settings.reset()

    assert settings.MIN_ENTRIES_TO_FINISH == 5
    assert settings.GRAPH_PATH == paths.GRAPH_PATH
    assert settings.PROFILES_PATH == paths.PROFILES_PATH
    assert settings.EXPORT_SESSIONS is False
    assert settings.EXPORT_DIR == paths.SESSIONS_DIR
    assert settings.MAX_MESSAGE_CHARS == 4000


def test_packaged_data_files_exist():
    assert paths.GRAPH_PATH.is_file()
    assert paths.PROFILES_PATH.is_file()


def test_overrides_are_read_lazily(monkeypatch, tmp_path):
    monkeypatch.setenv("ARY_MIN_ENTRIES_TO_FINISH", "3")
    monkeypatch.setenv("ARY_EXPORT_DIR", str(tmp_path))
    monkeypatch.setenv("ARY_MAX_MESSAGE_CHARS", "100")
    settings.reset()

    assert settings.MIN_ENTRIES_TO_FINISH == 3
    assert settings.EXPORT_DIR == Path(tmp_path)
    assert settings.MAX_MESSAGE_CHARS == 100


@pytest.mark.parametrize("raw", ["not-a-number", "0", "-2"])
def test_invalid_min_entries_falls_back(monkeypatch, raw):
    monkeypatch.setenv("ARY_MIN_ENTRIES_TO_FINISH", raw)
    settings.reset()

    assert settings.MIN_ENTRIES_TO_FINISH == 5


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("true", True), (" Yes ", True), ("on", True), ("0", False), ("nope", False)],
)
def test_export_flag(monkeypatch, raw, expected):
    monkeypatch.setenv("ARY_EXPORT_SESSIONS", raw)
    settings.reset()

    assert settings.EXPORT_SESSIONS is expected


def test_unknown_setting():
    with pytest.raises(AttributeError):
        settings.NOT_A_SETTING  # noqa: B018
