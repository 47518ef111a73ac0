"""Shared test fixtures."""

from __future__ import annotations

import pytest

from nowplay.settings import Settings


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Redirect settings to a temp config directory."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr(Settings, "_instance", None)
    return config_home / "nowplay" / "settings.json"


@pytest.fixture
def library(tmp_path):
    """Create a media library with albums of known playable sizes.

    Sizes: rock=300 (two mp3s, ignored txt), jazz=150 (mp3 + m3u),
    films=500 (mkv), empty=0 (only a cover image), nested=0 (media only
    in a sub-subdirectory).
    """
    base = tmp_path / "library"
    base.mkdir()

    rock = base / "rock"
    rock.mkdir()
    (rock / "01.mp3").write_bytes(b"a" * 100)
    (rock / "02.MP3").write_bytes(b"a" * 200)
    (rock / "notes.txt").write_bytes(b"t" * 999)

    jazz = base / "jazz"
    jazz.mkdir()
    (jazz / "track.mp3").write_bytes(b"j" * 120)
    (jazz / "album.m3u").write_bytes(b"p" * 30)

    films = base / "films"
    films.mkdir()
    (films / "movie.mkv").write_bytes(b"v" * 500)

    empty = base / "empty"
    empty.mkdir()
    (empty / "cover.jpg").write_bytes(b"c" * 400)

    nested = base / "nested"
    (nested / "inner").mkdir(parents=True)
    (nested / "inner" / "deep.mp3").write_bytes(b"d" * 700)

    (base / "loose.mp3").write_bytes(b"l" * 50)
    return base


@pytest.fixture
def destination(tmp_path):
    dest = tmp_path / "device"
    dest.mkdir()
    return dest
