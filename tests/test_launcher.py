"""Tests for external media launchers."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nowplay.core.errors import LauncherError, NoPlayableFilesError
from nowplay.core.launcher import (
    AudioPlayerLauncher,
    CastLauncher,
    VideoPlayerLauncher,
    create_launcher,
)
from nowplay.core.media import AUDIO, PLAYLIST, VIDEO
from nowplay.models.directory_entry import MediaFile

ALBUM = Path("/music/album")


def media(name: str, kind: str) -> MediaFile:
    return MediaFile(path=ALBUM / name, size=1, kind=kind)


@pytest.fixture
def player(tmp_path):
    """An executable file standing in for a player binary."""
    exe = tmp_path / "player"
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    return exe


class TestAvailability:
    def test_not_configured(self):
        launcher = AudioPlayerLauncher("")
        assert not launcher.is_available()
        assert launcher.unavailable_reason == "No audio player configured"

    def test_not_executable(self, tmp_path):
        exe = tmp_path / "player"
        exe.write_text("")
        exe.chmod(0o644)
        assert not VideoPlayerLauncher(exe).is_available()

    def test_executable_file(self, player):
        assert CastLauncher(player).is_available()

    def test_command_on_path(self, monkeypatch):
        monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}" if name == "smplayer" else None)
        assert VideoPlayerLauncher("smplayer").is_available()
        assert not VideoPlayerLauncher("mplayer-missing").is_available()

    def test_launch_unavailable_raises(self):
        with pytest.raises(LauncherError, match="configured"):
            AudioPlayerLauncher(None).launch([media("a.mp3", AUDIO)])


class TestAudioPlayerLauncher:
    def test_prefers_first_playlist(self, player):
        files = [media("a.m3u", PLAYLIST), media("b.m3u8", PLAYLIST), media("c.mp3", AUDIO)]
        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            AudioPlayerLauncher(player).launch(files)

        command = mock_popen.call_args[0][0]
        assert command == [str(player), str(ALBUM / "a.m3u")]
        assert mock_popen.call_args.kwargs["start_new_session"] is True

    def test_passes_audio_files(self, player):
        files = [media("a.mp3", AUDIO), media("b.mkv", VIDEO), media("c.mp3", AUDIO)]
        messages: list[str] = []
        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            AudioPlayerLauncher(player).launch(files, on_log=messages.append)

        assert mock_popen.call_args[0][0] == [str(player), str(ALBUM / "a.mp3"), str(ALBUM / "c.mp3")]
        assert messages == ["Sent 2 file(s) to player"]

    def test_no_audio(self, player):
        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            with pytest.raises(NoPlayableFilesError, match="/music/album"):
                AudioPlayerLauncher(player).launch([media("b.mkv", VIDEO)])
        mock_popen.assert_not_called()

    def test_spawn_failure(self, player):
        with patch("nowplay.core.launcher.subprocess.Popen", side_effect=OSError("exec format error")):
            with pytest.raises(LauncherError, match="exec format error"):
                AudioPlayerLauncher(player).launch([media("a.mp3", AUDIO)])


class TestVideoPlayerLauncher:
    def test_queues_videos(self, player):
        files = [media("a.mp3", AUDIO), media("b.mkv", VIDEO), media("c.mp4", VIDEO)]
        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            VideoPlayerLauncher(player).launch(files)

        assert mock_popen.call_args[0][0] == [
            str(player),
            "-no-close-at-end",
            "-add-to-playlist",
            str(ALBUM / "b.mkv"),
            str(ALBUM / "c.mp4"),
        ]

    def test_custom_args(self, player):
        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            VideoPlayerLauncher(player, extra_args=["--fs"]).launch([media("b.mkv", VIDEO)])
        assert mock_popen.call_args[0][0] == [str(player), "--fs", str(ALBUM / "b.mkv")]

    def test_no_videos(self, player):
        with pytest.raises(NoPlayableFilesError):
            VideoPlayerLauncher(player).launch([media("a.mp3", AUDIO)])


class TestCastLauncher:
    def test_plays_files_in_order(self, player):
        files = [media("a.mp3", AUDIO), media("list.m3u", PLAYLIST), media("b.mkv", VIDEO)]
        messages: list[str] = []
        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            mock_popen.return_value.wait.return_value = 0
            CastLauncher(player, subtitle_scale=1.5).launch(files, on_log=messages.append)

        commands = [c[0][0] for c in mock_popen.call_args_list]
        assert commands == [
            [str(player), str(ALBUM / "a.mp3")],
            [str(player), str(ALBUM / "b.mkv"), "--subtitle-scale", "1.5"],
        ]
        assert messages == ["Playing 1/2 - a.mp3", "Playing 2/2 - b.mkv"]

    def test_stop_skips_rest(self, player):
        launcher = CastLauncher(player)
        files = [media("a.mp3", AUDIO), media("b.mp3", AUDIO)]

        process = MagicMock()
        process.poll.return_value = None

        def wait():
            launcher.stop()
            return -15

        process.wait.side_effect = wait
        with patch("nowplay.core.launcher.subprocess.Popen", return_value=process) as mock_popen:
            launcher.launch(files)

        assert mock_popen.call_count == 1
        process.terminate.assert_called_once()

    def test_interrupt_terminates_current_process(self, player):
        process = MagicMock()
        process.poll.return_value = None
        process.wait.side_effect = KeyboardInterrupt

        launcher = CastLauncher(player)
        with patch("nowplay.core.launcher.subprocess.Popen", return_value=process):
            with pytest.raises(KeyboardInterrupt):
                launcher.launch([media("a.mp3", AUDIO), media("b.mp3", AUDIO)])

        process.terminate.assert_called_once()
        assert launcher._process is None

    def test_interrupt_after_exit_does_not_terminate(self, player):
        process = MagicMock()
        process.poll.return_value = 0
        process.wait.side_effect = KeyboardInterrupt

        with patch("nowplay.core.launcher.subprocess.Popen", return_value=process):
            with pytest.raises(KeyboardInterrupt):
                CastLauncher(player).launch([media("a.mp3", AUDIO)])

        process.terminate.assert_not_called()

    def test_stop_before_spawn_skips_file(self, player):
        launcher = CastLauncher(player)

        def on_log(message):
            launcher.stop()

        with patch("nowplay.core.launcher.subprocess.Popen") as mock_popen:
            launcher.launch([media("a.mp3", AUDIO), media("b.mp3", AUDIO)], on_log=on_log)

        mock_popen.assert_not_called()

    def test_nothing_castable(self, player):
        with pytest.raises(NoPlayableFilesError):
            CastLauncher(player).launch([media("list.m3u", PLAYLIST)])

    def test_spawn_failure(self, player):
        with patch("nowplay.core.launcher.subprocess.Popen", side_effect=FileNotFoundError("gone")):
            with pytest.raises(LauncherError):
                CastLauncher(player).launch([media("a.mp3", AUDIO)])


class TestCreateLauncher:
    def test_known_kinds(self):
        assert isinstance(create_launcher("audio", "x"), AudioPlayerLauncher)
        assert isinstance(create_launcher("video", "x"), VideoPlayerLauncher)
        cast = create_launcher("cast", "x", subtitle_scale=2.0)
        assert isinstance(cast, CastLauncher)
        assert cast.subtitle_scale == 2.0

    def test_unknown_kind(self):
        with pytest.raises(LauncherError, match="Unknown player"):
            create_launcher("winamp", "x")

    def test_ids(self):
        assert [create_launcher(k, "x").id for k in ("audio", "video", "cast")] == ["audio", "video", "cast"]
