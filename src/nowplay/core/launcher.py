"""External media players.

The core hands a list of playable files to a launcher and does not
otherwise talk to the player process.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Sequence

from nowplay.core.errors import LauncherError, NoPlayableFilesError
from nowplay.core.media import AUDIO, PLAYLIST, VIDEO, files_of_kind
from nowplay.models.directory_entry import MediaFile
from nowplay.utils import is_executable

log = logging.getLogger(__name__)

LogCallback = Callable[[str], None]

DEFAULT_VIDEO_ARGS = ("-no-close-at-end", "-add-to-playlist")
DEFAULT_SUBTITLE_SCALE = 1.3


def _directory_of(files: Sequence[MediaFile]) -> Path | str:
    return files[0].path.parent if files else ""


class MediaLauncher(ABC):
    """Base class for external players."""

    def __init__(self, executable: str | Path | None) -> None:
        self.executable = str(executable) if executable else ""

    @property
    @abstractmethod
    def id(self) -> str:
        """Short identifier, e.g. 'video'."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name."""

    @property
    def unavailable_reason(self) -> str | None:
        """Why the player cannot be started, or None if it can."""
        if not self.executable:
            return f"No {self.name.lower()} configured"
        if not is_executable(self.executable):
            return f"{self.executable} is not an executable"
        return None

    def is_available(self) -> bool:
        return self.unavailable_reason is None

    @abstractmethod
    def launch(self, files: Sequence[MediaFile], on_log: LogCallback | None = None) -> None:
        """Start playing *files*.

        Raises:
            NoPlayableFilesError: If none of the files suit this player.
            LauncherError: If the player cannot be started.
        """

    def _check_available(self) -> None:
        reason = self.unavailable_reason
        if reason:
            raise LauncherError(reason)

    def _spawn_detached(self, args: list[str]) -> subprocess.Popen:
        command = [self.executable, *args]
        log.debug("Starting %s", command)
        try:
            return subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise LauncherError(f"Unable to launch {self.name.lower()}: {e}") from e


class AudioPlayerLauncher(MediaLauncher):
    """Hands a playlist, or else every audio file, to an audio player."""

    @property
    def id(self) -> str:
        return "audio"

    @property
    def name(self) -> str:
        return "Audio player"

    def launch(self, files: Sequence[MediaFile], on_log: LogCallback | None = None) -> None:
        self._check_available()
        playlists = files_of_kind(files, PLAYLIST)
        if playlists:
            chosen = playlists[:1]
        else:
            chosen = files_of_kind(files, AUDIO)
        if not chosen:
            raise NoPlayableFilesError(_directory_of(files))

        self._spawn_detached([str(f.path) for f in chosen])
        if on_log:
            on_log(f"Sent {len(chosen)} file(s) to {Path(self.executable).name}")


class VideoPlayerLauncher(MediaLauncher):
    """Queues every video file in a video player."""

    def __init__(self, executable: str | Path | None, extra_args: Sequence[str] = DEFAULT_VIDEO_ARGS) -> None:
        super().__init__(executable)
        self.extra_args = list(extra_args)

    @property
    def id(self) -> str:
        return "video"

    @property
    def name(self) -> str:
        return "Video player"

    def launch(self, files: Sequence[MediaFile], on_log: LogCallback | None = None) -> None:
        self._check_available()
        videos = files_of_kind(files, VIDEO)
        if not videos:
            raise NoPlayableFilesError(_directory_of(files))

        self._spawn_detached([*self.extra_args, *(str(f.path) for f in videos)])
        if on_log:
            on_log(f"Sent {len(videos)} video(s) to {Path(self.executable).name}")


class CastLauncher(MediaLauncher):
    """Casts audio and video files one at a time, waiting for each.

    ``launch()`` blocks until the queue is done or ``stop()`` is called
    from another thread.
    """

    def __init__(self, executable: str | Path | None, subtitle_scale: float = DEFAULT_SUBTITLE_SCALE) -> None:
        super().__init__(executable)
        self.subtitle_scale = subtitle_scale
        self._process: subprocess.Popen | None = None
        self._stopped = threading.Event()
        self._lock = threading.Lock()

    @property
    def id(self) -> str:
        return "cast"

    @property
    def name(self) -> str:
        return "Casting tool"

    def arguments_for(self, media_file: MediaFile) -> list[str]:
        args = [str(media_file.path)]
        if media_file.kind == VIDEO:
            args += ["--subtitle-scale", f"{self.subtitle_scale:.1f}"]
        return args

    def launch(self, files: Sequence[MediaFile], on_log: LogCallback | None = None) -> None:
        self._check_available()
        queue = files_of_kind(files, AUDIO, VIDEO)
        if not queue:
            raise NoPlayableFilesError(_directory_of(files))

        self._stopped.clear()
        for i, media_file in enumerate(queue, 1):
            if self._stopped.is_set():
                break
            if on_log:
                on_log(f"Playing {i}/{len(queue)} - {media_file.path.name}")
            command = [self.executable, *self.arguments_for(media_file)]
            with self._lock:
                # stop() may have run since the check above
                if self._stopped.is_set():
                    break
                try:
                    self._process = subprocess.Popen(command)
                except OSError as e:
                    raise LauncherError(f"Unable to launch {self.name.lower()}: {e}") from e
                process = self._process
            try:
                process.wait()
            except BaseException:
                if process.poll() is None:
                    process.terminate()
                raise
            finally:
                with self._lock:
                    self._process = None

    def stop(self) -> None:
        """Stop the current file and skip the rest of the queue."""
        self._stopped.set()
        with self._lock:
            if self._process is not None and self._process.poll() is None:
                self._process.terminate()


_LAUNCHERS: dict[str, type[MediaLauncher]] = {
    "audio": AudioPlayerLauncher,
    "video": VideoPlayerLauncher,
    "cast": CastLauncher,
}

LAUNCHER_KINDS = tuple(_LAUNCHERS)


def create_launcher(kind: str, executable: str | Path | None, **options) -> MediaLauncher:
    """Instantiate the launcher registered under *kind*."""
    cls = _LAUNCHERS.get(kind)
    if cls is None:
        raise LauncherError(f"Unknown player '{kind}'")
    return cls(executable, **options)
