"""Playable file classification."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from nowplay.models.directory_entry import MediaFile

log = logging.getLogger(__name__)

AUDIO = "audio"
VIDEO = "video"
PLAYLIST = "playlist"

DEFAULT_AUDIO_EXTENSIONS = frozenset({".mp3", ".flac", ".ogg", ".m4a", ".wav"})
DEFAULT_VIDEO_EXTENSIONS = frozenset({".mp4", ".mkv", ".avi", ".webm"})
DEFAULT_PLAYLIST_EXTENSIONS = frozenset({".m3u", ".m3u8"})


def _normalize(extensions: Iterable[str]) -> frozenset[str]:
    """Lower-case extensions and make sure each has a leading dot."""
    result = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        result.add(ext if ext.startswith(".") else f".{ext}")
    return frozenset(result)


@dataclass(frozen=True)
class MediaTypes:
    """Extension sets that decide what counts as a playable file."""

    audio: frozenset[str] = DEFAULT_AUDIO_EXTENSIONS
    video: frozenset[str] = DEFAULT_VIDEO_EXTENSIONS
    playlist: frozenset[str] = DEFAULT_PLAYLIST_EXTENSIONS

    @classmethod
    def from_lists(
        cls,
        audio: Iterable[str] | None = None,
        video: Iterable[str] | None = None,
        playlist: Iterable[str] | None = None,
    ) -> MediaTypes:
        """Build from user-supplied extension lists, keeping defaults for None."""
        return cls(
            audio=_normalize(audio) if audio is not None else DEFAULT_AUDIO_EXTENSIONS,
            video=_normalize(video) if video is not None else DEFAULT_VIDEO_EXTENSIONS,
            playlist=_normalize(playlist) if playlist is not None else DEFAULT_PLAYLIST_EXTENSIONS,
        )

    def kind_of(self, name: str | Path) -> str | None:
        """Return the media kind for a file name by extension, or None."""
        suffix = Path(name).suffix.lower()
        if suffix in self.audio:
            return AUDIO
        if suffix in self.video:
            return VIDEO
        if suffix in self.playlist:
            return PLAYLIST
        return None


def playable_files(directory: Path | str, media: MediaTypes | None = None) -> list[MediaFile]:
    """List the playable files directly inside *directory*, sorted by path.

    Subdirectories are not descended into. A missing or non-directory
    path yields an empty list.
    """
    media = media or MediaTypes()
    directory = Path(directory)
    if not directory.is_dir():
        return []

    files: list[MediaFile] = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                kind = media.kind_of(entry.name)
                if kind is None:
                    continue
                try:
                    if not entry.is_file():
                        continue
                    files.append(MediaFile(path=Path(entry.path), size=entry.stat().st_size, kind=kind))
                except OSError as e:
                    log.debug("Skipping %s: %s", entry.path, e)
    except OSError as e:
        log.warning("Could not read directory %s: %s", directory, e)
        return []

    files.sort(key=lambda f: f.path)
    return files


def files_of_kind(files: Iterable[MediaFile], *kinds: str) -> list[MediaFile]:
    """Filter media files by kind, preserving order."""
    return [f for f in files if f.kind in kinds]
