"""Catalog entry dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class DirectoryEntry:
    """Immediate subdirectory of a base directory.

    ``size`` is the byte count of the playable files directly inside
    the directory. Zero means there is nothing to play or copy.
    """

    path: Path
    size: int = 0

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class MediaFile:
    """Single playable file."""

    path: Path
    size: int
    kind: str
