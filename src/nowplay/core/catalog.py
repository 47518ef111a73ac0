"""Directory catalog building."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from nowplay.core.media import MediaTypes, playable_files
from nowplay.models.directory_entry import DirectoryEntry

log = logging.getLogger(__name__)


def build_catalog(
    base_dir: Path | str,
    compute_sizes: bool = False,
    media: MediaTypes | None = None,
) -> list[DirectoryEntry]:
    """List the immediate subdirectories of *base_dir*, sorted by path.

    With ``compute_sizes`` each entry carries the total size of the
    playable files directly inside it; otherwise every size is 0.

    A missing or non-directory base yields an empty list, which callers
    report as "no sub-directories to select from".
    """
    base = Path(base_dir)
    if not base.is_dir():
        log.info("Base directory %s does not exist or is not a directory", base)
        return []

    media = media or MediaTypes()
    entries: list[DirectoryEntry] = []
    try:
        with os.scandir(base) as it:
            children = [Path(e.path) for e in it if _is_dir(e)]
    except OSError as e:
        log.warning("Could not read base directory %s: %s", base, e)
        return []

    for child in children:
        size = 0
        if compute_sizes:
            size = sum(f.size for f in playable_files(child, media))
        entries.append(DirectoryEntry(path=child, size=size))

    entries.sort(key=lambda e: e.path)
    log.debug("Catalog of %s: %d directories", base, len(entries))
    return entries


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False
