"""Copying selected directories to a destination."""

from __future__ import annotations

import logging
import shutil
import threading
from pathlib import Path
from typing import Callable

from nowplay.core.media import MediaTypes, playable_files
from nowplay.models.copy_result import CopyPlan, CopyResult

log = logging.getLogger(__name__)

LogCallback = Callable[[str], None]
ProgressCallback = Callable[[int], None]  # percent, 0-100


def copy_directory(
    source: Path | str,
    destination: Path | str,
    media: MediaTypes | None = None,
) -> tuple[int, int]:
    """Copy the playable files of *source* into ``destination/<source name>``.

    Only files directly inside *source* are copied. Existing files in the
    target folder are never overwritten.

    Returns:
        (files_copied, bytes_copied) tuple.

    Raises:
        OSError: On the first file that cannot be copied.
    """
    source = Path(source)
    target_dir = Path(destination) / source.name
    target_dir.mkdir(exist_ok=True)

    copied = 0
    total = 0
    for media_file in playable_files(source, media):
        target = target_dir / media_file.path.name
        if target.exists():
            raise FileExistsError(f"{target} already exists")
        shutil.copyfile(media_file.path, target)
        copied += 1
        total += media_file.size
    return copied, total


class CopyJob:
    """Copies the directories of a plan, reporting log lines and progress.

    ``run()`` is blocking; ``stop()`` may be called from another thread
    and takes effect before the next directory starts.
    """

    def __init__(
        self,
        plan: CopyPlan,
        media: MediaTypes | None = None,
        on_log: LogCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.plan = plan
        self._media = media or MediaTypes()
        self._on_log = on_log
        self._on_progress = on_progress
        self._abort = threading.Event()

    def stop(self) -> None:
        """Ask the job to stop before the next directory."""
        self._abort.set()

    @property
    def is_aborted(self) -> bool:
        return self._abort.is_set()

    def run(self) -> CopyResult:
        result = CopyResult()
        selected = self.plan.selected

        for entry in selected:
            self._log(f"Selected: {entry.name} ({entry.size})")
        self._log(f"Total bytes {self.plan.total_bytes} in {len(selected)} directories.")
        self._log("Copying directories...")
        self._progress(0)

        for i, entry in enumerate(selected):
            if self.is_aborted:
                log.info("Copy job aborted after %d directories", i)
                result.aborted = True
                return result

            self._progress(100 * i // len(selected))
            self._log(f"Copying: {entry.path}")
            try:
                files, size = copy_directory(entry.path, self.plan.destination, self._media)
            except OSError as e:
                log.warning("Copy of %s failed: %s", entry.path, e)
                result.errors.append(f"Error while copying files of directory: {entry.path}: {e}")
                return result

            result.directories_copied += 1
            result.files_copied += files
            result.bytes_copied += size

        self._log("Copy finished!")
        self._progress(100)
        return result

    def _log(self, message: str) -> None:
        log.debug(message)
        if self._on_log:
            self._on_log(message)

    def _progress(self, percent: int) -> None:
        if self._on_progress:
            self._on_progress(percent)
