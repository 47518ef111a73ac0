"""Play and copy orchestration engine."""

from __future__ import annotations

import logging
import random
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from nowplay.core.catalog import build_catalog
from nowplay.core.copier import CopyJob, LogCallback, ProgressCallback
from nowplay.core.errors import (
    CopyInProgressError,
    DestinationInvalidError,
    EmptyCatalogError,
    NoFeasibleSelectionError,
    NoPlayableFilesError,
)
from nowplay.core.launcher import MediaLauncher
from nowplay.core.media import MediaTypes, playable_files
from nowplay.core.selector import SizeUnit, parse_budget, pick_random, select_for_budget
from nowplay.models.copy_result import CopyPlan, CopyResult
from nowplay.models.directory_entry import DirectoryEntry, MediaFile

log = logging.getLogger(__name__)


class NowPlayEngine:
    """Selects directories to play or copy and runs the copy job.

    Only one copy job runs at a time; a second request while one is
    active raises ``CopyInProgressError``.
    """

    def __init__(self, media: MediaTypes | None = None, rng: random.Random | None = None) -> None:
        self.media = media or MediaTypes()
        self._rng = rng
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="nowplay-copy")
        self._lock = threading.Lock()
        self._active_job: CopyJob | None = None

    # ── catalog ──────────────────────────────────────────────────────────

    def catalog(self, base_dir: Path | str, compute_sizes: bool = False) -> list[DirectoryEntry]:
        """Scan *base_dir* for subdirectories."""
        return build_catalog(base_dir, compute_sizes=compute_sizes, media=self.media)

    # ── copy mode ────────────────────────────────────────────────────────

    def plan_copy(
        self,
        base_dir: Path | str,
        destination: Path | str | None,
        amount: str,
        unit: SizeUnit | int = SizeUnit.BYTES,
    ) -> CopyPlan:
        """Validate copy inputs and randomly select directories to copy.

        Raises:
            InvalidBudgetError: *amount* is not a valid integer.
            DestinationInvalidError: *destination* is missing or not a directory.
            EmptyCatalogError: *base_dir* has no subdirectories.
            NoFeasibleSelectionError: nothing fits the requested size.
        """
        target_bytes = parse_budget(amount, unit)

        if not destination or not Path(destination).is_dir():
            raise DestinationInvalidError(destination)

        catalog = self.catalog(base_dir, compute_sizes=True)
        if not catalog:
            raise EmptyCatalogError(base_dir)

        log.info("Selecting from %s for %d bytes...", base_dir, target_bytes)
        selected = select_for_budget(list(catalog), target_bytes, self._rng)
        if not selected:
            raise NoFeasibleSelectionError(str(amount).strip(), SizeUnit.coerce(unit).label)

        return CopyPlan(
            base_dir=Path(base_dir),
            destination=Path(destination),
            target_bytes=target_bytes,
            selected=selected,
        )

    @property
    def is_copying(self) -> bool:
        with self._lock:
            return self._active_job is not None

    def start_copy(
        self,
        plan: CopyPlan,
        on_log: LogCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> Future[CopyResult]:
        """Run the copy job for *plan* on the background worker.

        Raises:
            CopyInProgressError: If another copy job is still running.
        """
        job = CopyJob(plan, self.media, on_log=on_log, on_progress=on_progress)
        with self._lock:
            if self._active_job is not None:
                raise CopyInProgressError()
            self._active_job = job

        def _run() -> CopyResult:
            try:
                return job.run()
            finally:
                with self._lock:
                    self._active_job = None

        try:
            return self._executor.submit(_run)
        except RuntimeError:
            with self._lock:
                self._active_job = None
            raise

    def copy(
        self,
        plan: CopyPlan,
        on_log: LogCallback | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> CopyResult:
        """Run the copy job for *plan* and wait for it to finish."""
        return self.start_copy(plan, on_log=on_log, on_progress=on_progress).result()

    def stop_copy(self) -> bool:
        """Ask the running copy job to stop. Returns False if none is running."""
        with self._lock:
            if self._active_job is None:
                return False
            self._active_job.stop()
            return True

    def shutdown(self) -> None:
        """Stop any running job and release the worker thread."""
        self.stop_copy()
        self._executor.shutdown(wait=True)

    # ── play mode ────────────────────────────────────────────────────────

    def select_play_files(self, base_dir: Path | str) -> tuple[Path, list[MediaFile]]:
        """Pick a random subdirectory of *base_dir* and list its playable files.

        When *base_dir* has no subdirectories its own files are used.

        Raises:
            NoPlayableFilesError: If the chosen directory has nothing to play.
        """
        directory = Path(base_dir)
        catalog = self.catalog(directory)
        if catalog:
            log.info("%s has %d directories", directory, len(catalog))
            directory = pick_random(catalog, self._rng).path
        else:
            log.info("No subdirectories in %s, using it directly", directory)

        files = playable_files(directory, self.media)
        if not files:
            raise NoPlayableFilesError(directory)
        return directory, files

    def play(
        self,
        base_dir: Path | str,
        launcher: MediaLauncher,
        on_log: LogCallback | None = None,
    ) -> tuple[Path, list[MediaFile]]:
        """Pick a random directory and hand its files to *launcher*."""
        directory, files = self.select_play_files(base_dir)
        if on_log:
            on_log(f"Selected: {directory.name}")
        launcher.launch(files, on_log=on_log)
        return directory, files
