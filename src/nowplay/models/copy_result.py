"""Copy plan and result dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from nowplay.models.directory_entry import DirectoryEntry


@dataclass(slots=True)
class CopyPlan:
    """Directories selected for a copy job and where they go."""

    base_dir: Path
    destination: Path
    target_bytes: int
    selected: list[DirectoryEntry] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(entry.size for entry in self.selected)


@dataclass(slots=True)
class CopyResult:
    """Result of a copy job."""

    directories_copied: int = 0
    files_copied: int = 0
    bytes_copied: int = 0
    errors: list[str] = field(default_factory=list)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors and not self.aborted
