"""Random directory selection.

``select_for_budget`` picks a random set of directories whose combined
size fits a byte budget. It is a rejection-sampling approximation of a
knapsack pack, not an exact solve: repeated runs over the same catalog
are meant to give different selections, and the result can leave part
of the budget unused even when a better fitting combination exists.
"""

from __future__ import annotations

import logging
import random
import re
import time
from enum import IntEnum

from nowplay.core.errors import EmptyCatalogError, InvalidBudgetError
from nowplay.models.directory_entry import DirectoryEntry

log = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024

_INTEGER_RE = re.compile(r"\+?[0-9]+")


class SizeUnit(IntEnum):
    """Unit of the size field. Values match the stored unit index."""

    BYTES = 0
    MEGABYTES = 1
    GIGABYTES = 2

    @property
    def multiplier(self) -> int:
        match self:
            case SizeUnit.MEGABYTES:
                return MEGABYTE
            case SizeUnit.GIGABYTES:
                return MEGABYTE * 1024
            case _:
                return 1

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def coerce(cls, value: SizeUnit | int) -> SizeUnit:
        """Map a stored unit index to a unit; unknown indexes mean bytes."""
        try:
            return cls(value)
        except ValueError:
            return cls.BYTES

    @classmethod
    def from_label(cls, label: str) -> SizeUnit:
        """Look up a unit by its short label ('b', 'mb', 'gb')."""
        for unit, name in _LABELS.items():
            if name.lower() == label.strip().lower():
                return unit
        raise ValueError(f"Unknown size unit: {label!r}")


_LABELS = {
    SizeUnit.BYTES: "B",
    SizeUnit.MEGABYTES: "MB",
    SizeUnit.GIGABYTES: "GB",
}


def time_seeded_rng() -> random.Random:
    """Return a generator seeded from the wall clock."""
    return random.Random(time.time_ns())


def parse_budget(text: str, unit: SizeUnit | int = SizeUnit.BYTES) -> int:
    """Convert the size field and unit into a byte budget.

    Raises:
        InvalidBudgetError: If *text* is not a non-negative base-10 integer.
    """
    raw = str(text).strip()
    if not _INTEGER_RE.fullmatch(raw):
        raise InvalidBudgetError(str(text))
    return int(raw, 10) * SizeUnit.coerce(unit).multiplier


def select_for_budget(
    catalog: list[DirectoryEntry],
    target_bytes: int,
    rng: random.Random | None = None,
) -> list[DirectoryEntry]:
    """Randomly select directories whose total size fits *target_bytes*.

    *catalog* is the working set and is consumed: drawn entries are
    removed from it. Pass a copy if the catalog is needed afterwards.

    Entries are drawn uniformly at random and accepted while they fit.
    Zero-size entries are drained without being selected. When the drawn
    entry does not fit, or it is the last one left, a single fallback pass
    walks what remains of the working set in its current order and takes
    every entry strictly smaller than the remaining budget.

    Returns:
        The selected entries, sorted by path. Empty when nothing fits.
    """
    rng = rng or time_seeded_rng()
    selected: list[DirectoryEntry] = []
    remaining = target_bytes

    while catalog:
        roll = rng.randrange(len(catalog))
        candidate = catalog[roll]

        if candidate.size == 0:
            del catalog[roll]
            continue

        if len(catalog) == 1 or candidate.size > remaining:
            for entry in catalog:
                # Zero-size entries not yet drained must not slip in here.
                if 0 < entry.size < remaining:
                    selected.append(entry)
                    remaining -= entry.size
            break

        selected.append(candidate)
        remaining -= candidate.size
        del catalog[roll]

    selected.sort(key=lambda e: e.path)
    log.debug(
        "Selected %d directories, %d of %d bytes",
        len(selected),
        target_bytes - remaining,
        target_bytes,
    )
    return selected


def pick_random(catalog: list[DirectoryEntry], rng: random.Random | None = None) -> DirectoryEntry:
    """Pick one catalog entry uniformly at random.

    Raises:
        EmptyCatalogError: If *catalog* is empty.
    """
    if not catalog:
        raise EmptyCatalogError()
    rng = rng or time_seeded_rng()
    return catalog[rng.randrange(len(catalog))]
