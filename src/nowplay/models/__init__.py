"""NowPlay data models."""

from nowplay.models.directory_entry import DirectoryEntry, MediaFile
from nowplay.models.copy_result import CopyPlan, CopyResult

__all__ = [
    "CopyPlan",
    "CopyResult",
    "DirectoryEntry",
    "MediaFile",
]
