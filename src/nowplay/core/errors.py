"""User-visible error conditions.

None of these are fatal: the caller reports the message and the user
changes inputs and tries again.
"""

from __future__ import annotations

from pathlib import Path


class NowPlayError(Exception):
    """Base class for recoverable, user-visible errors."""


class EmptyCatalogError(NowPlayError):
    """Raised when the base directory has no subdirectories to select from."""

    def __init__(self, base_dir: Path | str | None = None) -> None:
        self.base_dir = base_dir
        super().__init__("No sub-directories to select from.")


class NoFeasibleSelectionError(NowPlayError):
    """Raised when no combination of directories fits the requested size."""

    def __init__(self, amount: str, unit_label: str) -> None:
        self.amount = amount
        self.unit_label = unit_label
        super().__init__(f"Unable to select directories for the given size: {amount} {unit_label}.")


class InvalidBudgetError(NowPlayError):
    """Raised when the size field is not a non-negative base-10 integer."""

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"Invalid size option value: {text!r}.")


class DestinationInvalidError(NowPlayError):
    """Raised when the copy destination is missing or not a directory."""

    def __init__(self, destination: Path | str | None = None) -> None:
        self.destination = destination
        super().__init__("No destination directory to copy to.")


class CopyInProgressError(NowPlayError):
    """Raised when a copy job is requested while another one is running."""

    def __init__(self) -> None:
        super().__init__("Already copying files!")


class NoPlayableFilesError(NowPlayError):
    """Raised when a directory holds nothing the chosen player can use."""

    def __init__(self, directory: Path | str) -> None:
        self.directory = directory
        super().__init__(f"No playable files found in directory: {directory}")


class LauncherError(NowPlayError):
    """Raised when an external player cannot be started."""
