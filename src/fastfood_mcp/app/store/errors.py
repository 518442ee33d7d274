from __future__ import annotations

from pathlib import Path

MISSING = "missing"
UNREADABLE = "unreadable"
MALFORMED = "malformed"
INVALID = "invalid"


class StoreError(Exception):
    """Base class for data store failures."""

    def __init__(self, path: Path, reason: str, detail: str = "") -> None:
        self.path = Path(path)
        self.reason = reason
        self.detail = detail
        message = f"{reason} data file {self.path}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class FatalLoadError(StoreError):
    """The initial load failed; the store cannot exist without valid data."""


class TransientReloadError(StoreError):
    """A watched reload failed; the previous snapshot stays published."""
