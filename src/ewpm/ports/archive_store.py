"""Archive override storage interface."""

from typing import Protocol

from ewpm.core.archive import ArchiveOverrides


class ArchiveStore(Protocol):
    """Interface for persisting manual archive/unarchive decisions."""

    def load(self) -> ArchiveOverrides:
        """Load overrides. Returns empty overrides if none were saved."""
        ...

    def save(self, overrides: ArchiveOverrides) -> None:
        """Persist overrides, replacing what was stored."""
        ...
