"""File-based archive override storage adapter."""

import json
import logging
from pathlib import Path

from ewpm.core.archive import ArchiveOverrides

logger = logging.getLogger(__name__)


class FileArchiveStore:
    """
    JSON file archive storage.

    Implements ArchiveStore protocol. Overrides survive restarts on this host.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def load(self) -> ArchiveOverrides:
        if not self.path.exists():
            return ArchiveOverrides()
        try:
            return ArchiveOverrides.from_dict(json.loads(self.path.read_text()))
        except (json.JSONDecodeError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable archive file {self.path}: {e}")
            return ArchiveOverrides()

    def save(self, overrides: ArchiveOverrides) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(overrides.to_dict(), indent=2))
