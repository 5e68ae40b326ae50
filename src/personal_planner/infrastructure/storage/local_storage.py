"""
Key/value blob storage for the planner document.

Mirrors browser local storage: one text blob per key. The file backend
keeps each key in ``<dir>/<key>.json`` and replaces it atomically.
"""

import logging
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Protocol

from personal_planner.utils.exceptions import StorageError
from personal_planner.utils.parameters import StorageConfig

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Minimal key/value text storage."""

    def get_item(self, key: str) -> str | None:
        """Return the stored text for key, or None if absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""
        ...


class LocalFileStorage:
    """
    File-backed storage, one JSON file per key.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash never leaves a half-written document behind.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize file storage.

        Args:
            config: Storage configuration.
        """
        self.config = config
        self.base_dir = Path(config.dir)

    def path_for(self, key: str) -> Path:
        """Get the file path holding a key."""
        return self.base_dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """
        Read the text stored under key.

        Args:
            key: Storage key.

        Returns:
            Stored text, or None if nothing is stored.

        Raises:
            StorageError: If the file exists but cannot be read.
        """
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        """
        Atomically store text under key.

        Args:
            key: Storage key.
            value: Text to store.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.path_for(key)
        temp_path: Path | None = None

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                "w", dir=path.parent, delete=False, encoding="utf-8", suffix=".tmp"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(value)
            temp_path.replace(path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.debug(f"Wrote {len(value)} characters to {path}")


class MemoryStorage:
    """In-memory storage, used for tests and ephemeral sessions."""

    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
