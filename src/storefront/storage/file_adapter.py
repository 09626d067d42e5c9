"""File-backed storage adapter: one ``<key>.json`` document per key.

Writes land in a temporary file in the same directory and are moved into
place with ``os.replace``, so a reader never observes a half-written
snapshot.
"""

import os
import tempfile
from pathlib import Path

import structlog

from storefront.storage.port import LocalStorage

logger = structlog.get_logger(__name__)


class JsonFileStorage(LocalStorage):
    """Directory of JSON documents keyed by file name."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, key: str, document: str) -> None:
        path = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(document)
            os.replace(tmp_name, path)
        except OSError:
            logger.error("Failed to write storage document", key=key, path=str(path))
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)
