from __future__ import annotations

import logging

from persistence.filesystem import FileSystem

logger = logging.getLogger(__name__)


class FileService:
    def __init__(self, fs: FileSystem) -> None:
        self._fs = fs

    def create_file(self, path: str, recursive: bool = True) -> bool:
        """Create `path` (and, by default, its missing parents). Returns whether it now exists."""
        f = self._fs.file(path).create(recursive=recursive)
        logger.debug("Created file %s", f.path)
        return f.exists()

    def file_exists(self, path: str) -> bool:
        return self._fs.file(path).exists()

    def write_file(self, path: str, text: str) -> None:
        f = self._fs.file(path)
        if not f.exists():
            f.create(recursive=True)
        f.write_text(text)

    def read_file(self, path: str) -> str | None:
        f = self._fs.file(path)
        if not f.exists():
            return None
        return f.read_text()
