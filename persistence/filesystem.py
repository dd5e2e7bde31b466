from __future__ import annotations

import errno
import logging
import os
import posixpath
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class File(Protocol):
    @property
    def path(self) -> str:
        ...

    def create(self, recursive: bool = False) -> "File":
        """Create an empty file; a no-op if it already exists."""
        ...

    def exists(self) -> bool:
        """True only for an existing regular file."""
        ...

    def write_text(self, text: str) -> None:
        ...

    def read_text(self) -> str:
        ...

    def delete(self) -> None:
        ...


class Directory(Protocol):
    @property
    def path(self) -> str:
        ...

    def create(self, recursive: bool = False) -> "Directory":
        ...

    def exists(self) -> bool:
        ...

    def list(self) -> list[str]:
        """Sorted names of the direct children."""
        ...


class FileSystem(Protocol):
    def file(self, path: str) -> File:
        ...

    def directory(self, path: str) -> Directory:
        ...


def _os_error(cls: type[OSError], code: int, path: str) -> OSError:
    return cls(code, os.strerror(code), path)


# -------------------------------------------------------------------
# Local disk (pathlib)
# -------------------------------------------------------------------


class LocalFile(File):
    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> str:
        return str(self._path)

    def create(self, recursive: bool = False) -> "LocalFile":
        if self._path.is_dir():
            raise _os_error(IsADirectoryError, errno.EISDIR, self.path)
        if recursive:
            self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.touch(exist_ok=True)
        return self

    def exists(self) -> bool:
        return self._path.is_file()

    def write_text(self, text: str) -> None:
        self._path.write_text(text, encoding="utf-8")

    def read_text(self) -> str:
        return self._path.read_text(encoding="utf-8")

    def delete(self) -> None:
        self._path.unlink()


class LocalDirectory(Directory):
    def __init__(self, path: Path):
        self._path = path

    @property
    def path(self) -> str:
        return str(self._path)

    def create(self, recursive: bool = False) -> "LocalDirectory":
        self._path.mkdir(parents=recursive, exist_ok=True)
        return self

    def exists(self) -> bool:
        return self._path.is_dir()

    def list(self) -> list[str]:
        return sorted(p.name for p in self._path.iterdir())


class LocalFileSystem(FileSystem):
    """
    The real filesystem. With a `root`, every path (absolute or not) is taken
    relative to it.
    """

    def __init__(self, root: Path | None = None):
        self._root = root

    def _resolve(self, path: str) -> Path:
        if self._root is None:
            return Path(path)
        return self._root / path.lstrip("/")

    def file(self, path: str) -> LocalFile:
        return LocalFile(self._resolve(path))

    def directory(self, path: str) -> LocalDirectory:
        return LocalDirectory(self._resolve(path))


# -------------------------------------------------------------------
# In-memory
# -------------------------------------------------------------------


class MemoryFileSystem(FileSystem):
    """
    In-memory POSIX-style filesystem with the same observable behaviour as
    LocalFileSystem: missing parents, files-vs-directories and missing files
    raise the same built-in OSError subclasses pathlib raises.

    Relative paths are taken from "/", which always exists.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._dirs: set[str] = {"/"}
        self._files: dict[str, str] = {}

    @staticmethod
    def normalize(path: str) -> str:
        if not path:
            raise ValueError("Empty path")
        # normpath keeps a leading "//"; the local filesystem treats it as "/"
        return "/" + posixpath.normpath(posixpath.join("/", path)).lstrip("/")

    def file(self, path: str) -> "MemoryFile":
        return MemoryFile(self, self.normalize(path))

    def directory(self, path: str) -> "MemoryDirectory":
        return MemoryDirectory(self, self.normalize(path))

    @property
    def files(self) -> dict[str, str]:
        with self._lock:
            return dict(self._files)

    @property
    def directories(self) -> set[str]:
        with self._lock:
            return set(self._dirs)

    def _is_dir(self, path: str) -> bool:
        return path in self._dirs

    def _is_file(self, path: str) -> bool:
        return path in self._files

    def _require_parent(self, path: str) -> None:
        parent = posixpath.dirname(path)
        if self._is_file(parent):
            raise _os_error(NotADirectoryError, errno.ENOTDIR, path)
        if not self._is_dir(parent):
            raise _os_error(FileNotFoundError, errno.ENOENT, path)

    def _make_dirs(self, path: str) -> None:
        missing: list[str] = []
        current = path
        while not self._is_dir(current):
            if self._is_file(current):
                if current == path:
                    raise _os_error(FileExistsError, errno.EEXIST, current)
                raise _os_error(NotADirectoryError, errno.ENOTDIR, current)
            missing.append(current)
            current = posixpath.dirname(current)
        self._dirs.update(missing)

    def _children(self, path: str) -> list[str]:
        names = [p for p in (*self._dirs, *self._files) if p != "/" and posixpath.dirname(p) == path]
        return sorted(posixpath.basename(p) for p in names)


class MemoryFile(File):
    def __init__(self, fs: MemoryFileSystem, path: str):
        self._fs = fs
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def create(self, recursive: bool = False) -> "MemoryFile":
        with self._fs._lock:
            if self._fs._is_dir(self._path):
                raise _os_error(IsADirectoryError, errno.EISDIR, self._path)
            if recursive:
                self._fs._make_dirs(posixpath.dirname(self._path))
            else:
                self._fs._require_parent(self._path)
            self._fs._files.setdefault(self._path, "")
        logger.debug("Created %s", self._path)
        return self

    def exists(self) -> bool:
        with self._fs._lock:
            return self._fs._is_file(self._path)

    def write_text(self, text: str) -> None:
        with self._fs._lock:
            if self._fs._is_dir(self._path):
                raise _os_error(IsADirectoryError, errno.EISDIR, self._path)
            self._fs._require_parent(self._path)
            self._fs._files[self._path] = text

    def read_text(self) -> str:
        with self._fs._lock:
            if self._fs._is_dir(self._path):
                raise _os_error(IsADirectoryError, errno.EISDIR, self._path)
            if not self._fs._is_file(self._path):
                raise _os_error(FileNotFoundError, errno.ENOENT, self._path)
            return self._fs._files[self._path]

    def delete(self) -> None:
        with self._fs._lock:
            if self._fs._is_dir(self._path):
                raise _os_error(IsADirectoryError, errno.EISDIR, self._path)
            if self._fs._files.pop(self._path, None) is None:
                raise _os_error(FileNotFoundError, errno.ENOENT, self._path)

    def __repr__(self) -> str:
        return f"MemoryFile({self._path!r})"


class MemoryDirectory(Directory):
    def __init__(self, fs: MemoryFileSystem, path: str):
        self._fs = fs
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    def create(self, recursive: bool = False) -> "MemoryDirectory":
        with self._fs._lock:
            if self._fs._is_file(self._path):
                raise _os_error(FileExistsError, errno.EEXIST, self._path)
            if self._fs._is_dir(self._path):
                return self
            if recursive:
                self._fs._make_dirs(self._path)
            else:
                self._fs._require_parent(self._path)
                self._fs._dirs.add(self._path)
        return self

    def exists(self) -> bool:
        with self._fs._lock:
            return self._fs._is_dir(self._path)

    def list(self) -> list[str]:
        with self._fs._lock:
            if self._fs._is_file(self._path):
                raise _os_error(NotADirectoryError, errno.ENOTDIR, self._path)
            if not self._fs._is_dir(self._path):
                raise _os_error(FileNotFoundError, errno.ENOENT, self._path)
            return self._fs._children(self._path)

    def __repr__(self) -> str:
        return f"MemoryDirectory({self._path!r})"
