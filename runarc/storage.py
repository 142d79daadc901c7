from __future__ import annotations

import os
from typing import Dict

from .errors import NotFound, StorageError


class Storage:
    """Whole-file byte storage used by the archiver.

    ``read`` raises NotFound for a missing path; ``write`` raises
    StorageError when the bytes cannot be persisted. Both are
    all-or-nothing from the caller's point of view.
    """

    def exists(self, path: str) -> bool:
        raise NotImplementedError

    def is_dir(self, path: str) -> bool:
        raise NotImplementedError

    def read(self, path: str) -> bytes:
        raise NotImplementedError

    def write(self, path: str, data: bytes) -> None:
        raise NotImplementedError


class LocalStorage(Storage):
    def exists(self, path: str) -> bool:
        return os.path.exists(path) or os.path.islink(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def read(self, path: str) -> bytes:
        if not os.path.isfile(path):
            raise NotFound(f"File not found: {path}")
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError as exc:
            raise NotFound(f"File not found: {path}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def write(self, path: str, data: bytes) -> None:
        # Write to a sibling temp file and rename so readers never see a partial file
        tmp = f"{path}.tmp-{os.getpid()}"
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            with open(tmp, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as exc:
            try:
                os.remove(tmp)
            except OSError:
                pass
            raise StorageError(f"Failed to write {path}: {exc}") from exc


class MemoryStorage(Storage):
    """Dict-backed storage; paths are plain keys."""

    def __init__(self, files: Dict[str, bytes] | None = None):
        self.files: Dict[str, bytes] = dict(files or {})

    def exists(self, path: str) -> bool:
        return path in self.files

    def is_dir(self, path: str) -> bool:
        # A directory exists only as the parent of some stored key
        prefix = path.rstrip("/" + os.sep)
        return any(k.startswith(prefix + "/") or k.startswith(prefix + os.sep) for k in self.files)

    def read(self, path: str) -> bytes:
        try:
            return self.files[path]
        except KeyError:
            raise NotFound(f"File not found: {path}") from None

    def write(self, path: str, data: bytes) -> None:
        self.files[path] = bytes(data)
