from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .codec import Codec, get_codec
from .constants import DEFAULT_EXISTS_POLICY, EXISTS_POLICIES
from .container import ArchiveEntry, ManifestInfo, assemble, pack_entries, read_manifest, unpack
from .errors import (
    ArchiveFormatError,
    DestinationExists,
    InvalidConfiguration,
    InvalidEntryName,
    MalformedPayload,
    RunarcError,
)
from .pathutil import join_under, next_nonconflicting_path, norm_path
from .storage import LocalStorage, Storage


@dataclass
class ExtractResult:
    name: str
    path: Optional[str]
    size: int
    status: str  # written, overwritten, renamed, skipped


class Archiver:
    """Create and extract archives through an injected storage backend.

    ``create``/``extract``/``list``/``verify`` raise structured errors from
    runarc.errors. ``create_archive``/``extract_archive`` collapse them to a
    boolean for callers that only need success or failure.
    """

    def __init__(self, storage: Optional[Storage] = None, codec: int | str | Codec | None = None):
        self.storage = storage if storage is not None else LocalStorage()
        self.codec = get_codec(codec)

    # structured API
    def create(self, output: str, inputs: Sequence[str], *, names: Optional[Sequence[str]] = None) -> List[ArchiveEntry]:
        """Read ``inputs`` and write them to ``output`` as one archive.

        Each file is stored under its base name unless ``names`` supplies
        the entry names (same length as ``inputs``).
        """
        if names is not None and len(names) != len(inputs):
            raise ValueError(f"got {len(names)} name(s) for {len(inputs)} input(s)")
        files: List[Tuple[str, bytes]] = []
        for i, path in enumerate(inputs):
            data = self.storage.read(path)
            name = names[i] if names is not None else os.path.basename(os.path.normpath(path))
            files.append((name, data))
        self._check_targets([norm_path(name) for name, _ in files])
        entries = pack_entries(files, self.codec)
        self.storage.write(output, assemble(entries))
        return entries

    def read(self, archive: str) -> List[Tuple[str, bytes]]:
        info, contents = unpack(self.storage.read(archive), self.codec)
        return [(e.name, c) for e, c in zip(info.entries, contents)]

    def list(self, archive: str) -> ManifestInfo:
        return read_manifest(self.storage.read(archive))

    def verify(self, archive: str) -> bool:
        try:
            self.read(archive)
        except (ArchiveFormatError, MalformedPayload):
            return False
        return True

    def extract(
        self,
        archive: str,
        outdir: str = ".",
        *,
        exists: str = DEFAULT_EXISTS_POLICY,
        names: Optional[Sequence[str]] = None,
        on_entry: Optional[Callable[[ExtractResult], None]] = None,
    ) -> List[ExtractResult]:
        """Write every archived entry (or only ``names``) under ``outdir``.

        ``exists`` decides what happens when a destination is already
        present, including a later entry with the same name as an earlier
        one: overwrite, skip, rename (``name (n).ext``) or fail.
        """
        if exists not in EXISTS_POLICIES:
            raise InvalidConfiguration(f"unknown exists policy: {exists!r}")
        pairs = self.read(archive)
        # Every name is checked before anything is written
        targets = [(name, norm_path(name), content) for name, content in pairs]
        if names:
            wanted = [norm_path(n) for n in names]
            targets = [t for t in targets if any(t[1] == w or t[1].startswith(w + "/") for w in wanted)]
        self._check_targets([key for _, key, _ in targets])
        targets = [(name, join_under(outdir, key), content) for name, key, content in targets]
        if exists == "fail":
            keys = [dst for _, dst, _ in targets]
            if len(set(keys)) != len(keys):
                raise DestinationExists("Archive holds duplicate entry names; refusing to extract with exists=fail")
            for _, dst, _ in targets:
                if self.storage.exists(dst):
                    raise DestinationExists(f"Destination exists: {dst}")

        results: List[ExtractResult] = []
        for name, dst, content in targets:
            status = "written"
            if self.storage.exists(dst):
                if exists == "overwrite":
                    if self.storage.is_dir(dst):
                        raise DestinationExists(f"Cannot overwrite directory with file: {dst}")
                    status = "overwritten"
                elif exists == "skip":
                    res = ExtractResult(name=name, path=None, size=len(content), status="skipped")
                    results.append(res)
                    if on_entry is not None:
                        on_entry(res)
                    continue
                elif exists == "rename":
                    dst = next_nonconflicting_path(dst, self.storage.exists)
                    status = "renamed"
                else:
                    raise DestinationExists(f"Destination exists: {dst}")
            self.storage.write(dst, content)
            res = ExtractResult(name=name, path=dst, size=len(content), status=status)
            results.append(res)
            if on_entry is not None:
                on_entry(res)
        return results

    def _check_targets(self, keys: Sequence[str]) -> None:
        """Reject entry sets that cannot all be written under one directory.

        A name that is also a parent directory of another name, such as
        ``a`` and ``a/b``, would need ``a`` to be both a file and a directory.
        """
        seen = set(keys)
        for key in seen:
            parts = key.split("/")
            for i in range(1, len(parts)):
                parent = "/".join(parts[:i])
                if parent in seen:
                    raise InvalidEntryName(f"Entry {parent!r} is both a file and the parent directory of {key!r}")

    # boolean boundary
    def create_archive(self, output: str, inputs: Sequence[str]) -> bool:
        try:
            self.create(output, inputs)
        except (RunarcError, OSError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return False
        return True

    def extract_archive(self, archive: str, outdir: str = ".", *, exists: str = DEFAULT_EXISTS_POLICY) -> bool:
        try:
            self.extract(archive, outdir, exists=exists)
        except (RunarcError, OSError, ValueError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return False
        return True
