from __future__ import annotations

import os

from .errors import InvalidEntryName


def norm_path(p: str) -> str:
    """Normalize an archived entry name to a canonical forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments and names that normalize to nothing
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise InvalidEntryName(f"Entry name may not contain '..': {p!r}")
    if not parts:
        raise InvalidEntryName(f"Entry name is empty after normalization: {p!r}")
    return "/".join(parts)


def join_under(outdir: str, name: str) -> str:
    return os.path.join(outdir or ".", *norm_path(name).split("/"))


def next_nonconflicting_path(path: str, exists) -> str:
    """Return ``path`` or the first ``root (n)ext`` variant that ``exists`` rejects."""
    if not exists(path):
        return path
    base_dir = os.path.dirname(path)
    root, ext = os.path.splitext(os.path.basename(path))
    i = 1
    while True:
        candidate = os.path.join(base_dir, f"{root} ({i}){ext}")
        if not exists(candidate):
            return candidate
        i += 1
