"""
runarc: a minimal run-length archiver.

Features:

- Run-length codec producing flat (value, length) byte pairs, runs capped at 255.
- Manifest-first container: entry count, then each entry's name and compressed
  length, then the concatenated payloads. Every packed file is recovered on
  extraction, names and order included.
- Structured errors for truncated archives, inconsistent manifests and malformed
  payloads; a boolean success/failure wrapper at the CLI boundary.
- Pluggable storage backend (filesystem or in-memory) behind the Archiver.

See runarc/container.py for the on-disk format.
"""

__version__ = "0.1"

__all__ = [
    "constants",
    "codec",
    "container",
    "storage",
    "archiver",
    "errors",
]

# Importable programmatic API is available via runarc.container (build/parse),
# runarc.archiver.Archiver and the CLI functions in runarc.cli (cmd_create/cmd_extract).
