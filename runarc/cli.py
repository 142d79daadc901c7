from __future__ import annotations

import sys
import time
import argparse

from typing import List, Optional

from runarc.archiver import Archiver, ExtractResult
from runarc.codec import codec_names
from runarc.container import unpack
from runarc.constants import DEFAULT_EXISTS_POLICY, EXISTS_POLICIES
from runarc.errors import (
    RunarcError,
    ArchiveFormatError,
    InvalidEntryName,
    MalformedPayload,
)
from runarc.storage import LocalStorage


_CORRUPTION_HINT = (
    "Archive appears truncated or corrupted. This command is read-only.\n"
    "Hint: re-create the archive from the original files."
)


def _mib(n: int) -> float:
    return n / (1024.0 * 1024.0)


def cmd_create(output: str, inputs: list[str], *, codec: str = "rle", quiet: bool = False) -> bool:
    """Create a new archive from a list of files.

    Args:
        output: Path of the archive to write.
        inputs: Files to store; each is stored under its base name.
        codec: Codec name or id.
        quiet: Suppress per-file lines.
    """
    archiver = Archiver(LocalStorage(), codec=codec)
    t0 = time.time()
    entries = archiver.create(output, inputs)
    raw_total = 0
    packed_total = 0
    for e in entries:
        raw_total += e.original_length
        packed_total += e.compressed_length
        if not quiet:
            print(f"  adding: {e.name} ({e.original_length} -> {e.compressed_length} bytes)")
    dt = max(0.000001, time.time() - t0)
    print(
        f"Done: {len(entries)} files; {_mib(raw_total):.2f} MiB -> {_mib(packed_total):.2f} MiB in {dt:.1f}s; "
        f"codec={archiver.codec.name}"
    )
    return True


def cmd_extract(
    archive: str,
    *,
    outdir: str = ".",
    names: Optional[list[str]] = None,
    exists: str = DEFAULT_EXISTS_POLICY,
    quiet: bool = False,
) -> bool:
    """Extract every file of an archive into a directory."""
    archiver = Archiver(LocalStorage())
    counts = {"written": 0, "overwritten": 0, "renamed": 0, "skipped": 0}
    written_bytes = 0

    def _report(res: ExtractResult) -> None:
        nonlocal written_bytes
        counts[res.status] += 1
        if res.status == "skipped":
            print(f"    skipping: {res.name} (exists)")
            return
        written_bytes += res.size
        if not quiet:
            print(f"  extracting: {res.name}")
        if res.status == "renamed":
            print(f"       note: renamed to {res.path}")

    t0 = time.time()
    try:
        results = archiver.extract(archive, outdir, exists=exists, names=names, on_entry=_report)
    except InvalidEntryName as exc:
        print(f"Error: unsafe entry name in archive: {exc}", file=sys.stderr)
        sys.exit(2)
    except (ArchiveFormatError, MalformedPayload) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(_CORRUPTION_HINT, file=sys.stderr)
        sys.exit(2)
    dt = max(0.000001, time.time() - t0)
    extracted = len(results) - counts["skipped"]
    print(
        f"Done: extracted {extracted}/{len(results)} files ({_mib(written_bytes):.2f} MiB) in {dt:.1f}s; "
        f"skipped={counts['skipped']} renamed={counts['renamed']} overwritten={counts['overwritten']}"
    )
    return True


def cmd_list(archive: str) -> bool:
    """List archive entries (index, compressed size, name)."""
    try:
        info = Archiver(LocalStorage()).list(archive)
    except (ArchiveFormatError, MalformedPayload) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        print(_CORRUPTION_HINT, file=sys.stderr)
        sys.exit(2)
    for e in info.entries:
        print(f"{e.index}\t{e.compressed_length}\t{e.name}")
    return True


def cmd_info(archive: str) -> bool:
    archiver = Archiver(LocalStorage())
    data = archiver.storage.read(archive)
    info, contents = unpack(data, archiver.codec)
    raw_total = sum(len(c) for c in contents)
    ratio = (raw_total / info.payload_size) if info.payload_size else 1.0
    print(f"Archive: {archive}")
    print(f"  Size: {len(data)}")
    print(f"  Codec: {archiver.codec.name}")
    print(f"  Entries: {info.entry_count}")
    print(f"  Manifest bytes: {info.manifest_size}")
    print(f"  Payload bytes: {info.payload_size}")
    print(f"  Original bytes: {raw_total}")
    print(f"  Ratio: {ratio:.3f}")
    return True


def cmd_verify(archive: str) -> bool:
    """Parse and decode every entry; print OK or FAIL."""
    archiver = Archiver(LocalStorage())
    try:
        archiver.read(archive)
    except (ArchiveFormatError, MalformedPayload) as exc:
        print(f"FAIL: {exc}")
        return False
    print("OK")
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="runarc",
        description="Run-length archive tool",
        epilog="Archives store a manifest (names and sizes) followed by run-length encoded payloads.",
    )
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_create = sub.add_parser("create", help="Create archive from files")
    ap_create.add_argument("output", help="Output archive path")
    ap_create.add_argument("inputs", nargs="+", help="Input files")
    ap_create.add_argument("--codec", default="rle", help=f"Codec name or id (available: {', '.join(codec_names())})")
    ap_create.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")

    ap_extract = sub.add_parser("extract", help="Extract archive to a directory")
    ap_extract.add_argument("archive", help="Archive path")
    ap_extract.add_argument("--outdir", default=".", help="Output directory")
    ap_extract.add_argument("names", nargs="*", help="Specific entry names to extract")
    ap_extract.add_argument("--quiet", help="limit outputs to summaries only", action="store_true")
    ap_extract.add_argument(
        "--exists",
        choices=list(EXISTS_POLICIES),
        default=DEFAULT_EXISTS_POLICY,
        help=(
            "What to do if a destination file exists: overwrite (replace), "
            "skip (do not extract that entry), rename (append ' (n)' before extension), or fail (abort). "
            f"Default: {DEFAULT_EXISTS_POLICY}"
        ),
    )

    ap_list = sub.add_parser("list", help="List archive contents")
    ap_list.add_argument("archive", help="Archive path")

    ap_info = sub.add_parser("info", help="Show archive information")
    ap_info.add_argument("archive", help="Archive path")

    ap_verify = sub.add_parser("verify", help="Verify archive integrity")
    ap_verify.add_argument("archive", help="Archive path")

    args = ap.parse_args(argv)
    try:
        if args.cmd == "create":
            cmd_create(args.output, args.inputs, codec=args.codec, quiet=args.quiet)
        elif args.cmd == "extract":
            cmd_extract(args.archive, outdir=args.outdir, names=args.names, exists=args.exists, quiet=args.quiet)
        elif args.cmd == "list":
            cmd_list(args.archive)
        elif args.cmd == "info":
            cmd_info(args.archive)
        elif args.cmd == "verify":
            ok = cmd_verify(args.archive)
            sys.exit(0 if ok else 1)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except RuntimeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (RunarcError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
