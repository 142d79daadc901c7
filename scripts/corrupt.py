from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

from runarc.archiver import Archiver
from runarc.errors import RunarcError
from runarc.storage import LocalStorage


def _flip_byte(path: str, offset: int, xor_val: int = 0xFF) -> None:
    if offset < 0:
        raise ValueError("Offset must be non-negative")
    with open(path, "r+b") as f:
        f.seek(offset)
        b = f.read(1)
        if not b:
            raise ValueError("Offset beyond end of file")
        f.seek(offset)
        f.write(bytes([b[0] ^ (xor_val & 0xFF)]))
        f.flush()
        os.fsync(f.fileno())


def cmd_entry(args: argparse.Namespace) -> None:
    info = Archiver(LocalStorage()).list(args.archive)
    idx = args.index
    if idx < 0 or idx >= info.entry_count:
        raise ValueError(f"Entry index out of range (0..{info.entry_count - 1})")
    e = info.entries[idx]
    if args.within < 0 or args.within >= e.compressed_length:
        raise ValueError(f"--within must be within payload length (0..{e.compressed_length - 1})")
    off = e.payload_offset + args.within
    _flip_byte(args.archive, off, xor_val=args.xor)
    print(f"Flipped 1 byte in entry {idx} ({e.name}) at archive offset {off}")


def cmd_truncate(args: argparse.Namespace) -> None:
    size = os.path.getsize(args.archive)
    if args.bytes <= 0 or args.bytes > size:
        raise ValueError(f"--bytes must be within 1..{size}")
    with open(args.archive, "r+b") as f:
        f.truncate(size - args.bytes)
    print(f"Truncated {args.bytes} byte(s); new size {size - args.bytes}")


def main(argv: Optional[list[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="runarc.corrupt", description="Corrupt runarc archives for testing")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_entry = sub.add_parser("entry", help="Flip a byte inside one entry's payload")
    p_entry.add_argument("archive", help="Path to archive")
    p_entry.add_argument("--index", type=int, required=True, help="Entry index (0-based)")
    p_entry.add_argument("--within", type=int, default=1, help="Byte offset within payload (default 1, a run length)")
    p_entry.add_argument("--xor", type=lambda x: int(x, 0), default=0xFF, help="XOR mask to apply (default 0xFF)")
    p_entry.set_defaults(func=cmd_entry)

    p_trunc = sub.add_parser("truncate", help="Drop trailing bytes from the archive")
    p_trunc.add_argument("archive", help="Path to archive")
    p_trunc.add_argument("--bytes", type=int, default=1, help="Number of trailing bytes to drop (default 1)")
    p_trunc.set_defaults(func=cmd_truncate)

    args = ap.parse_args(argv)
    try:
        args.func(args)
    except (RunarcError, OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
