"""
Archive container: a manifest followed by the payload region.

Layout (all integers u32 little endian)
- entry_count
- manifest: entry_count x (name_length || name (utf-8) || compressed_length)
- payload region: payloads concatenated in manifest order

The manifest precedes every payload so that any entry can be located from
the manifest alone. The sum of compressed_length values must equal the size
of the payload region exactly; short streams are reported as truncation and
surplus bytes as trailing data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple, Union

from .codec import Codec, get_codec
from .constants import MIN_ENTRY_HEADER_SIZE, NAME_ENCODING, U32_MAX, U32_STRUCT
from .errors import (
    InvalidEntryName,
    InvalidManifest,
    MalformedPayload,
    TruncatedArchive,
    UnexpectedTrailingData,
)


CodecSelector = Union[int, str, Codec, None]


@dataclass
class ArchiveEntry:
    name: str
    compressed_length: int
    payload: bytes = b""
    original_length: int = 0


@dataclass
class ManifestEntry:
    index: int
    name: str
    compressed_length: int
    payload_offset: int


@dataclass
class ManifestInfo:
    entries: List[ManifestEntry] = field(default_factory=list)
    manifest_size: int = 0
    payload_size: int = 0

    @property
    def entry_count(self) -> int:
        return len(self.entries)

    @property
    def total_size(self) -> int:
        return self.manifest_size + self.payload_size


def _u32(value: int, what: str) -> bytes:
    if value < 0 or value > U32_MAX:
        raise ValueError(f"{what} out of range for u32: {value}")
    return U32_STRUCT.pack(value)


def _read_u32(data: bytes, pos: int, what: str) -> Tuple[int, int]:
    end = pos + U32_STRUCT.size
    if end > len(data):
        raise TruncatedArchive(
            f"archive ends inside {what} at offset {pos}",
            offset=pos,
            expected=U32_STRUCT.size,
            actual=max(0, len(data) - pos),
        )
    (value,) = U32_STRUCT.unpack_from(data, pos)
    return value, end


def pack_entries(files: Iterable[Tuple[str, bytes]], codec: CodecSelector = None) -> List[ArchiveEntry]:
    c = get_codec(codec)
    entries: List[ArchiveEntry] = []
    for name, content in files:
        payload = c.encode(content)
        entries.append(
            ArchiveEntry(name=name, compressed_length=len(payload), payload=payload, original_length=len(content))
        )
    return entries


def assemble(entries: Sequence[ArchiveEntry]) -> bytes:
    """Serialize already-encoded entries: header, manifest, payload region."""
    out = bytearray(_u32(len(entries), "entry count"))
    for e in entries:
        if e.compressed_length != len(e.payload):
            raise ValueError(
                f"entry {e.name!r}: declared compressed length {e.compressed_length} != payload size {len(e.payload)}"
            )
        raw_name = e.name.encode(NAME_ENCODING)
        out += _u32(len(raw_name), f"name length of {e.name!r}")
        out += raw_name
        out += _u32(e.compressed_length, f"compressed length of {e.name!r}")
    for e in entries:
        out += e.payload
    return bytes(out)


def build(files: Iterable[Tuple[str, bytes]], codec: CodecSelector = None) -> bytes:
    """Encode each (name, content) pair and serialize them as one archive.

    Input order is preserved; duplicate names are kept as separate entries.
    An empty input yields a four byte archive holding entry_count = 0.
    """
    return assemble(pack_entries(files, codec))


def read_manifest(data: bytes) -> ManifestInfo:
    """Parse and validate the manifest without decoding any payload.

    Raises:
        TruncatedArchive: the stream ends before a header field, a name, or
            the declared payload region is complete.
        InvalidManifest: entry_count cannot fit in the bytes that follow it.
        InvalidEntryName: a name is not valid UTF-8.
        UnexpectedTrailingData: bytes remain after the payload region.
    """
    data = bytes(data)
    n = len(data)
    count, pos = _read_u32(data, 0, "entry count")

    remaining = n - pos
    needed = count * MIN_ENTRY_HEADER_SIZE
    if needed > remaining:
        raise InvalidManifest(
            f"manifest declares {count} entries, needing at least {needed} header bytes, "
            f"but only {remaining} bytes follow the entry count",
            offset=pos,
            expected=needed,
            actual=remaining,
        )

    headers: List[Tuple[str, int]] = []
    for i in range(count):
        name_len, pos = _read_u32(data, pos, f"name length of entry {i}")
        if pos + name_len > n:
            raise TruncatedArchive(
                f"archive ends inside name of entry {i} at offset {pos}",
                offset=pos,
                expected=name_len,
                actual=n - pos,
            )
        raw_name = data[pos : pos + name_len]
        try:
            name = raw_name.decode(NAME_ENCODING)
        except UnicodeDecodeError as exc:
            raise InvalidEntryName(f"name of entry {i} at offset {pos} is not valid UTF-8: {exc}", offset=pos) from exc
        pos += name_len
        compressed_length, pos = _read_u32(data, pos, f"compressed length of entry {i}")
        headers.append((name, compressed_length))

    manifest_size = pos
    payload_size = sum(ln for _, ln in headers)
    available = n - manifest_size
    if payload_size > available:
        raise TruncatedArchive(
            f"manifest declares {payload_size} payload bytes but only {available} are present",
            offset=n,
            expected=payload_size,
            actual=available,
        )
    if payload_size < available:
        raise UnexpectedTrailingData(
            f"{available - payload_size} byte(s) follow the payload region",
            offset=manifest_size + payload_size,
            expected=payload_size,
            actual=available,
        )

    entries: List[ManifestEntry] = []
    off = manifest_size
    for i, (name, compressed_length) in enumerate(headers):
        entries.append(ManifestEntry(index=i, name=name, compressed_length=compressed_length, payload_offset=off))
        off += compressed_length
    return ManifestInfo(entries=entries, manifest_size=manifest_size, payload_size=payload_size)


def decode_entry(data: bytes, entry: ManifestEntry, codec: CodecSelector = None) -> bytes:
    c = get_codec(codec)
    chunk = data[entry.payload_offset : entry.payload_offset + entry.compressed_length]
    try:
        return c.decode(chunk)
    except MalformedPayload as exc:
        inner = exc.offset if exc.offset is not None else 0
        raise MalformedPayload(
            f"entry {entry.index} ({entry.name!r}): {exc}",
            offset=entry.payload_offset + inner,
        ) from exc


def parse(data: bytes, codec: CodecSelector = None) -> List[Tuple[str, bytes]]:
    """Return every (name, content) pair stored in ``data``, in manifest order."""
    data = bytes(data)
    c = get_codec(codec)
    info = read_manifest(data)
    return [(e.name, decode_entry(data, e, c)) for e in info.entries]


def unpack(data: bytes, codec: CodecSelector = None) -> Tuple[ManifestInfo, List[bytes]]:
    data = bytes(data)
    c = get_codec(codec)
    info = read_manifest(data)
    return info, [decode_entry(data, e, c) for e in info.entries]
