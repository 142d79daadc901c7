from __future__ import annotations

import os
import struct
import unittest

from runarc import container
from runarc.container import ArchiveEntry, assemble, build, parse, read_manifest, unpack
from runarc.errors import (
    ArchiveFormatError,
    InvalidConfiguration,
    InvalidEntryName,
    InvalidManifest,
    MalformedPayload,
    TruncatedArchive,
    UnexpectedTrailingData,
)


def _sample_files():
    return [
        ("docs/a.txt", b"hello world\n" * 50),
        ("b.bin", os.urandom(1024)),
        ("empty.txt", b""),
        ("runs.bin", b"\x00" * 700 + b"\xff" * 3),
    ]


class ContainerLayoutTests(unittest.TestCase):
    def test_module_docstring(self):
        self.assertIsNotNone(container.__doc__)
        self.assertIn("manifest", container.__doc__.lower())

    def test_empty_archive(self):
        data = build([])
        self.assertEqual(data, b"\x00\x00\x00\x00")
        self.assertEqual(parse(data), [])
        info = read_manifest(data)
        self.assertEqual(info.entry_count, 0)
        self.assertEqual(info.payload_size, 0)

    def test_known_single_file_layout(self):
        data = build([("test.txt", b"AAAAABBBCC")])
        expected = (
            struct.pack("<I", 1)
            + struct.pack("<I", 8)
            + b"test.txt"
            + struct.pack("<I", 6)
            + bytes([0x41, 0x05, 0x42, 0x03, 0x43, 0x02])
        )
        self.assertEqual(data, expected)
        self.assertEqual(parse(data), [("test.txt", b"AAAAABBBCC")])

    def test_manifest_precedes_payloads(self):
        files = [("a", b"xx"), ("b", b"yyy")]
        data = build(files)
        info = read_manifest(data)
        self.assertEqual(info.manifest_size, 4 + (4 + 1 + 4) * 2)
        self.assertEqual([e.payload_offset for e in info.entries], [info.manifest_size, info.manifest_size + 2])
        self.assertEqual(data[info.entries[1].payload_offset :], b"y\x03")
        self.assertEqual(info.total_size, len(data))

    def test_utf8_names(self):
        files = [("résumé.txt", b"abc"), ("日本.bin", b"\x01\x01")]
        self.assertEqual(parse(build(files)), files)


class ContainerRoundtripTests(unittest.TestCase):
    def test_roundtrip_several_files(self):
        files = _sample_files()
        self.assertEqual(parse(build(files)), files)

    def test_roundtrip_duplicate_names_keep_order(self):
        files = [("same", b"first"), ("other", b"x"), ("same", b"second")]
        self.assertEqual(parse(build(files)), files)

    def test_unpack_returns_manifest_and_contents(self):
        files = _sample_files()
        info, contents = unpack(build(files))
        self.assertEqual([e.name for e in info.entries], [n for n, _ in files])
        self.assertEqual(contents, [c for _, c in files])

    def test_pack_entries_records_lengths(self):
        entries = container.pack_entries([("a", b"AAAB")])
        self.assertEqual(entries[0].compressed_length, 4)
        self.assertEqual(entries[0].original_length, 4)
        self.assertEqual(entries[0].payload, b"A\x03B\x01")

    def test_assemble_rejects_inconsistent_entry(self):
        with self.assertRaises(ValueError):
            assemble([ArchiveEntry(name="a", compressed_length=3, payload=b"A\x01")])

    def test_unknown_codec(self):
        with self.assertRaises(InvalidConfiguration):
            build([("a", b"a")], codec="nope")


class ContainerCorruptionTests(unittest.TestCase):
    def test_every_truncation_is_detected(self):
        data = build(_sample_files())
        for cut in range(1, len(data) + 1):
            with self.assertRaises(TruncatedArchive, msg=f"cut={cut}"):
                parse(data[:-cut])

    def test_every_truncation_of_empty_archive(self):
        data = build([])
        for cut in range(1, len(data) + 1):
            with self.assertRaises(TruncatedArchive):
                parse(data[:-cut])

    def test_entry_count_beyond_stream(self):
        data = struct.pack("<I", 1000) + b"\x00" * 16
        with self.assertRaises(InvalidManifest) as cm:
            read_manifest(data)
        self.assertEqual(cm.exception.expected, 8000)
        self.assertEqual(cm.exception.actual, 16)
        self.assertEqual(cm.exception.offset, 4)

    def test_declared_payload_exceeds_stream(self):
        data = bytearray(build([("a", b"AAAA")]))
        # bump compressed_length from 2 to 4
        struct.pack_into("<I", data, 4 + 4 + 1, 4)
        with self.assertRaises(TruncatedArchive) as cm:
            parse(bytes(data))
        self.assertEqual(cm.exception.expected, 4)
        self.assertEqual(cm.exception.actual, 2)

    def test_name_length_beyond_stream(self):
        data = struct.pack("<I", 1) + struct.pack("<I", 500) + b"abc" + b"\x00" * 8
        with self.assertRaises(TruncatedArchive):
            read_manifest(data)

    def test_trailing_data(self):
        data = build([("a", b"AAAA")]) + b"\x00"
        with self.assertRaises(UnexpectedTrailingData) as cm:
            parse(data)
        self.assertIsInstance(cm.exception, ArchiveFormatError)
        self.assertNotIsInstance(cm.exception, TruncatedArchive)

    def test_malformed_payload_names_entry(self):
        data = bytearray(build([("ok", b"xyz"), ("bad", b"AAAA")]))
        info = read_manifest(bytes(data))
        bad = info.entries[1]
        data[bad.payload_offset + 1] = 0
        with self.assertRaises(MalformedPayload) as cm:
            parse(bytes(data))
        self.assertIn("bad", str(cm.exception))
        self.assertEqual(cm.exception.offset, bad.payload_offset)

    def test_odd_payload_length(self):
        data = struct.pack("<I", 1) + struct.pack("<I", 1) + b"a" + struct.pack("<I", 3) + b"A\x01B"
        with self.assertRaises(MalformedPayload):
            parse(data)

    def test_invalid_utf8_name(self):
        data = struct.pack("<I", 1) + struct.pack("<I", 2) + b"\xff\xfe" + struct.pack("<I", 0)
        with self.assertRaises(InvalidEntryName):
            read_manifest(data)


if __name__ == "__main__":
    unittest.main()
