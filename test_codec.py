from __future__ import annotations

import os
import random
import unittest

from runarc.codec import ByteRun, Codec, RunLengthCodec, get_codec, iter_runs
from runarc.constants import CODEC_RLE, RLE_NOMINAL_RATIO
from runarc.errors import InvalidConfiguration, MalformedPayload


def _pairs(encoded: bytes):
    return [(encoded[i], encoded[i + 1]) for i in range(0, len(encoded), 2)]


class RunLengthCodecTests(unittest.TestCase):
    def setUp(self):
        self.codec = RunLengthCodec()

    def test_empty(self):
        self.assertEqual(self.codec.encode(b""), b"")
        self.assertEqual(self.codec.decode(b""), b"")

    def test_single_byte(self):
        self.assertEqual(self.codec.encode(b"\x07"), b"\x07\x01")
        self.assertEqual(self.codec.decode(b"\x07\x01"), b"\x07")

    def test_known_example(self):
        encoded = self.codec.encode(b"AAAAABBBCC")
        self.assertEqual(encoded, bytes([0x41, 0x05, 0x42, 0x03, 0x43, 0x02]))
        self.assertEqual(list(self.codec.runs(b"AAAAABBBCC")), [ByteRun(0x41, 5), ByteRun(0x42, 3), ByteRun(0x43, 2)])

    def test_run_cap_splits_at_255(self):
        encoded = self.codec.encode(b"\xaa" * 300)
        self.assertEqual(_pairs(encoded), [(0xAA, 255), (0xAA, 45)])

    def test_exact_cap_boundaries(self):
        self.assertEqual(_pairs(self.codec.encode(b"z" * 255)), [(ord("z"), 255)])
        self.assertEqual(_pairs(self.codec.encode(b"z" * 256)), [(ord("z"), 255), (ord("z"), 1)])
        self.assertEqual(_pairs(self.codec.encode(b"z" * 510)), [(ord("z"), 255), (ord("z"), 255)])

    def test_roundtrip(self):
        rng = random.Random(1234)
        samples = [
            b"",
            b"a",
            b"ab",
            b"\x00" * 1000,
            bytes(range(256)),
            os.urandom(2048),
            b"".join(bytes([rng.randrange(4)]) * rng.randrange(1, 700) for _ in range(50)),
        ]
        for data in samples:
            self.assertEqual(self.codec.decode(self.codec.encode(data)), data)

    def test_adjacent_runs_differ_unless_capped(self):
        rng = random.Random(99)
        data = b"".join(bytes([rng.randrange(3)]) * rng.randrange(1, 600) for _ in range(100))
        runs = list(iter_runs(data))
        for prev, cur in zip(runs, runs[1:]):
            if prev.value == cur.value:
                self.assertEqual(prev.length, 255)
        for run in runs:
            self.assertTrue(1 <= run.length <= 255)

    def test_low_redundancy_input_grows(self):
        data = bytes(range(100))
        self.assertEqual(len(self.codec.encode(data)), 200)

    def test_decode_odd_length(self):
        with self.assertRaises(MalformedPayload) as cm:
            self.codec.decode(b"\x41\x05\x42")
        self.assertEqual(cm.exception.offset, 2)

    def test_decode_zero_length_run(self):
        with self.assertRaises(MalformedPayload) as cm:
            self.codec.decode(b"\x41\x05\x42\x00\x43\x01")
        self.assertEqual(cm.exception.offset, 2)

    def test_decode_accepts_bytearray_and_memoryview(self):
        self.assertEqual(self.codec.decode(bytearray(b"x\x03")), b"xxx")
        self.assertEqual(self.codec.encode(memoryview(b"xxx")), b"x\x03")

    def test_compression_ratio(self):
        self.assertEqual(self.codec.compression_ratio(), RLE_NOMINAL_RATIO)
        self.assertEqual(self.codec.compression_ratio(b""), 1.0)
        self.assertAlmostEqual(self.codec.compression_ratio(b"A" * 100), 50.0)
        self.assertAlmostEqual(self.codec.compression_ratio(b"AB"), 0.5)


class CodecRegistryTests(unittest.TestCase):
    def test_lookup_by_id_and_name(self):
        self.assertIsInstance(get_codec(), RunLengthCodec)
        self.assertIsInstance(get_codec(CODEC_RLE), RunLengthCodec)
        self.assertIsInstance(get_codec("rle"), RunLengthCodec)
        self.assertIsInstance(get_codec(" RLE "), RunLengthCodec)
        self.assertIsInstance(get_codec("0"), RunLengthCodec)

    def test_instance_passthrough(self):
        c = RunLengthCodec()
        self.assertIs(get_codec(c), c)

    def test_unknown_selector(self):
        for bad in (1, 7, -1, "zstd", "", "\u00b2", "\u2070", True, 1.5):
            with self.assertRaises(InvalidConfiguration):
                get_codec(bad)

    def test_invalid_configuration_is_value_error(self):
        with self.assertRaises(ValueError):
            get_codec("lzma")

    def test_base_codec_is_abstract(self):
        with self.assertRaises(NotImplementedError):
            Codec().encode(b"x")


if __name__ == "__main__":
    unittest.main()
