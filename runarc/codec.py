from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, Optional, Type, Union

from .constants import (
    CODEC_NAMES,
    CODEC_RLE,
    DEFAULT_CODEC_ID,
    RLE_MAX_RUN,
    RLE_NOMINAL_RATIO,
    RLE_PAIR_SIZE,
)
from .errors import InvalidConfiguration, MalformedPayload


@dataclass(frozen=True)
class ByteRun:
    value: int
    length: int

    def pack(self) -> bytes:
        return bytes((self.value, self.length))


class Codec:
    """Byte-stream transform shared by every registered codec."""

    codec_id: int = -1
    name: str = ""

    def encode(self, data: bytes) -> bytes:
        raise NotImplementedError

    def decode(self, encoded: bytes) -> bytes:
        raise NotImplementedError

    def compression_ratio(self, data: Optional[bytes] = None) -> float:
        raise NotImplementedError


def iter_runs(data: bytes) -> Iterator[ByteRun]:
    """Yield maximal runs of equal bytes, each capped at RLE_MAX_RUN.

    A run longer than the cap is split into consecutive runs of the same
    value; otherwise neighbouring runs always differ in value.
    """
    n = len(data)
    i = 0
    while i < n:
        value = data[i]
        limit = min(n, i + RLE_MAX_RUN)
        j = i + 1
        while j < limit and data[j] == value:
            j += 1
        yield ByteRun(value=value, length=j - i)
        i = j


class RunLengthCodec(Codec):
    """Run-length encoding as flat ``(value, length)`` byte pairs.

    Low-redundancy input grows (up to twice its size); there is no fallback
    to stored bytes.
    """

    codec_id = CODEC_RLE
    name = "rle"

    def runs(self, data: bytes) -> Iterator[ByteRun]:
        return iter_runs(bytes(data))

    def encode(self, data: bytes) -> bytes:
        out = bytearray()
        for run in iter_runs(bytes(data)):
            out += run.pack()
        return bytes(out)

    def decode(self, encoded: bytes) -> bytes:
        encoded = bytes(encoded)
        n = len(encoded)
        if n % RLE_PAIR_SIZE:
            raise MalformedPayload(
                f"run-length payload has odd length {n}; last pair is missing its length byte",
                offset=n - 1,
            )
        out = bytearray()
        for pos in range(0, n, RLE_PAIR_SIZE):
            value = encoded[pos]
            length = encoded[pos + 1]
            if length == 0:
                raise MalformedPayload(f"zero-length run at payload offset {pos}", offset=pos)
            out += bytes((value,)) * length
        return bytes(out)

    def compression_ratio(self, data: Optional[bytes] = None) -> float:
        """Return original size divided by encoded size.

        Without ``data`` this returns RLE_NOMINAL_RATIO, a fixed placeholder
        that is not measured from anything. Pass the input to get the real
        ratio for it.
        """
        if data is None:
            return RLE_NOMINAL_RATIO
        if not data:
            return 1.0
        return len(data) / len(self.encode(data))


_CODECS: Dict[int, Type[Codec]] = {
    CODEC_RLE: RunLengthCodec,
}


def get_codec(selector: Union[int, str, Codec, None] = None) -> Codec:
    """Resolve a codec id, name or instance to a codec instance.

    Raises:
        InvalidConfiguration: if the selector names no registered codec.
    """
    if selector is None:
        selector = DEFAULT_CODEC_ID
    if isinstance(selector, Codec):
        return selector
    if isinstance(selector, str):
        key = selector.strip().lower()
        if key.isascii() and key.isdigit():
            selector = int(key)
        elif key in CODEC_NAMES:
            selector = CODEC_NAMES[key]
        else:
            raise InvalidConfiguration(f"unknown codec name: {selector!r}")
    if isinstance(selector, bool) or not isinstance(selector, int):
        raise InvalidConfiguration(f"unsupported codec selector: {selector!r}")
    cls = _CODECS.get(selector)
    if cls is None:
        raise InvalidConfiguration(f"unknown codec id: {selector}")
    return cls()


def codec_names() -> list[str]:
    return sorted(CODEC_NAMES)
