import struct


# Wire layout (all integers little endian, unsigned 32 bit)
#  - entry_count u32
#  - per entry: name_length u32, name[name_length] (utf-8), compressed_length u32
#  - payload region: payloads concatenated in manifest order
U32_STRUCT = struct.Struct("<I")
U32_MAX = 0xFFFFFFFF

# Smallest possible manifest header: name_length u32 + empty name + compressed_length u32
MIN_ENTRY_HEADER_SIZE = 2 * U32_STRUCT.size

NAME_ENCODING = "utf-8"


# Run-length codec
RLE_MAX_RUN = 255
RLE_PAIR_SIZE = 2  # value u8, length u8

# Historical placeholder ratio reported when no data is measured.
# Uncalibrated; not derived from any input.
RLE_NOMINAL_RATIO = 1.5


# Codec IDs (closed set; an archive never mixes codecs)
CODEC_RLE = 0

CODEC_NAMES = {
    "rle": CODEC_RLE,
}

DEFAULT_CODEC_ID = CODEC_RLE


# Extraction conflict policies
EXISTS_POLICIES = ("overwrite", "skip", "rename", "fail")
DEFAULT_EXISTS_POLICY = "rename"
