"""Frequency map (symbol -> count) and its header serialization.

Layout, big-endian::

    MAGIC            4 bytes
    entry count      >H
    symbol, count    >H >I   (repeated, symbols ascending)
"""
import struct
from collections import Counter
from typing import BinaryIO, Dict, Tuple

from .config import MAGIC, PSEUDO_EOF
from .errors import EncodingError, MalformedArtifactError

_COUNT = struct.Struct(">H")
_ENTRY = struct.Struct(">HI")
MAX_COUNT = 0xFFFFFFFF  # largest count one header entry holds


def add_counts(freq: Dict[int, int], data: bytes) -> None:
    # in place; caller owns the map
    for sym, fr in Counter(data).items():
        freq[sym] = freq.get(sym, 0) + fr


def header_size(freq: Dict[int, int]) -> int:
    return len(MAGIC) + _COUNT.size + _ENTRY.size * len(freq)


def serialize(freq: Dict[int, int]) -> bytes:
    out = bytearray(MAGIC)
    out += _COUNT.pack(len(freq))
    for sym in sorted(freq):
        if not 0 < freq[sym] <= MAX_COUNT:
            raise EncodingError(
                f"Count {freq[sym]} for symbol {sym} does not fit the header")
        out += _ENTRY.pack(sym, freq[sym])
    return bytes(out)


def deserialize(raw: bytes, cursor: int = 0) -> Tuple[Dict[int, int], int]:
    """Parse a header starting at `cursor`.

    Returns the map and the offset of the first byte after the header.
    Raises MalformedArtifactError on anything that is not a valid table.
    """
    if raw[cursor:cursor + len(MAGIC)] != MAGIC:
        raise MalformedArtifactError("Not a .huf file (magic mismatch)")
    cursor += len(MAGIC)

    if cursor + _COUNT.size > len(raw):
        raise MalformedArtifactError("Header truncated (entry count)")
    (n,) = _COUNT.unpack_from(raw, cursor)
    cursor += _COUNT.size

    if cursor + n * _ENTRY.size > len(raw):
        raise MalformedArtifactError("Header truncated (%d entries expected)" % n)

    freq: Dict[int, int] = {}
    for _ in range(n):
        sym, fr = _ENTRY.unpack_from(raw, cursor)
        cursor += _ENTRY.size
        if sym > PSEUDO_EOF:
            raise MalformedArtifactError(f"Bad symbol {sym} in header")
        if fr == 0:
            raise MalformedArtifactError(f"Zero count for symbol {sym}")
        if sym in freq:
            raise MalformedArtifactError(f"Duplicate symbol {sym} in header")
        freq[sym] = fr

    if PSEUDO_EOF not in freq:
        raise MalformedArtifactError("Header has no end-of-content entry")
    return freq, cursor


# -------------------------
# Stream forms
# -------------------------
def write_freq_map(fp: BinaryIO, freq: Dict[int, int]) -> int:
    blob = serialize(freq)
    fp.write(blob)
    return len(blob)


def read_freq_map(fp: BinaryIO) -> Dict[int, int]:
    # reads exactly the header, leaving fp at the first payload byte
    head = fp.read(len(MAGIC) + _COUNT.size)
    if len(head) < len(MAGIC) + _COUNT.size:
        raise MalformedArtifactError("Not a valid .huf (too small)")
    (n,) = _COUNT.unpack_from(head, len(MAGIC))
    body = fp.read(n * _ENTRY.size)
    freq, _ = deserialize(head + body)
    return freq
