"""Single-bit writer/reader over an in-memory byte buffer.

Bits are packed MSB-first; the last byte is padded with zero bits.
Bit n written is bit n read.
"""
from typing import Optional, Tuple


# ---------------------------
# Bit-string helpers
# ---------------------------
def pad_bits(bits: str) -> Tuple[str, int]:
    # pad to full bytes; return padded string + pad count (0..7)
    extra = (8 - (len(bits) % 8)) % 8
    return bits + ("0" * extra), extra


def bits_to_bytes(bits: str) -> bytes:
    padded, _ = pad_bits(bits)
    return bytes(int(padded[i:i + 8], 2) for i in range(0, len(padded), 8))


class BitWriter:
    def __init__(self):
        self._out = bytearray()
        self._acc = 0
        self._acc_bits = 0
        self.bits_written = 0

    def write_bit(self, bit: int) -> None:
        self._acc = (self._acc << 1) | (1 if bit else 0)
        self._acc_bits += 1
        self.bits_written += 1
        if self._acc_bits == 8:
            self._out.append(self._acc)
            self._acc = 0
            self._acc_bits = 0

    def write_bits(self, bits: str) -> None:
        for ch in bits:
            if ch not in "01":
                raise ValueError(f"Not a bit: {ch!r}")
            self.write_bit(ch == "1")

    @property
    def pad_count(self) -> int:
        return (8 - self._acc_bits) % 8

    def getvalue(self) -> bytes:
        """Packed bytes so far, with the partial byte (if any) zero-padded."""
        if self._acc_bits == 0:
            return bytes(self._out)
        return bytes(self._out) + bytes([self._acc << (8 - self._acc_bits)])


class BitReader:
    def __init__(self, data: bytes, nbits: Optional[int] = None):
        self._data = data
        total = len(data) * 8
        if nbits is None:
            nbits = total
        if nbits > total:
            raise ValueError("Bit count bigger than stream")
        self._nbits = nbits
        self._pos = 0

    @classmethod
    def from_bits(cls, bits: str) -> "BitReader":
        return cls(bits_to_bytes(bits), len(bits))

    @property
    def position(self) -> int:
        return self._pos

    def eof(self) -> bool:
        return self._pos >= self._nbits

    def read_bit(self) -> int:
        if self._pos >= self._nbits:
            raise EOFError("Read past end of bit stream")
        byte = self._data[self._pos >> 3]
        bit = (byte >> (7 - (self._pos & 7))) & 1
        self._pos += 1
        return bit
