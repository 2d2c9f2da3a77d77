"""Bounds-checked fixed-endian reads over an in-memory byte buffer."""

import struct
from typing import Tuple

from photosift.errors import OutOfBounds

LITTLE_ENDIAN = '<'
BIG_ENDIAN = '>'


class ByteReader:
    """Read integers, strings and rationals at absolute offsets.

    ``endian`` is a struct prefix: ``'<'`` for "II" files, ``'>'`` for "MM".
    Every read validates its span and raises OutOfBounds instead of
    returning short data.
    """
    __slots__ = ('data', 'endian')

    def __init__(self, data: bytes, endian: str = LITTLE_ENDIAN):
        if endian not in (LITTLE_ENDIAN, BIG_ENDIAN):
            raise ValueError(f'endian must be {LITTLE_ENDIAN!r} or {BIG_ENDIAN!r}')
        self.data = data
        self.endian = endian

    def __len__(self) -> int:
        return len(self.data)

    @property
    def little_endian(self) -> bool:
        return self.endian == LITTLE_ENDIAN

    def with_endian(self, endian: str) -> 'ByteReader':
        """Same buffer, different byte order."""
        return ByteReader(self.data, endian)

    def require(self, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > len(self.data):
            raise OutOfBounds(offset, length, len(self.data))

    def _unpack(self, fmt: str, offset: int) -> Tuple:
        fmt = self.endian + fmt
        self.require(offset, struct.calcsize(fmt))
        return struct.unpack_from(fmt, self.data, offset)

    def read_bytes(self, offset: int, length: int) -> bytes:
        self.require(offset, length)
        return bytes(self.data[offset:offset + length])

    def read_byte(self, offset: int) -> int:
        return self._unpack('B', offset)[0]

    def read_ushort(self, offset: int) -> int:
        return self._unpack('H', offset)[0]

    def read_ulong(self, offset: int) -> int:
        return self._unpack('I', offset)[0]

    def read_slong(self, offset: int) -> int:
        value = self.read_ulong(offset)
        if value >= 0x80000000:
            value -= 0x100000000
        return value

    def read_string(self, offset: int, length: int) -> str:
        """ASCII string truncated at the first NUL and stripped of whitespace."""
        raw = self.read_bytes(offset, length)
        nul = raw.find(b'\x00')
        if nul >= 0:
            raw = raw[:nul]
        return raw.decode('latin-1').strip()

    def read_rational(self, offset: int) -> float:
        """Unsigned numerator/denominator pair. A zero denominator yields 0."""
        num, den = self._unpack('II', offset)
        return num / den if den else 0

    def read_srational(self, offset: int) -> float:
        """Signed numerator/denominator pair. A zero denominator yields 0."""
        num, den = self._unpack('ii', offset)
        return num / den if den else 0
