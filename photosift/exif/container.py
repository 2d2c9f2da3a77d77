"""Locate the TIFF header inside a JPEG or TIFF file.

A JPEG carries its EXIF block in an APP1 segment whose payload starts with
``Exif\\0\\0``; the TIFF header follows immediately. A TIFF file *is* the
TIFF structure, so its origin is offset 0.
"""

import logging
import struct
from typing import Optional

from photosift.errors import InvalidContainer, InvalidHeader
from photosift.exif.reader import BIG_ENDIAN, LITTLE_ENDIAN

logger = logging.getLogger(__name__)

JPEG_EXTENSIONS = {'.jpg', '.jpeg'}
TIFF_EXTENSIONS = {'.tif', '.tiff'}
EXIF_EXTENSIONS = JPEG_EXTENSIONS | TIFF_EXTENSIONS

SOI = b'\xff\xd8'
EXIF_SIGNATURE = b'Exif\x00\x00'
TIFF_MAGIC = 42

_APP1 = 0xE1
_SOS = 0xDA
# Markers that stand alone, without a length field
_STANDALONE = {0x01, 0xD8, 0xD9} | set(range(0xD0, 0xD8))


class TIFFHeader:
    """Parsed TIFF header: byte order, origin and first IFD offset.

    ``origin`` is the absolute offset of the header in the file; every IFD
    and value offset inside the TIFF structure is relative to it.
    """
    __slots__ = ('endian', 'origin', 'first_ifd_offset')

    def __init__(self, endian: str, origin: int, first_ifd_offset: int):
        self.endian = endian
        self.origin = origin
        self.first_ifd_offset = first_ifd_offset

    @property
    def little_endian(self) -> bool:
        return self.endian == LITTLE_ENDIAN

    def __repr__(self):
        return (f'TIFFHeader(endian={self.endian!r}, origin={self.origin}, '
                f'first_ifd_offset={self.first_ifd_offset})')


def find_exif_in_jpeg(data: bytes) -> Optional[int]:
    """Return the absolute TIFF origin inside a JPEG, or None if absent.

    Raises InvalidContainer if the buffer does not start with SOI. The scan
    stops at the first SOS marker, since metadata never follows scan data.
    """
    if data[:2] != SOI:
        raise InvalidContainer('Invalid JPEG file')

    size = len(data)
    offset = 2
    while offset < size - 4:
        if data[offset] != 0xFF:
            offset += 1
            continue

        marker = data[offset + 1]
        if marker == 0xFF:
            # Fill byte before the real marker
            offset += 1
            continue
        if marker == _SOS:
            break
        if marker in _STANDALONE:
            offset += 2
            continue

        length = struct.unpack_from('>H', data, offset + 2)[0]
        if marker == _APP1:
            sig_start = offset + 4
            if data[sig_start:sig_start + len(EXIF_SIGNATURE)] == EXIF_SIGNATURE:
                return sig_start + len(EXIF_SIGNATURE)
        offset += 2 + length

    logger.debug('no EXIF APP1 segment before scan data (%d bytes scanned)', offset)
    return None


def read_tiff_header(data: bytes, origin: int = 0) -> TIFFHeader:
    """Validate and parse the 8-byte TIFF header at ``origin``.

    Raises InvalidHeader on a bad byte-order marker, a magic number other
    than 42, or a header cut short by the end of the buffer.
    """
    raw = data[origin:origin + 8]
    if len(raw) < 8:
        raise InvalidHeader('Invalid TIFF header')

    bo = raw[:2]
    if bo == b'II':
        endian = LITTLE_ENDIAN
    elif bo == b'MM':
        endian = BIG_ENDIAN
    else:
        raise InvalidHeader('Invalid TIFF header')

    magic, first_ifd = struct.unpack(endian + 'HI', raw[2:8])
    if magic != TIFF_MAGIC:
        raise InvalidHeader('Invalid TIFF header')
    return TIFFHeader(endian, origin, first_ifd)


def locate_tiff_origin(data: bytes, extension: str) -> Optional[int]:
    """Find the TIFF origin for a file of the given extension.

    JPEG files are scanned for an EXIF APP1 segment; TIFF files start at 0.
    """
    ext = extension.lower()
    if not ext.startswith('.'):
        ext = '.' + ext
    if ext in JPEG_EXTENSIONS:
        return find_exif_in_jpeg(data)
    if ext in TIFF_EXTENSIONS:
        return 0
    raise ValueError(f'EXIF extraction not supported for {ext}')
