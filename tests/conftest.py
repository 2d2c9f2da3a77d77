"""Shared test fixtures -- synthetic TIFF/JPEG/PNG file generators."""

import os
import struct
import zlib

import pytest

# TIFF field types
BYTE, ASCII, SHORT, LONG, RATIONAL, UNDEFINED, SLONG, SRATIONAL = 1, 2, 3, 4, 5, 7, 9, 10

_INT_FORMATS = {BYTE: 'B', UNDEFINED: 'B', SHORT: 'H', LONG: 'I', SLONG: 'i'}
_RATIONAL_FORMATS = {RATIONAL: 'II', SRATIONAL: 'ii'}

EXIF_POINTER = 0x8769
GPS_POINTER = 0x8825


def encode_value(type_id, value, endian='<'):
    """Encode a Python value as TIFF field data.

    ASCII takes a str (a NUL is appended), BYTE/UNDEFINED accept raw
    bytes, integer types take an int or a list of ints, and rational
    types take a ``(num, den)`` pair or a list of pairs.

    Returns:
        (count, payload) tuple.
    """
    if type_id == ASCII:
        raw = value.encode('latin-1') + b'\x00'
        return len(raw), raw
    if isinstance(value, (bytes, bytearray)):
        return len(value), bytes(value)
    if type_id in _RATIONAL_FORMATS:
        pairs = value if isinstance(value, list) else [value]
        fmt = endian + _RATIONAL_FORMATS[type_id]
        return len(pairs), b''.join(struct.pack(fmt, *pair) for pair in pairs)
    values = value if isinstance(value, (list, tuple)) else [value]
    fmt = _INT_FORMATS.get(type_id, 'B')
    return len(values), struct.pack(endian + fmt * len(values), *values)


def build_ifd(entries, ifd_offset, endian='<'):
    """Build one IFD (entries + next-IFD pointer + value area).

    Args:
        entries: List of ``(tag_id, type_id, value)`` tuples, encoded with
            encode_value, or ``(tag_id, type_id, count, field)`` tuples
            whose 4-byte value field is written verbatim as an int (for
            pointers and deliberately broken offsets).
        ifd_offset: Where this IFD will sit, relative to the TIFF origin.

    Returns:
        bytes: The IFD followed by its out-of-line data.
    """
    data_offset = ifd_offset + 2 + 12 * len(entries) + 4
    entry_bytes = b''
    data_bytes = b''

    for entry in entries:
        if len(entry) == 4:
            tag_id, type_id, count, field = entry
            entry_bytes += struct.pack(endian + 'HHII', tag_id, type_id, count, field)
            continue

        tag_id, type_id, value = entry
        count, payload = encode_value(type_id, value, endian)
        entry_bytes += struct.pack(endian + 'HHI', tag_id, type_id, count)
        if len(payload) <= 4:
            entry_bytes += payload.ljust(4, b'\x00')
        else:
            entry_bytes += struct.pack(endian + 'I', data_offset + len(data_bytes))
            data_bytes += payload

    return (struct.pack(endian + 'H', len(entries)) + entry_bytes
            + struct.pack(endian + 'I', 0) + data_bytes)


def build_tiff(entries, endian='<', exif_entries=None, gps_entries=None, extra_data=None):
    """Build a minimal TIFF structure in memory.

    IFD0 holds ``entries``; when ``exif_entries`` / ``gps_entries`` are
    given, the matching sub-IFD is written after IFD0 and a pointer tag is
    appended to IFD0.

    Returns:
        bytes: Complete TIFF content (header at offset 0, IFD0 at 8).
    """
    bo = b'II' if endian == '<' else b'MM'
    header = bo + struct.pack(endian + 'HI', 42, 8)

    pointer_tags = []
    if exif_entries is not None:
        pointer_tags.append((EXIF_POINTER, exif_entries))
    if gps_entries is not None:
        pointer_tags.append((GPS_POINTER, gps_entries))

    # IFD0 size does not depend on the pointer values
    placeholder = list(entries) + [(tag, LONG, 1, 0) for tag, _ in pointer_tags]
    next_offset = 8 + len(build_ifd(placeholder, 8, endian))

    sub_blocks = b''
    pointers = []
    for tag, sub_entries in pointer_tags:
        block = build_ifd(sub_entries, next_offset, endian)
        pointers.append((tag, LONG, 1, next_offset))
        sub_blocks += block
        next_offset += len(block)

    ifd0 = build_ifd(list(entries) + pointers, 8, endian)
    result = header + ifd0 + sub_blocks
    if extra_data:
        result += extra_data
    return result


def jpeg_segment(marker, payload):
    """One JPEG marker segment: FF <marker> <len> <payload>."""
    return b'\xff' + bytes([marker]) + struct.pack('>H', len(payload) + 2) + payload


JFIF_APP0 = jpeg_segment(0xE0, b'JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00')


def build_jpeg(tiff=None, app_segments=(JFIF_APP0,), width=64, height=48,
               scan_data=None):
    """Build a structurally valid JPEG byte stream.

    Args:
        tiff: TIFF bytes to embed in an ``Exif\\0\\0`` APP1 segment, or None.
        app_segments: Raw segments written between SOI and the APP1.
        width, height: Dimensions written into the SOF0 segment.
        scan_data: Entropy-coded bytes after SOS.
    """
    if scan_data is None:
        scan_data = bytes((i * 7 + 3) % 251 for i in range(4096))
    out = b'\xff\xd8' + b''.join(app_segments)
    if tiff is not None:
        out += jpeg_segment(0xE1, b'Exif\x00\x00' + tiff)
    out += jpeg_segment(0xDB, bytes(65))
    out += jpeg_segment(0xC0, struct.pack('>BHHB', 8, height, width, 3) + bytes(9))
    out += jpeg_segment(0xDA, bytes(10))
    return out + scan_data + b'\xff\xd9'


def png_chunk(chunk_type, data):
    crc = zlib.crc32(chunk_type + data) & 0xFFFFFFFF
    return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', crc)


def build_png(idat_payloads, width=4, height=4, extra_chunks=()):
    """Build a PNG with the given IDAT chunk payloads (not real pixel data)."""
    out = b'\x89PNG\r\n\x1a\n'
    out += png_chunk(b'IHDR', struct.pack('>IIBBBBB', width, height, 8, 2, 0, 0, 0))
    for chunk_type, data in extra_chunks:
        out += png_chunk(chunk_type, data)
    for payload in idat_payloads:
        out += png_chunk(b'IDAT', payload)
    return out + png_chunk(b'IEND', b'')


# ---------------------------------------------------------------------------
# A fully populated EXIF sample
# ---------------------------------------------------------------------------

SAMPLE_IFD0 = [
    (0x010F, ASCII, 'Canon'),
    (0x0110, ASCII, 'Canon EOS R5'),
    (0x0112, SHORT, 6),
    (0x0131, ASCII, 'Firmware 1.8.1'),
    (0x0132, ASCII, '2024:05:01 12:00:00'),
    (0x013B, ASCII, 'Jane Doe'),
    (0x8298, ASCII, '(c) Jane Doe'),
]

SAMPLE_EXIF = [
    (0x829A, RATIONAL, (1, 250)),
    (0x829D, RATIONAL, (28, 10)),
    (0x8827, SHORT, 100),
    (0x9003, ASCII, '2024:05:01 09:59:58'),
    (0x9004, ASCII, '2024:05:01 09:59:59'),
    (0x9204, SRATIONAL, (-1, 3)),
    (0x9205, RATIONAL, (3, 1)),
    (0x9207, SHORT, 5),
    (0x9209, SHORT, 0x10),
    (0x920A, RATIONAL, (50, 1)),
    (0xA001, SHORT, 1),
    (0xA002, LONG, 6000),
    (0xA003, LONG, 4000),
    (0xA403, SHORT, 0),
    (0xA405, SHORT, 50),
    (0xA431, ASCII, '012345678901'),
    (0xA433, ASCII, 'Canon'),
    (0xA434, ASCII, 'RF50mm F1.8 STM'),
]

SAMPLE_GPS = [
    (0x0001, ASCII, 'N'),
    (0x0002, RATIONAL, [(40, 1), (26, 1), (46, 1)]),
    (0x0003, ASCII, 'W'),
    (0x0004, RATIONAL, [(79, 1), (58, 1), (56, 1)]),
    (0x0005, BYTE, 0),
    (0x0006, RATIONAL, (1500, 10)),
    (0x0007, RATIONAL, [(14, 1), (30, 1), (5, 1)]),
    (0x001D, ASCII, '2024:05:01'),
]


def build_sample_tiff(endian='<'):
    return build_tiff(SAMPLE_IFD0, endian=endian,
                      exif_entries=SAMPLE_EXIF, gps_entries=SAMPLE_GPS)


@pytest.fixture
def sample_tiff_bytes():
    return build_sample_tiff()


@pytest.fixture
def tmp_jpeg(tmp_path):
    """JPEG with full camera/lens/exposure/GPS EXIF."""
    f = tmp_path / 'photo.jpg'
    f.write_bytes(build_jpeg(build_sample_tiff()))
    return f


@pytest.fixture
def tmp_jpeg_no_exif(tmp_path):
    f = tmp_path / 'plain.jpg'
    f.write_bytes(build_jpeg(None))
    return f


@pytest.fixture
def tmp_tiff(tmp_path):
    """Big-endian TIFF with the same EXIF as tmp_jpeg."""
    f = tmp_path / 'scan.tif'
    f.write_bytes(build_sample_tiff(endian='>'))
    return f


@pytest.fixture
def tmp_png(tmp_path):
    f = tmp_path / 'image.png'
    f.write_bytes(build_png([bytes(range(200)), bytes(range(50, 250))]))
    return f


@pytest.fixture
def dupe_tree(tmp_path):
    """Directory with one duplicate pair, a same-size distinct file and a
    uniquely sized file.

    Layout::

        root/a.txt          "x" * 1000   (oldest)
        root/sub/b.txt      "x" * 1000   duplicate of a.txt
        root/c.txt          "y" * 1000   same size, different content
        root/d.txt          "z" * 10     unique size
    """
    root = tmp_path / 'root'
    (root / 'sub').mkdir(parents=True)
    files = {
        'a.txt': b'x' * 1000,
        'sub/b.txt': b'x' * 1000,
        'c.txt': b'y' * 1000,
        'd.txt': b'z' * 10,
    }
    for i, (name, content) in enumerate(files.items()):
        p = root / name
        p.write_bytes(content)
        os.utime(p, (1_600_000_000 + i * 100, 1_600_000_000 + i * 100))
    return root
