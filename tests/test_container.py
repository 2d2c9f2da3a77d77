"""Tests for locating the TIFF header inside JPEG and TIFF files."""

import struct

import pytest

from photosift.errors import InvalidContainer, InvalidHeader
from photosift.exif.container import find_exif_in_jpeg, locate_tiff_origin, read_tiff_header
from tests.conftest import JFIF_APP0, build_jpeg, build_tiff, jpeg_segment


class TestFindExifInJpeg:
    def test_app1_right_after_soi(self):
        data = build_jpeg(build_tiff([]), app_segments=())
        # APP1 marker at 2: marker(2) + length(2) + "Exif\0\0"(6)
        assert find_exif_in_jpeg(data) == 2 + 10

    def test_origin_is_ten_bytes_past_marker(self):
        data = build_jpeg(build_tiff([]))
        marker = data.index(b'\xff\xe1')
        assert find_exif_in_jpeg(data) == marker + 10
        assert data[marker + 10:marker + 12] == b'II'

    def test_skips_other_app_segments(self):
        app2 = jpeg_segment(0xE2, b'ICC_PROFILE\x00' + bytes(100))
        data = build_jpeg(build_tiff([]), app_segments=(JFIF_APP0, app2))
        assert find_exif_in_jpeg(data) == 2 + len(JFIF_APP0) + len(app2) + 10

    def test_skips_non_exif_app1(self):
        xmp = jpeg_segment(0xE1, b'http://ns.adobe.com/xap/1.0/\x00<x/>')
        data = build_jpeg(build_tiff([]), app_segments=(xmp,))
        assert find_exif_in_jpeg(data) == 2 + len(xmp) + 10

    def test_skips_fill_bytes(self):
        data = b'\xff\xd8\xff' + build_jpeg(build_tiff([]), app_segments=())[2:]
        assert find_exif_in_jpeg(data) == 3 + 10

    def test_no_app1_returns_none(self):
        assert find_exif_in_jpeg(build_jpeg(None)) is None

    def test_exif_after_sos_is_ignored(self):
        data = build_jpeg(None)
        data = data[:-2] + jpeg_segment(0xE1, b'Exif\x00\x00' + build_tiff([])) + b'\xff\xd9'
        assert find_exif_in_jpeg(data) is None

    def test_truncated_stream_returns_none(self):
        data = b'\xff\xd8' + JFIF_APP0[:6]
        assert find_exif_in_jpeg(data) is None

    def test_missing_soi(self):
        with pytest.raises(InvalidContainer, match='Invalid JPEG'):
            find_exif_in_jpeg(b'\x89PNG\r\n\x1a\n' + bytes(20))

    def test_empty_buffer(self):
        with pytest.raises(InvalidContainer):
            find_exif_in_jpeg(b'')


class TestReadTiffHeader:
    def test_little_endian(self):
        header = read_tiff_header(build_tiff([], endian='<'))
        assert header.endian == '<'
        assert header.little_endian
        assert header.origin == 0
        assert header.first_ifd_offset == 8

    def test_big_endian(self):
        header = read_tiff_header(build_tiff([], endian='>'))
        assert header.endian == '>'
        assert header.first_ifd_offset == 8

    def test_origin_inside_jpeg(self):
        data = build_jpeg(build_tiff([], endian='>'))
        origin = find_exif_in_jpeg(data)
        header = read_tiff_header(data, origin)
        assert header.origin == origin
        assert header.endian == '>'

    def test_wrong_magic(self):
        with pytest.raises(InvalidHeader):
            read_tiff_header(b'II' + struct.pack('<HI', 43, 8))

    def test_bad_byte_order(self):
        with pytest.raises(InvalidHeader):
            read_tiff_header(b'IM' + struct.pack('<HI', 42, 8))

    def test_truncated(self):
        with pytest.raises(InvalidHeader):
            read_tiff_header(b'II*\x00')

    def test_invalid_header_is_container_error(self):
        assert issubclass(InvalidHeader, InvalidContainer)


class TestLocateTiffOrigin:
    def test_tiff_is_zero(self):
        assert locate_tiff_origin(build_tiff([]), '.tif') == 0
        assert locate_tiff_origin(build_tiff([]), '.TIFF') == 0

    def test_jpeg_dispatch(self):
        data = build_jpeg(build_tiff([]), app_segments=())
        assert locate_tiff_origin(data, '.jpeg') == 12
        assert locate_tiff_origin(data, 'jpg') == 12

    def test_unsupported_extension(self):
        with pytest.raises(ValueError, match='not supported for .png'):
            locate_tiff_origin(b'', '.png')
