"""File-level metadata for search indexers: stat info plus flattened EXIF."""

import logging
import struct
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from photosift.dedup.categories import get_file_category
from photosift.dedup.engine import format_bytes
from photosift.exif.container import EXIF_EXTENSIONS
from photosift.exif.extractor import ExifExtractor, to_flat_metadata

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'
_SOF_MARKERS = (0xC0, 0xC2)  # baseline, progressive


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _png_dimensions(data: bytes):
    if len(data) > 24 and data.startswith(PNG_SIGNATURE):
        return struct.unpack_from('>II', data, 16)
    return None


def _jpeg_dimensions(data: bytes):
    """Width/height from the first SOF0/SOF2 segment."""
    i = data.find(b'\xff', 0)
    while 0 <= i < len(data) - 10:
        if data[i + 1] in _SOF_MARKERS:
            height, width = struct.unpack_from('>HH', data, i + 5)
            return width, height
        i = data.find(b'\xff', i + 1)
    return None


def extract_file_metadata(filepath, exif_extractor: Optional[ExifExtractor] = None) -> Dict[str, Any]:
    """Describe one file for indexing.

    Always includes name, extension, directory, size, timestamps, type and
    category. Images also get their signature and pixel dimensions; JPEG
    and TIFF files get the flattened EXIF fields when an extractor is
    given. Problems are reported in ``error`` / ``read_error`` /
    ``exif_error`` keys instead of being raised.
    """
    filepath = Path(filepath)
    ext = filepath.suffix.lower()
    try:
        st = filepath.stat()
    except OSError as e:
        return {'filename': filepath.name, 'extension': ext, 'error': e.strerror or str(e)}

    category = get_file_category(filepath)
    info: Dict[str, Any] = {
        'filename': filepath.name,
        'extension': ext,
        'directory': str(filepath.parent),
        'size_bytes': st.st_size,
        'size_human': format_bytes(st.st_size),
        'created_at': _iso(getattr(st, 'st_birthtime', st.st_ctime)),
        'modified_at': _iso(st.st_mtime),
        'file_type': category.type,
        'category': category.category,
        'is_binary': not category.extract_text,
    }
    if not category.is_image:
        return info

    try:
        data = filepath.read_bytes()
    except OSError as e:
        info['read_error'] = e.strerror or str(e)
        return info

    info['file_signature'] = data[:4].hex()
    dims = None
    if ext == '.png':
        dims = _png_dimensions(data)
    elif ext in ('.jpg', '.jpeg'):
        dims = _jpeg_dimensions(data)
    if dims:
        info['width'], info['height'] = dims

    if exif_extractor is None or ext not in EXIF_EXTENSIONS:
        return info

    result = exif_extractor.extract_bytes(data, ext, filepath=filepath)
    if result.error:
        info['exif_error'] = result.error
    elif result.has_exif:
        flat = to_flat_metadata(result)
        # EXIF dimensions take precedence over the container's
        if 'exif_width' in flat:
            info['width'] = flat['exif_width']
        if 'exif_height' in flat:
            info['height'] = flat['exif_height']
        info.update(flat)
        if 'gps_latitude' in flat:
            info['gps_location'] = f"{flat['gps_latitude']}, {flat['gps_longitude']}"
        info['has_exif'] = True
    return info
