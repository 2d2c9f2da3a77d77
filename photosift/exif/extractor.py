"""EXIF extraction entry points -- file/bytes in, ExifResult out.

``ExifExtractor`` is constructed explicitly and handed to whatever needs
it (file metadata, the CLI); there is no module-level cached instance.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional, Union

from photosift.errors import InvalidContainer, InvalidHeader, IOFailure
from photosift.exif.assembler import assemble_record
from photosift.exif.container import EXIF_EXTENSIONS, locate_tiff_origin, read_tiff_header
from photosift.exif.parser import decode_tiff
from photosift.exif.reader import ByteReader
from photosift.models import ExifRecord, ExifResult

logger = logging.getLogger(__name__)

NO_EXIF = 'No EXIF data found'


class ExifExtractor:
    """Extract structured EXIF metadata from JPEG and TIFF files."""

    def __init__(self, extensions=None):
        self.extensions = frozenset(e.lower() for e in (extensions or EXIF_EXTENSIONS))

    def supports(self, filepath) -> bool:
        return Path(filepath).suffix.lower() in self.extensions

    def extract(self, filepath) -> ExifResult:
        """Extract EXIF from a file on disk. Never raises.

        Unsupported extensions give ``supported=False``; unreadable files
        give ``error``; a supported file without EXIF gives ``record=None``.
        """
        filepath = Path(filepath)
        ext = filepath.suffix.lower()
        if not self.supports(filepath):
            return ExifResult(filepath=filepath, supported=False,
                              reason=f'EXIF extraction not supported for {ext or filepath.name}')

        try:
            data = filepath.read_bytes()
        except OSError as e:
            err = IOFailure(filepath, e.strerror or str(e))
            logger.debug('cannot read %s: %s', filepath, err)
            return ExifResult(filepath=filepath, error=str(err))

        return self.extract_bytes(data, ext, filepath=filepath)

    def extract_bytes(self, data: bytes, extension: str,
                      filepath: Optional[Path] = None) -> ExifResult:
        """Extract EXIF from an in-memory JPEG or TIFF buffer."""
        t0 = time.monotonic()
        try:
            origin = locate_tiff_origin(data, extension)
        except (InvalidContainer, ValueError) as e:
            # Bad JPEG magic or a non-EXIF extension: not applicable here
            return ExifResult(filepath=filepath, supported=False, reason=str(e))

        if origin is None:
            return ExifResult(filepath=filepath, reason=NO_EXIF)

        try:
            header = read_tiff_header(data, origin)
        except InvalidHeader as e:
            return ExifResult(filepath=filepath, reason=str(e))

        try:
            tag_set = decode_tiff(ByteReader(data, header.endian), header)
            if not len(tag_set):
                return ExifResult(filepath=filepath, reason=NO_EXIF,
                                  skipped=tag_set.skipped)
            record = assemble_record(tag_set)
        except Exception as e:
            logger.exception('EXIF decode failed for %s', filepath or '<buffer>')
            return ExifResult(filepath=filepath, error=str(e))

        logger.debug('decoded %d tag(s), skipped %d, in %.1f ms',
                     len(tag_set), len(tag_set.skipped), (time.monotonic() - t0) * 1000)
        return ExifResult(filepath=filepath, record=record, skipped=tag_set.skipped)


def extract_exif(filepath, extractor: Optional[ExifExtractor] = None) -> ExifResult:
    """Convenience wrapper: extract with the given (or a fresh) extractor."""
    if extractor is None:
        extractor = ExifExtractor()
    return extractor.extract(filepath)


def _record_of(exif: Union[ExifResult, ExifRecord, None]) -> Optional[ExifRecord]:
    if isinstance(exif, ExifResult):
        return exif.record
    return exif


def summarize(exif: Union[ExifResult, ExifRecord, None]) -> str:
    """Multi-line human summary of the key EXIF fields ('' without EXIF)."""
    record = _record_of(exif)
    if record is None:
        return ''

    parts = []
    camera, lens, exposure = record.camera, record.lens, record.exposure

    if camera and (camera.make or camera.model):
        parts.append('Camera: ' + ' '.join(p for p in (camera.make, camera.model) if p))

    if lens and lens.model:
        parts.append(f'Lens: {lens.model}')
    elif lens and lens.focal_length:
        parts.append(f'Focal Length: {lens.focal_length}')

    if exposure:
        settings = [exposure.aperture, exposure.time,
                    f'ISO {exposure.iso}' if exposure.iso else None]
        settings = [s for s in settings if s]
        if settings:
            parts.append('Exposure: ' + ', '.join(settings))

    if record.datetime and record.datetime.original:
        parts.append(f'Date: {record.datetime.original}')

    gps = record.gps
    if gps and gps.latitude is not None and gps.longitude is not None:
        parts.append(f'Location: {gps.latitude}, {gps.longitude}')

    image = record.image
    if image and image.width and image.height:
        parts.append(f'Size: {image.width}x{image.height}')

    return '\n'.join(parts)


def to_flat_metadata(exif: Union[ExifResult, ExifRecord, None]) -> Dict[str, Any]:
    """Flatten the record into scalar key/values for a search index."""
    record = _record_of(exif)
    if record is None:
        return {}

    meta: Dict[str, Any] = {}

    def put(key, value):
        if value is not None and value != '':
            meta[key] = value

    if record.camera:
        put('camera_make', record.camera.make)
        put('camera_model', record.camera.model)
    if record.lens:
        put('lens_model', record.lens.model)
        put('focal_length', record.lens.focal_length)
        put('focal_length_35mm', record.lens.focal_length_35mm)
    if record.exposure:
        put('aperture', record.exposure.aperture)
        put('aperture_value', record.exposure.aperture_value)
        put('shutter_speed', record.exposure.time)
        put('iso', record.exposure.iso)
        put('flash', record.exposure.flash)
    if record.image:
        put('exif_width', record.image.width)
        put('exif_height', record.image.height)
        put('orientation', record.image.orientation)
    if record.datetime:
        put('date_taken', record.datetime.original)
    if record.gps and record.gps.latitude is not None and record.gps.longitude is not None:
        meta['gps_latitude'] = record.gps.latitude
        meta['gps_longitude'] = record.gps.longitude
        put('gps_altitude', record.gps.altitude)

    return meta
