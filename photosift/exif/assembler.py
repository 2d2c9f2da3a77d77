"""Turn raw tag maps into an ExifRecord with human-oriented values."""

import math
from typing import Any, Optional

from photosift.exif.parser import TagSet
from photosift.exif.tags import (
    AltitudeRef,
    ColorSpace,
    ExifTag,
    Flash,
    GPSTag,
    ImageTag,
    MeteringMode,
    Orientation,
    WhiteBalance,
)
from photosift.models import (
    CameraInfo,
    DateTimeInfo,
    ExifRecord,
    ExposureInfo,
    GPSInfo,
    ImageInfo,
    LensInfo,
)


# ---------------------------------------------------------------------------
# Unit formatting
# ---------------------------------------------------------------------------

def _number(value: float) -> str:
    return f'{value:g}'


def format_exposure_time(value: Optional[float]) -> Optional[str]:
    """``1/250s`` below one second, ``2s`` / ``2.5s`` at or above it."""
    if not value or value < 0:
        return None
    if value >= 1:
        return f'{_number(value)}s'
    return f'1/{int(math.floor(1 / value + 0.5))}s'


def format_aperture(value: Optional[float]) -> Optional[str]:
    if not value or value < 0:
        return None
    return f'f/{value:.1f}'


def apex_to_f_number(apex: float) -> float:
    """Convert an APEX aperture value to an f-number: 2^(apex/2)."""
    return math.pow(2, apex / 2)


def format_exposure_bias(value: Optional[float]) -> Optional[str]:
    if value is None:
        return None
    sign = '+' if value > 0 else ''
    return f'{sign}{value:.1f} EV'


def format_focal_length(value: Optional[float]) -> Optional[str]:
    if not value or value < 0:
        return None
    return f'{_number(value)}mm'


def gps_to_decimal(coords: Any, ref: Optional[str]) -> Optional[float]:
    """Degrees/minutes/seconds triple to signed decimal degrees (6 places)."""
    if not isinstance(coords, (tuple, list)) or len(coords) != 3:
        return None
    degrees, minutes, seconds = coords
    decimal = degrees + minutes / 60 + seconds / 3600
    if ref in ('S', 'W'):
        decimal = -decimal
    return round(decimal, 6)


def format_gps_time(value: Any) -> Optional[str]:
    if not isinstance(value, (tuple, list)) or len(value) != 3:
        return None
    hours, minutes, seconds = value
    if float(seconds).is_integer():
        sec = f'{int(seconds):02d}'
    else:
        sec = f'{seconds:05.2f}'
    return f'{int(hours):02d}:{int(minutes):02d}:{sec}'


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------

def _first(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return value[0] if value else None
    return value


def _text(value: Any) -> Optional[str]:
    if isinstance(value, bytes):
        value = value.rstrip(b'\x00').decode('latin-1').strip()
    if not isinstance(value, str) or not value:
        return None
    return value


def _number_or_none(value: Any) -> Optional[float]:
    value = _first(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _positive_int(value: Any) -> Optional[int]:
    value = _number_or_none(value)
    if not value or value < 0:
        return None
    return int(value)


def _code(value: Any) -> Optional[int]:
    value = _number_or_none(value)
    return None if value is None else int(value)


def _unknown(code: Optional[int]) -> Optional[str]:
    return None if code is None else f'Unknown ({code})'


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _camera(tags: TagSet) -> CameraInfo:
    return CameraInfo(
        make=_text(tags.get(ImageTag.MAKE)),
        model=_text(tags.get(ImageTag.MODEL)),
        software=_text(tags.get(ImageTag.SOFTWARE)),
        artist=_text(tags.get(ImageTag.ARTIST)),
        copyright=_text(tags.get(ImageTag.COPYRIGHT)),
        serial=_text(tags.get(ExifTag.BODY_SERIAL_NUMBER)),
    )


def _lens(tags: TagSet) -> LensInfo:
    apex = _number_or_none(tags.get(ExifTag.MAX_APERTURE_VALUE))
    return LensInfo(
        make=_text(tags.get(ExifTag.LENS_MAKE)),
        model=_text(tags.get(ExifTag.LENS_MODEL)),
        serial=_text(tags.get(ExifTag.LENS_SERIAL_NUMBER)),
        focal_length=format_focal_length(_number_or_none(tags.get(ExifTag.FOCAL_LENGTH))),
        focal_length_35mm=format_focal_length(
            _number_or_none(tags.get(ExifTag.FOCAL_LENGTH_IN_35MM_FILM))),
        max_aperture=format_aperture(apex_to_f_number(apex)) if apex is not None else None,
    )


def _exposure(tags: TagSet) -> ExposureInfo:
    time_value = _number_or_none(tags.get(ExifTag.EXPOSURE_TIME))
    f_number = _number_or_none(tags.get(ExifTag.F_NUMBER))
    metering = _code(tags.get(ExifTag.METERING_MODE))
    flash = _code(tags.get(ExifTag.FLASH))
    return ExposureInfo(
        time=format_exposure_time(time_value),
        time_value=time_value or None,
        aperture=format_aperture(f_number),
        aperture_value=f_number or None,
        iso=_positive_int(tags.get(ExifTag.ISO_SPEED_RATINGS)),
        bias=format_exposure_bias(_number_or_none(tags.get(ExifTag.EXPOSURE_BIAS_VALUE))),
        metering_mode=MeteringMode.describe(metering, _unknown(metering)),
        flash=Flash.describe(flash, _unknown(flash)),
        white_balance=WhiteBalance.describe(_code(tags.get(ExifTag.WHITE_BALANCE))),
    )


def _image(tags: TagSet) -> ImageInfo:
    width = _positive_int(tags.get(ExifTag.PIXEL_X_DIMENSION))
    height = _positive_int(tags.get(ExifTag.PIXEL_Y_DIMENSION))
    if width is None:
        width = _positive_int(tags.get(ImageTag.IMAGE_WIDTH))
    if height is None:
        height = _positive_int(tags.get(ImageTag.IMAGE_LENGTH))
    orientation = _code(tags.get(ImageTag.ORIENTATION))
    label = Orientation.describe(orientation)
    return ImageInfo(
        width=width,
        height=height,
        orientation=label,
        orientation_code=orientation if label else None,
        color_space=ColorSpace.describe(_code(tags.get(ExifTag.COLOR_SPACE))),
    )


def _datetime(tags: TagSet) -> DateTimeInfo:
    return DateTimeInfo(
        original=_text(tags.get(ExifTag.DATE_TIME_ORIGINAL)),
        digitized=_text(tags.get(ExifTag.DATE_TIME_DIGITIZED)),
        modified=_text(tags.get(ImageTag.DATE_TIME)),
    )


def _gps(tags: TagSet) -> GPSInfo:
    lat_ref = _text(tags.get(GPSTag.LATITUDE_REF))
    lon_ref = _text(tags.get(GPSTag.LONGITUDE_REF))
    altitude = _number_or_none(tags.get(GPSTag.ALTITUDE))
    return GPSInfo(
        latitude=gps_to_decimal(tags.get(GPSTag.LATITUDE), lat_ref),
        longitude=gps_to_decimal(tags.get(GPSTag.LONGITUDE), lon_ref),
        latitude_ref=lat_ref,
        longitude_ref=lon_ref,
        altitude=float(altitude) if altitude is not None else None,
        altitude_ref=AltitudeRef.describe(_code(tags.get(GPSTag.ALTITUDE_REF))),
        timestamp=format_gps_time(tags.get(GPSTag.TIME_STAMP)),
        datestamp=_text(tags.get(GPSTag.DATE_STAMP)),
    )


def assemble_record(tags: TagSet) -> ExifRecord:
    """Build the structured record from decoded IFD0/EXIF/GPS tags.

    Pure function of its input. Sub-records whose fields are all absent
    collapse to None.
    """
    return ExifRecord.build(
        camera=_camera(tags),
        lens=_lens(tags),
        exposure=_exposure(tags),
        image=_image(tags),
        datetime=_datetime(tags),
        gps=_gps(tags),
    )
