"""Tag and value vocabularies for IFD0, the EXIF sub-IFD and the GPS sub-IFD.

GPS tag ids 0x0000-0x001F overlap numerically with nothing meaningful in
IFD0, but the overlap is still ambiguous, so every lookup here is keyed by
the kind of directory the tag came from.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Optional, Type, Union


class IFDKind(Enum):
    IMAGE = 'image'  # IFD0
    EXIF = 'exif'
    GPS = 'gps'


class TIFFType(IntEnum):
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    UNDEFINED = 7
    SLONG = 9
    SRATIONAL = 10


# Element sizes in bytes; anything not listed is treated as 1.
TYPE_SIZES: Dict[int, int] = {
    TIFFType.BYTE: 1,
    TIFFType.ASCII: 1,
    TIFFType.SHORT: 2,
    TIFFType.LONG: 4,
    TIFFType.RATIONAL: 8,
    TIFFType.UNDEFINED: 1,
    TIFFType.SLONG: 4,
    TIFFType.SRATIONAL: 8,
}


def type_size(dtype: int) -> int:
    return TYPE_SIZES.get(dtype, 1)


class ImageTag(IntEnum):
    IMAGE_WIDTH = 0x0100
    IMAGE_LENGTH = 0x0101
    MAKE = 0x010F
    MODEL = 0x0110
    ORIENTATION = 0x0112
    X_RESOLUTION = 0x011A
    Y_RESOLUTION = 0x011B
    RESOLUTION_UNIT = 0x0128
    SOFTWARE = 0x0131
    DATE_TIME = 0x0132
    ARTIST = 0x013B
    COPYRIGHT = 0x8298
    EXIF_IFD_POINTER = 0x8769
    GPS_IFD_POINTER = 0x8825


class ExifTag(IntEnum):
    EXPOSURE_TIME = 0x829A
    F_NUMBER = 0x829D
    EXPOSURE_PROGRAM = 0x8822
    ISO_SPEED_RATINGS = 0x8827
    EXIF_VERSION = 0x9000
    DATE_TIME_ORIGINAL = 0x9003
    DATE_TIME_DIGITIZED = 0x9004
    SHUTTER_SPEED_VALUE = 0x9201
    APERTURE_VALUE = 0x9202
    BRIGHTNESS_VALUE = 0x9203
    EXPOSURE_BIAS_VALUE = 0x9204
    MAX_APERTURE_VALUE = 0x9205
    METERING_MODE = 0x9207
    LIGHT_SOURCE = 0x9208
    FLASH = 0x9209
    FOCAL_LENGTH = 0x920A
    COLOR_SPACE = 0xA001
    PIXEL_X_DIMENSION = 0xA002
    PIXEL_Y_DIMENSION = 0xA003
    FOCAL_PLANE_X_RESOLUTION = 0xA20E
    FOCAL_PLANE_Y_RESOLUTION = 0xA20F
    FOCAL_PLANE_RESOLUTION_UNIT = 0xA210
    SENSING_METHOD = 0xA217
    FILE_SOURCE = 0xA300
    SCENE_TYPE = 0xA301
    CUSTOM_RENDERED = 0xA401
    EXPOSURE_MODE = 0xA402
    WHITE_BALANCE = 0xA403
    DIGITAL_ZOOM_RATIO = 0xA404
    FOCAL_LENGTH_IN_35MM_FILM = 0xA405
    SCENE_CAPTURE_TYPE = 0xA406
    CONTRAST = 0xA408
    SATURATION = 0xA409
    SHARPNESS = 0xA40A
    CAMERA_OWNER_NAME = 0xA430
    BODY_SERIAL_NUMBER = 0xA431
    LENS_SPECIFICATION = 0xA432
    LENS_MAKE = 0xA433
    LENS_MODEL = 0xA434
    LENS_SERIAL_NUMBER = 0xA435


class GPSTag(IntEnum):
    VERSION_ID = 0x0000
    LATITUDE_REF = 0x0001
    LATITUDE = 0x0002
    LONGITUDE_REF = 0x0003
    LONGITUDE = 0x0004
    ALTITUDE_REF = 0x0005
    ALTITUDE = 0x0006
    TIME_STAMP = 0x0007
    SATELLITES = 0x0008
    STATUS = 0x0009
    MEASURE_MODE = 0x000A
    DOP = 0x000B
    SPEED_REF = 0x000C
    SPEED = 0x000D
    TRACK_REF = 0x000E
    TRACK = 0x000F
    IMG_DIRECTION_REF = 0x0010
    IMG_DIRECTION = 0x0011
    MAP_DATUM = 0x0012
    DEST_LATITUDE_REF = 0x0013
    DEST_LATITUDE = 0x0014
    DEST_LONGITUDE_REF = 0x0015
    DEST_LONGITUDE = 0x0016
    DEST_BEARING_REF = 0x0017
    DEST_BEARING = 0x0018
    DEST_DISTANCE_REF = 0x0019
    DEST_DISTANCE = 0x001A
    PROCESSING_METHOD = 0x001B
    AREA_INFORMATION = 0x001C
    DATE_STAMP = 0x001D
    DIFFERENTIAL = 0x001E
    H_POSITIONING_ERROR = 0x001F


TAGS_BY_KIND: Dict[IFDKind, Type[IntEnum]] = {
    IFDKind.IMAGE: ImageTag,
    IFDKind.EXIF: ExifTag,
    IFDKind.GPS: GPSTag,
}

KIND_OF_TAG_ENUM: Dict[Type[IntEnum], IFDKind] = {v: k for k, v in TAGS_BY_KIND.items()}


@dataclass(frozen=True)
class UnknownTag:
    """A tag id with no entry in the vocabulary of its directory."""
    kind: IFDKind
    value: int

    @property
    def name(self) -> str:
        return f'Tag_0x{self.value:04X}'


AnyTag = Union[ImageTag, ExifTag, GPSTag, UnknownTag]


def resolve_tag(kind: IFDKind, tag_id: int) -> AnyTag:
    """Map (directory kind, numeric id) to its enum member or an UnknownTag."""
    try:
        return TAGS_BY_KIND[kind](tag_id)
    except ValueError:
        return UnknownTag(kind, tag_id)


def tag_name(kind: IFDKind, tag_id: int) -> str:
    return resolve_tag(kind, tag_id).name


# ---------------------------------------------------------------------------
# Value lookup tables
# ---------------------------------------------------------------------------

class LabeledCode(IntEnum):
    """Numeric code with a human label attached to each member."""

    def __new__(cls, value, label):
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj.label = label
        return obj

    @classmethod
    def describe(cls, code, default: Optional[str] = None) -> Optional[str]:
        """Label for ``code``; ``default`` when the code is not documented."""
        try:
            return cls(code).label
        except (ValueError, TypeError):
            return default


class Orientation(LabeledCode):
    NORMAL = 1, 'Normal'
    FLIP_HORIZONTAL = 2, 'Flipped horizontal'
    ROTATE_180 = 3, 'Rotated 180°'
    FLIP_VERTICAL = 4, 'Flipped vertical'
    TRANSPOSE = 5, 'Rotated 90° CCW, flipped'
    ROTATE_90_CW = 6, 'Rotated 90° CW'
    TRANSVERSE = 7, 'Rotated 90° CW, flipped'
    ROTATE_90_CCW = 8, 'Rotated 90° CCW'


class Flash(LabeledCode):
    NO_FLASH = 0x00, 'No flash'
    FIRED = 0x01, 'Flash fired'
    FIRED_RETURN_NOT_DETECTED = 0x05, 'Flash fired, strobe return not detected'
    FIRED_RETURN_DETECTED = 0x07, 'Flash fired, strobe return detected'
    ON_DID_NOT_FIRE = 0x08, 'Flash on, did not fire'
    ON_FIRED = 0x09, 'Flash on, fired'
    ON_RETURN_NOT_DETECTED = 0x0D, 'Flash on, fired, return not detected'
    ON_RETURN_DETECTED = 0x0F, 'Flash on, fired, return detected'
    OFF = 0x10, 'Flash off'
    OFF_RETURN_NOT_DETECTED = 0x14, 'Flash off, did not fire, return not detected'
    AUTO_DID_NOT_FIRE = 0x18, 'Auto, did not fire'
    AUTO_FIRED = 0x19, 'Auto, fired'
    AUTO_RETURN_NOT_DETECTED = 0x1D, 'Auto, fired, return not detected'
    AUTO_RETURN_DETECTED = 0x1F, 'Auto, fired, return detected'
    NO_FLASH_FUNCTION = 0x20, 'No flash function'
    OFF_NO_FLASH_FUNCTION = 0x30, 'Flash off, no flash function'
    FIRED_RED_EYE = 0x41, 'Flash fired, red-eye reduction'
    FIRED_RED_EYE_RETURN_NOT_DETECTED = 0x45, 'Flash fired, red-eye reduction, return not detected'
    FIRED_RED_EYE_RETURN_DETECTED = 0x47, 'Flash fired, red-eye reduction, return detected'
    ON_RED_EYE = 0x49, 'Flash on, red-eye reduction'
    ON_RED_EYE_RETURN_NOT_DETECTED = 0x4D, 'Flash on, red-eye reduction, return not detected'
    ON_RED_EYE_RETURN_DETECTED = 0x4F, 'Flash on, red-eye reduction, return detected'
    OFF_RED_EYE = 0x50, 'Flash off, red-eye reduction'
    AUTO_DID_NOT_FIRE_RED_EYE = 0x58, 'Auto, did not fire, red-eye reduction'
    AUTO_FIRED_RED_EYE = 0x59, 'Auto, fired, red-eye reduction'
    AUTO_FIRED_RED_EYE_RETURN_NOT_DETECTED = 0x5D, 'Auto, fired, red-eye reduction, return not detected'
    AUTO_FIRED_RED_EYE_RETURN_DETECTED = 0x5F, 'Auto, fired, red-eye reduction, return detected'


class WhiteBalance(LabeledCode):
    AUTO = 0, 'Auto'
    MANUAL = 1, 'Manual'


class ColorSpace(LabeledCode):
    SRGB = 1, 'sRGB'
    UNCALIBRATED = 65535, 'Uncalibrated'


class MeteringMode(LabeledCode):
    UNKNOWN = 0, 'Unknown'
    AVERAGE = 1, 'Average'
    CENTER_WEIGHTED = 2, 'Center-weighted average'
    SPOT = 3, 'Spot'
    MULTI_SPOT = 4, 'Multi-spot'
    PATTERN = 5, 'Pattern'
    PARTIAL = 6, 'Partial'
    OTHER = 255, 'Other'


class AltitudeRef(LabeledCode):
    ABOVE_SEA_LEVEL = 0, 'Above sea level'
    BELOW_SEA_LEVEL = 1, 'Below sea level'
