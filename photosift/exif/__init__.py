"""JPEG/TIFF EXIF decoding package.

Re-exports the public names so callers can ``from photosift.exif import X``.
"""

# --- reader.py: bounds-checked primitive reads ---
from photosift.exif.reader import (  # noqa: F401
    BIG_ENDIAN,
    LITTLE_ENDIAN,
    ByteReader,
)

# --- container.py: JPEG APP1 scan, TIFF header ---
from photosift.exif.container import (  # noqa: F401
    EXIF_EXTENSIONS,
    JPEG_EXTENSIONS,
    TIFF_EXTENSIONS,
    TIFFHeader,
    find_exif_in_jpeg,
    locate_tiff_origin,
    read_tiff_header,
)

# --- tags.py: tag vocabularies and value tables ---
from photosift.exif.tags import (  # noqa: F401
    AltitudeRef,
    ColorSpace,
    ExifTag,
    Flash,
    GPSTag,
    IFDKind,
    ImageTag,
    MeteringMode,
    Orientation,
    TIFFType,
    UnknownTag,
    WhiteBalance,
    resolve_tag,
    tag_name,
    type_size,
)

# --- parser.py: IFD decoding ---
from photosift.exif.parser import (  # noqa: F401
    IFDEntry,
    IFDResult,
    TagSet,
    decode_entry_value,
    decode_ifd,
    decode_tiff,
    read_ifd_entries,
)

# --- assembler.py: raw tags -> ExifRecord ---
from photosift.exif.assembler import (  # noqa: F401
    apex_to_f_number,
    assemble_record,
    format_aperture,
    format_exposure_bias,
    format_exposure_time,
    format_focal_length,
    format_gps_time,
    gps_to_decimal,
)

# --- extractor.py: public extraction API ---
from photosift.exif.extractor import (  # noqa: F401
    ExifExtractor,
    extract_exif,
    summarize,
    to_flat_metadata,
)
