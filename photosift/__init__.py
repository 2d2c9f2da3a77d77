"""PhotoSift -- EXIF metadata extraction and duplicate file detection."""

__version__ = "1.0.0"

from photosift.errors import (
    InvalidContainer,
    InvalidHeader,
    IOFailure,
    OutOfBounds,
    PhotoSiftError,
)
from photosift.models import (
    DuplicateGroup,
    DuplicateReport,
    ExifRecord,
    ExifResult,
    FileComparison,
    FileHashRecord,
    SkippedTag,
)
from photosift.exif import ExifExtractor, extract_exif, summarize, to_flat_metadata
from photosift.dedup import (
    DuplicateDetector,
    HashMethod,
    compare_files,
    find_duplicates,
    format_bytes,
    generate_report,
)
from photosift.config import DetectorConfig
from photosift.metadata import extract_file_metadata

__all__ = [
    "__version__",
    "PhotoSiftError",
    "OutOfBounds",
    "InvalidContainer",
    "InvalidHeader",
    "IOFailure",
    "ExifRecord",
    "ExifResult",
    "SkippedTag",
    "FileHashRecord",
    "DuplicateGroup",
    "DuplicateReport",
    "FileComparison",
    "ExifExtractor",
    "extract_exif",
    "summarize",
    "to_flat_metadata",
    "DuplicateDetector",
    "HashMethod",
    "DetectorConfig",
    "find_duplicates",
    "compare_files",
    "generate_report",
    "format_bytes",
    "extract_file_metadata",
]
