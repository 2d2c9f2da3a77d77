"""Data models for EXIF extraction and duplicate detection results."""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


def _all_none(obj) -> bool:
    return all(getattr(obj, f.name) is None for f in fields(obj))


# ---------------------------------------------------------------------------
# EXIF record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CameraInfo:
    make: Optional[str] = None
    model: Optional[str] = None
    software: Optional[str] = None
    artist: Optional[str] = None
    copyright: Optional[str] = None
    serial: Optional[str] = None


@dataclass(frozen=True)
class LensInfo:
    make: Optional[str] = None
    model: Optional[str] = None
    serial: Optional[str] = None
    focal_length: Optional[str] = None
    focal_length_35mm: Optional[str] = None
    max_aperture: Optional[str] = None


@dataclass(frozen=True)
class ExposureInfo:
    time: Optional[str] = None
    time_value: Optional[float] = None
    aperture: Optional[str] = None
    aperture_value: Optional[float] = None
    iso: Optional[int] = None
    bias: Optional[str] = None
    metering_mode: Optional[str] = None
    flash: Optional[str] = None
    white_balance: Optional[str] = None


@dataclass(frozen=True)
class ImageInfo:
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[str] = None
    orientation_code: Optional[int] = None
    color_space: Optional[str] = None


@dataclass(frozen=True)
class DateTimeInfo:
    original: Optional[str] = None
    digitized: Optional[str] = None
    modified: Optional[str] = None


@dataclass(frozen=True)
class GPSInfo:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    latitude_ref: Optional[str] = None
    longitude_ref: Optional[str] = None
    altitude: Optional[float] = None
    altitude_ref: Optional[str] = None
    timestamp: Optional[str] = None
    datestamp: Optional[str] = None

    @property
    def maps_url(self) -> Optional[str]:
        if self.latitude is None or self.longitude is None:
            return None
        return f'https://www.google.com/maps?q={self.latitude},{self.longitude}'


@dataclass(frozen=True)
class ExifRecord:
    """Structured EXIF metadata for one image.

    Each sub-record is None when none of its fields could be decoded, so
    callers should test for presence rather than compare against defaults.
    """
    camera: Optional[CameraInfo] = None
    lens: Optional[LensInfo] = None
    exposure: Optional[ExposureInfo] = None
    image: Optional[ImageInfo] = None
    datetime: Optional[DateTimeInfo] = None
    gps: Optional[GPSInfo] = None

    @classmethod
    def build(cls, **sections) -> 'ExifRecord':
        """Construct a record, collapsing all-empty sub-records to None."""
        kept = {name: value for name, value in sections.items()
                if value is not None and not _all_none(value)}
        return cls(**kept)

    def is_empty(self) -> bool:
        return _all_none(self)

    def to_dict(self) -> Dict[str, Any]:
        """Nested dict without absent fields (JSON-friendly)."""
        out: Dict[str, Any] = {}
        for f in fields(self):
            section = getattr(self, f.name)
            if section is None:
                continue
            out[f.name] = {k: v for k, v in asdict(section).items() if v is not None}
            if f.name == 'gps' and section.maps_url:
                out[f.name]['maps_url'] = section.maps_url
        return out


@dataclass(frozen=True)
class SkippedTag:
    """A directory entry that could not be decoded and was left out.

    ``tag_id`` is None when a whole directory was unreadable.
    """
    kind: Any  # photosift.exif.tags.IFDKind
    tag_id: Optional[int]
    reason: str


@dataclass
class ExifResult:
    """Result of extracting EXIF from a single file.

    ``supported`` is False when the file type is not applicable or the
    container magic is wrong. A supported file without EXIF has
    ``record`` set to None and a ``reason``.
    """
    filepath: Optional[Path]
    supported: bool = True
    record: Optional[ExifRecord] = None
    reason: Optional[str] = None
    error: Optional[str] = None
    skipped: List[SkippedTag] = field(default_factory=list)

    @property
    def has_exif(self) -> bool:
        return self.record is not None


# ---------------------------------------------------------------------------
# Duplicate detection
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FileHashRecord:
    """One file's hash as computed during a detection run."""
    path: Path
    hash: str
    algorithm: str  # "full" | "partial" | "perceptual"
    size: int
    modified: float = 0.0


@dataclass
class DuplicateGroup:
    """Files sharing one hash, ordered oldest first.

    The first file is the presumed original; everything after it counts
    as a duplicate and towards the wasted space.
    """
    hash: str
    files: List[FileHashRecord]

    def __post_init__(self):
        if len(self.files) < 2:
            raise ValueError('a duplicate group needs at least two files')

    @property
    def count(self) -> int:
        return len(self.files)

    @property
    def original(self) -> FileHashRecord:
        return self.files[0]

    @property
    def duplicates(self) -> List[FileHashRecord]:
        return self.files[1:]

    @property
    def wasted_space(self) -> int:
        return sum(f.size for f in self.duplicates)


@dataclass
class DuplicateReport:
    """Result of a duplicate detection run."""
    hash_method: str
    scanned: int = 0
    potential_duplicates: int = 0
    groups: List[DuplicateGroup] = field(default_factory=list)
    files_skipped: int = 0
    cancelled: bool = False
    total_time_seconds: float = 0.0

    @property
    def duplicate_groups(self) -> int:
        return len(self.groups)

    @property
    def total_duplicates(self) -> int:
        return sum(g.count - 1 for g in self.groups)

    @property
    def total_wasted_space(self) -> int:
        return sum(g.wasted_space for g in self.groups)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'scanned': self.scanned,
            'potential_duplicates': self.potential_duplicates,
            'duplicate_groups': self.duplicate_groups,
            'total_duplicates': self.total_duplicates,
            'total_wasted_space': self.total_wasted_space,
            'hash_method': self.hash_method,
            'cancelled': self.cancelled,
            'groups': [
                {
                    'hash': g.hash,
                    'count': g.count,
                    'wasted_space': g.wasted_space,
                    'original': str(g.original.path),
                    'duplicates': [str(d.path) for d in g.duplicates],
                }
                for g in self.groups
            ],
        }


@dataclass
class FileComparison:
    """Pairwise comparison of two files."""
    path_a: Path
    path_b: Path
    size_a: int
    size_b: int
    same_size: bool = False
    partial_match: bool = False
    exact_match: bool = False
    perceptual_match: bool = False
    hashes: Dict[str, Tuple[str, str]] = field(default_factory=dict)
