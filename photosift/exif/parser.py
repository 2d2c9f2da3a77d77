"""IFD decoder -- walks IFD0 and its EXIF/GPS sub-directories.

Every offset stored inside the TIFF structure is relative to the header
origin; ``IFDEntry.value_offset`` is already resolved to an absolute
buffer offset. Malformed entries are skipped one at a time and reported
as SkippedTag diagnostics, never raised.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from photosift.errors import OutOfBounds
from photosift.exif.container import TIFFHeader
from photosift.exif.reader import ByteReader
from photosift.exif.tags import (
    AnyTag,
    IFDKind,
    ImageTag,
    KIND_OF_TAG_ENUM,
    TIFFType,
    tag_name,
    type_size,
)
from photosift.models import SkippedTag

logger = logging.getLogger(__name__)

ENTRY_SIZE = 12
INLINE_THRESHOLD = 4

# An IFD pointer that lands in image data reads garbage as the entry count.
MAX_IFD_ENTRIES = 1000

_SUPPORTED_TYPES = frozenset(int(t) for t in TIFFType)

SUB_IFD_POINTERS: Dict[int, IFDKind] = {
    ImageTag.EXIF_IFD_POINTER: IFDKind.EXIF,
    ImageTag.GPS_IFD_POINTER: IFDKind.GPS,
}


class IFDEntry:
    """A single 12-byte IFD directory entry."""
    __slots__ = ('tag_id', 'dtype', 'count', 'value_offset', 'entry_offset',
                 'is_inline')

    def __init__(self, tag_id: int, dtype: int, count: int,
                 value_offset: int, entry_offset: int, is_inline: bool):
        self.tag_id = tag_id
        self.dtype = dtype
        self.count = count
        self.value_offset = value_offset
        self.entry_offset = entry_offset
        self.is_inline = is_inline

    @property
    def total_size(self) -> int:
        return type_size(self.dtype) * self.count

    def __repr__(self):
        return (f'IFDEntry(tag_id=0x{self.tag_id:04X}, dtype={self.dtype}, '
                f'count={self.count}, value_offset={self.value_offset})')


class IFDResult:
    """Decoded tags of one directory plus what had to be skipped."""
    __slots__ = ('kind', 'offset', 'entries', 'tags', 'skipped')

    def __init__(self, kind: IFDKind, offset: int):
        self.kind = kind
        self.offset = offset
        self.entries: List[IFDEntry] = []
        self.tags: Dict[int, Any] = {}
        self.skipped: List[SkippedTag] = []


class TagSet:
    """Raw tag maps for IFD0, EXIF and GPS, kept apart by directory kind.

    ``get`` looks a tag up in the directory its enum belongs to. Image and
    EXIF tags also fall back to each other's directory, because writers
    disagree about where e.g. DateTimeOriginal lives; GPS tags never do.
    """

    def __init__(self):
        self.maps: Dict[IFDKind, Dict[int, Any]] = {kind: {} for kind in IFDKind}
        self.skipped: List[SkippedTag] = []

    @classmethod
    def from_mapping(cls, values: Dict[AnyTag, Any]) -> 'TagSet':
        """Build a tag set from ``{ImageTag.MAKE: 'Canon', GPSTag.LATITUDE: ...}``."""
        tag_set = cls()
        for tag, value in values.items():
            kind = KIND_OF_TAG_ENUM.get(type(tag), getattr(tag, 'kind', None))
            if kind is None:
                raise TypeError(f'cannot tell which directory {tag!r} belongs to')
            tag_set.maps[kind][int(tag.value)] = value
        return tag_set

    @property
    def image(self) -> Dict[int, Any]:
        return self.maps[IFDKind.IMAGE]

    @property
    def exif(self) -> Dict[int, Any]:
        return self.maps[IFDKind.EXIF]

    @property
    def gps(self) -> Dict[int, Any]:
        return self.maps[IFDKind.GPS]

    def get(self, tag: AnyTag, default=None):
        kind = KIND_OF_TAG_ENUM.get(type(tag), getattr(tag, 'kind', None))
        tag_id = int(tag.value)
        if kind is None:
            return default
        value = self.maps[kind].get(tag_id)
        if value is None and kind is not IFDKind.GPS:
            other = IFDKind.EXIF if kind is IFDKind.IMAGE else IFDKind.IMAGE
            value = self.maps[other].get(tag_id)
        return default if value is None else value

    def __contains__(self, tag) -> bool:
        return self.get(tag) is not None

    def __len__(self) -> int:
        return sum(len(m) for m in self.maps.values())

    def items(self) -> Iterator[Tuple[IFDKind, int, Any]]:
        for kind, tags in self.maps.items():
            for tag_id, value in tags.items():
                yield kind, tag_id, value

    def named(self) -> Dict[str, Any]:
        """Flat ``kind.TagName`` -> value view, for display and debugging."""
        return {f'{kind.value}.{tag_name(kind, tag_id)}': value
                for kind, tag_id, value in self.items()}


def read_ifd_entries(reader: ByteReader, header: TIFFHeader,
                     ifd_offset: int) -> List[IFDEntry]:
    """Read the raw entries of the IFD at ``ifd_offset`` (origin-relative).

    Raises OutOfBounds when the entry count itself is unreadable. A table
    cut short by the end of the buffer yields the complete entries only.
    """
    base = header.origin + ifd_offset
    num_entries = reader.read_ushort(base)
    if num_entries > MAX_IFD_ENTRIES:
        logger.debug('IFD at %d claims %d entries, ignoring', ifd_offset, num_entries)
        return []

    entries = []
    size = len(reader)
    for i in range(num_entries):
        entry_offset = base + 2 + i * ENTRY_SIZE
        if entry_offset + ENTRY_SIZE > size:
            break
        tag_id = reader.read_ushort(entry_offset)
        dtype = reader.read_ushort(entry_offset + 2)
        count = reader.read_ulong(entry_offset + 4)

        if type_size(dtype) * count <= INLINE_THRESHOLD:
            value_offset = entry_offset + 8
            is_inline = True
        else:
            value_offset = header.origin + reader.read_ulong(entry_offset + 8)
            is_inline = False

        entries.append(IFDEntry(tag_id, dtype, count, value_offset,
                                entry_offset, is_inline))
    return entries


def _read_array(reader: ByteReader, offset: int, count: int, step: int, read):
    if count == 1:
        return read(offset)
    return tuple(read(offset + i * step) for i in range(count))


def decode_entry_value(reader: ByteReader, entry: IFDEntry) -> Any:
    """Decode an entry's value according to its TIFF type.

    Numeric types give a scalar for count 1 and a tuple otherwise. Returns
    None for unsupported types and empty numeric values. Raises OutOfBounds
    when the value lies outside the buffer.
    """
    dtype = entry.dtype
    off = entry.value_offset
    count = entry.count

    if dtype not in _SUPPORTED_TYPES:
        return None
    reader.require(off, entry.total_size)

    if dtype == TIFFType.ASCII:
        return reader.read_string(off, count)
    if dtype == TIFFType.UNDEFINED:
        return reader.read_bytes(off, count)
    if count == 0:
        return None
    if dtype == TIFFType.BYTE:
        return _read_array(reader, off, count, 1, reader.read_byte)
    if dtype == TIFFType.SHORT:
        return _read_array(reader, off, count, 2, reader.read_ushort)
    if dtype == TIFFType.LONG:
        return _read_array(reader, off, count, 4, reader.read_ulong)
    if dtype == TIFFType.SLONG:
        return _read_array(reader, off, count, 4, reader.read_slong)
    if dtype == TIFFType.RATIONAL:
        return _read_array(reader, off, count, 8, reader.read_rational)
    if dtype == TIFFType.SRATIONAL:
        return _read_array(reader, off, count, 8, reader.read_srational)
    return None


def decode_ifd(reader: ByteReader, header: TIFFHeader, ifd_offset: int,
               kind: IFDKind) -> IFDResult:
    """Decode one directory into a tag-id -> value map.

    Raises OutOfBounds only if the directory itself cannot be located;
    individual bad entries end up in ``result.skipped``, and so does an
    entry table larger than MAX_IFD_ENTRIES (with ``tag_id=None``).
    """
    result = IFDResult(kind, ifd_offset)
    num_entries = reader.read_ushort(header.origin + ifd_offset)
    if num_entries > MAX_IFD_ENTRIES:
        _skip(result, None, f'directory claims {num_entries} entries (limit {MAX_IFD_ENTRIES})')
        return result
    result.entries = read_ifd_entries(reader, header, ifd_offset)

    for entry in result.entries:
        try:
            value = decode_entry_value(reader, entry)
        except OutOfBounds as e:
            _skip(result, entry.tag_id, str(e))
            continue
        if value is None:
            _skip(result, entry.tag_id, f'unsupported or empty value (type {entry.dtype})')
            continue
        result.tags[entry.tag_id] = value
    return result


def _skip(result: IFDResult, tag_id: Optional[int], reason: str):
    logger.debug('skipping %s tag %s: %s', result.kind.value,
                 'directory' if tag_id is None else f'0x{tag_id:04X}', reason)
    result.skipped.append(SkippedTag(result.kind, tag_id, reason))


def decode_tiff(reader: ByteReader, header: TIFFHeader) -> TagSet:
    """Decode IFD0 and the EXIF/GPS sub-IFDs it points to."""
    tag_set = TagSet()
    reader = reader.with_endian(header.endian)

    try:
        ifd0 = decode_ifd(reader, header, header.first_ifd_offset, IFDKind.IMAGE)
    except OutOfBounds as e:
        tag_set.skipped.append(SkippedTag(IFDKind.IMAGE, None, str(e)))
        return tag_set
    tag_set.maps[IFDKind.IMAGE] = ifd0.tags
    tag_set.skipped.extend(ifd0.skipped)

    visited = {header.first_ifd_offset}
    for entry in ifd0.entries:
        kind = SUB_IFD_POINTERS.get(entry.tag_id)
        if kind is None:
            continue
        try:
            sub_offset = reader.read_ulong(entry.entry_offset + 8)
        except OutOfBounds as e:
            tag_set.skipped.append(SkippedTag(IFDKind.IMAGE, entry.tag_id, str(e)))
            continue
        if sub_offset == 0 or sub_offset in visited:
            tag_set.skipped.append(SkippedTag(
                IFDKind.IMAGE, entry.tag_id, f'invalid {kind.value} IFD pointer {sub_offset}'))
            continue
        visited.add(sub_offset)

        try:
            sub = decode_ifd(reader, header, sub_offset, kind)
        except OutOfBounds as e:
            logger.debug('%s IFD at %d unreadable: %s', kind.value, sub_offset, e)
            tag_set.skipped.append(SkippedTag(kind, None, str(e)))
            continue
        tag_set.maps[kind].update(sub.tags)
        tag_set.skipped.extend(sub.skipped)

    return tag_set
