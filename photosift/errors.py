"""Exception types raised by the decoders and hashing code.

Most of these never reach a public caller: per-tag and per-file failures
are caught close to where they happen and turned into a degraded result.
"""


class PhotoSiftError(Exception):
    """Base class for all photosift errors."""


class OutOfBounds(PhotoSiftError):
    """A read would run past the end (or start) of the buffer."""

    def __init__(self, offset: int, length: int, size: int):
        self.offset = offset
        self.length = length
        self.size = size
        super().__init__(
            f'read of {length} byte(s) at offset {offset} exceeds buffer of {size} byte(s)')


class InvalidContainer(PhotoSiftError):
    """The file does not start with the expected JPEG/TIFF magic bytes."""


class InvalidHeader(InvalidContainer):
    """The TIFF header has a bad byte-order marker or magic number."""


class IOFailure(PhotoSiftError):
    """A file could not be opened, stat'd or read."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f'{path}: {reason}')
