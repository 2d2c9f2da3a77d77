"""File content hashing: full, partial (sampled chunks) and perceptual."""

import hashlib
import logging
import os
import struct
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536  # 64 KB
DEFAULT_ALGORITHM = 'md5'

# Perceptual sampling limits
JPEG_SAMPLE_SIZE = 1024
PNG_IDAT_SAMPLE = 256
PERCEPTUAL_DIGEST_CHARS = 16

SOS_MARKER = b'\xff\xda'
PNG_SIGNATURE_SIZE = 8


class HashMethod(Enum):
    FULL = 'full'
    PARTIAL = 'partial'
    PERCEPTUAL = 'perceptual'

    @classmethod
    def parse(cls, value) -> 'HashMethod':
        """Accept a HashMethod or its string name; raise ValueError otherwise."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            choices = ', '.join(m.value for m in cls)
            raise ValueError(f'unknown hash method {value!r} (expected one of: {choices})')


def _new_digest(algorithm: str):
    try:
        return hashlib.new(algorithm)
    except ValueError:
        raise ValueError(f'unsupported hash algorithm: {algorithm}')


def full_hash(filepath, algorithm: str = DEFAULT_ALGORITHM,
              chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Hash the entire file content.

    Streams data through the digest in ``chunk_size`` pieces for constant
    memory usage. Raises OSError if the file cannot be read.
    """
    h = _new_digest(algorithm)
    with open(str(filepath), 'rb') as f:
        while True:
            data = f.read(chunk_size)
            if not data:
                break
            h.update(data)
    return h.hexdigest()


def partial_hash(filepath, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Hash the file size plus its first, last and middle chunks.

    The digest is seeded with the decimal byte length, then the first
    chunk. The last chunk is added only when the file exceeds twice the
    chunk size, and a chunk centred on the midpoint only when it exceeds
    three times the chunk size. Bytes outside these regions do not
    influence the result.
    """
    h = _new_digest(algorithm)
    with open(str(filepath), 'rb') as f:
        size = os.fstat(f.fileno()).st_size
        h.update(str(size).encode('ascii'))

        h.update(f.read(min(chunk_size, size)))

        if size > chunk_size * 2:
            f.seek(size - chunk_size)
            h.update(f.read(chunk_size))

        if size > chunk_size * 3:
            f.seek(size // 2 - chunk_size // 2)
            h.update(f.read(chunk_size))

    return h.hexdigest()
def _jpeg_fingerprint(data: bytes):
    """Stride-sample up to 1 KB of entropy-coded data after the first SOS.

    Returns None when there is no SOS marker. Raises ValueError when the
    marker sits at the very end and there is no scan data to sample.
    """
    sos = data.find(SOS_MARKER)
    if sos < 0:
        return None
    start = sos + 2
    remaining = len(data) - start
    if remaining <= 0:
        raise ValueError('no scan data after SOS')
    sample_size = min(JPEG_SAMPLE_SIZE, remaining)
    step = max(1, remaining // sample_size)
    h = hashlib.md5(data[start:start + sample_size * step:step])
    return 'pjpg_' + h.hexdigest()[:PERCEPTUAL_DIGEST_CHARS]


def _png_fingerprint(data: bytes) -> str:
    """Hash the first 256 bytes of every IDAT chunk.

    Raises ValueError when the chunk walk finds no IDAT bytes at all.
    """
    h = hashlib.md5()
    sampled = 0
    i = PNG_SIGNATURE_SIZE
    while i < len(data) - 12:
        length, = struct.unpack_from('>I', data, i)
        chunk_type = data[i + 4:i + 8]
        if chunk_type == b'IDAT':
            head = data[i + 8:i + 8 + min(length, PNG_IDAT_SAMPLE)]
            h.update(head)
            sampled += len(head)
        i += 12 + length
    if not sampled:
        raise ValueError('no IDAT data')
    return 'ppng_' + h.hexdigest()[:PERCEPTUAL_DIGEST_CHARS]


def perceptual_hash(filepath, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Format-aware content fingerprint for images.

    JPEG hashes a sampled window of scan data (``pjpg_``), PNG hashes the
    IDAT chunk heads (``ppng_``), anything else falls back to the partial
    hash (``pgen_``). If reading or walking the file fails, or the walk
    finds no image data to sample, the partial hash is used with a
    ``perr_`` prefix; an unreadable file still raises OSError from that
    fallback.
    """
    filepath = Path(filepath)
    ext = filepath.suffix.lower()
    try:
        if ext in ('.jpg', '.jpeg'):
            fingerprint = _jpeg_fingerprint(filepath.read_bytes())
            if fingerprint is not None:
                return fingerprint
        elif ext == '.png':
            return _png_fingerprint(filepath.read_bytes())
    except (OSError, struct.error, ValueError) as e:
        logger.debug('perceptual hash failed for %s: %s', filepath, e)
        return 'perr_' + partial_hash(filepath, chunk_size)
    return 'pgen_' + partial_hash(filepath, chunk_size)


def effective_method(method: HashMethod, is_image: bool) -> HashMethod:
    """The strategy actually applied: perceptual degrades to partial for non-images."""
    if method is HashMethod.PERCEPTUAL and not is_image:
        return HashMethod.PARTIAL
    return method


def compute_hash(filepath, method: HashMethod, is_image: bool = False,
                 chunk_size: int = DEFAULT_CHUNK_SIZE,
                 algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Hash one file with the selected strategy.

    The perceptual strategy only applies to images; other files get the
    partial hash.
    """
    method = effective_method(method, is_image)
    if method is HashMethod.FULL:
        return full_hash(filepath, algorithm, chunk_size)
    if method is HashMethod.PERCEPTUAL:
        return perceptual_hash(filepath, chunk_size)
    return partial_hash(filepath, chunk_size, algorithm)
