"""Duplicate detection settings: built-in defaults plus JSON overrides."""

import hashlib
import json
import re
from dataclasses import dataclass, field
from typing import List, Pattern

from photosift.dedup.categories import DEFAULT_EXCLUDE_PATTERNS
from photosift.dedup.hashing import DEFAULT_ALGORITHM, DEFAULT_CHUNK_SIZE, HashMethod

DEFAULT_MIN_SIZE = 1
DEFAULT_MAX_FILES = 5000


@dataclass
class DetectorConfig:
    """Settings for a duplicate detection run.

    ``hash_method`` may be given as a HashMethod or its string value.
    ``exclude_patterns`` are regexes matched against full paths when a
    directory is collected.
    """

    hash_method: HashMethod = HashMethod.PARTIAL
    min_size: int = DEFAULT_MIN_SIZE
    chunk_size: int = DEFAULT_CHUNK_SIZE
    algorithm: str = DEFAULT_ALGORITHM
    workers: int = 1
    max_files: int = DEFAULT_MAX_FILES
    recursive: bool = True
    exclude_patterns: List[Pattern] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))

    def __post_init__(self):
        self.hash_method = HashMethod.parse(self.hash_method)
        if self.algorithm not in hashlib.algorithms_available:
            raise ValueError(f'unsupported hash algorithm: {self.algorithm}')
        if self.chunk_size <= 0:
            raise ValueError(f'chunk_size must be positive, got {self.chunk_size}')
        if self.workers < 1:
            raise ValueError(f'workers must be at least 1, got {self.workers}')
        if self.min_size < 0:
            raise ValueError(f'min_size must not be negative, got {self.min_size}')

    @classmethod
    def default(cls) -> 'DetectorConfig':
        """Return the built-in defaults."""
        return cls()

    @classmethod
    def from_json(cls, path) -> 'DetectorConfig':
        """Load settings from a JSON file on top of the defaults.

        JSON format::

            {
              "hash_method": "full",
              "min_size": 1024,
              "chunk_size": 65536,
              "algorithm": "sha256",
              "workers": 4,
              "max_files": 20000,
              "recursive": true,
              "exclude_patterns": ["\\\\.cache", "Thumbs\\\\.db"]
            }

        All keys are optional; omitted keys keep their defaults.
        ``exclude_patterns`` are *appended* to the defaults, not replacing them.
        """
        with open(str(path), 'r') as f:
            data = json.load(f)

        defaults = cls.default()
        config = cls(
            hash_method=data.get('hash_method', defaults.hash_method),
            min_size=int(data.get('min_size', defaults.min_size)),
            chunk_size=int(data.get('chunk_size', defaults.chunk_size)),
            algorithm=data.get('algorithm', defaults.algorithm),
            workers=int(data.get('workers', defaults.workers)),
            max_files=int(data.get('max_files', defaults.max_files)),
            recursive=bool(data.get('recursive', defaults.recursive)),
        )
        for raw_pat in data.get('exclude_patterns', []):
            try:
                config.exclude_patterns.append(re.compile(raw_pat))
            except re.error as e:
                raise ValueError(f'invalid exclude pattern {raw_pat!r}: {e}') from e

        return config
