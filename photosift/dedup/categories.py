"""File classification by extension and directory collection."""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Pattern

FILE_TYPES: Dict[str, Dict] = {
    'images': {
        'extensions': frozenset({'.jpg', '.jpeg', '.png', '.gif', '.bmp', '.webp', '.heic',
                                 '.heif', '.tiff', '.tif', '.raw', '.cr2', '.nef', '.arw'}),
        'category': 'image',
        'extract_text': False,
    },
    'cad': {
        'extensions': frozenset({'.dxf', '.dwg', '.step', '.stp', '.stl', '.obj', '.iges',
                                 '.igs', '.fbx', '.3ds', '.blend', '.skp', '.fcstd', '.scad'}),
        'category': 'cad',
        'extract_text': False,
    },
    'documents': {
        'extensions': frozenset({'.pdf', '.txt', '.md', '.markdown', '.rst', '.doc', '.docx',
                                 '.rtf', '.odt'}),
        'category': 'document',
        'extract_text': True,
    },
    'data': {
        'extensions': frozenset({'.json', '.yaml', '.yml', '.xml', '.csv', '.tsv', '.toml',
                                 '.ini', '.conf', '.config'}),
        'category': 'data',
        'extract_text': True,
    },
    'code': {
        'extensions': frozenset({'.js', '.ts', '.jsx', '.tsx', '.py', '.rb', '.go', '.rs',
                                 '.java', '.kt', '.swift', '.c', '.cpp', '.h', '.hpp', '.cs',
                                 '.php', '.vue', '.svelte', '.html', '.css', '.scss', '.sass',
                                 '.less', '.sql', '.sh', '.bash', '.zsh', '.ps1', '.bat'}),
        'category': 'code',
        'extract_text': True,
    },
}

DEFAULT_EXCLUDE_PATTERNS: List[Pattern] = [
    re.compile(r'node_modules'),
    re.compile(r'\.git'),
    re.compile(r'\.DS_Store'),
    re.compile(r'__pycache__'),
]

DEFAULT_MAX_FILES = 10000


@dataclass(frozen=True)
class FileCategory:
    type: str          # key of FILE_TYPES, or "unknown"
    category: str
    extract_text: bool

    @property
    def is_image(self) -> bool:
        return self.type == 'images'


UNKNOWN = FileCategory('unknown', 'unknown', False)


def get_file_category(filepath) -> FileCategory:
    """Classify a path by its (case-insensitive) extension."""
    ext = Path(filepath).suffix.lower()
    for type_name, config in FILE_TYPES.items():
        if ext in config['extensions']:
            return FileCategory(type_name, config['category'], config['extract_text'])
    return UNKNOWN


def is_image(filepath) -> bool:
    return get_file_category(filepath).is_image


def collect_files(
    path,
    recursive: bool = True,
    extensions: Optional[Iterable[str]] = None,
    categories: Optional[Iterable[str]] = None,
    max_files: int = DEFAULT_MAX_FILES,
    exclude_patterns: Optional[List[Pattern]] = None,
) -> List[Path]:
    """Collect files under ``path`` (or ``path`` itself if it is a file).

    Args:
        path: File or directory to search.
        recursive: Descend into subdirectories.
        extensions: Only keep these extensions (e.g. ``['.jpg', '.png']``).
        categories: Only keep these FILE_TYPES keys (e.g. ``['images']``).
        max_files: Stop after this many files.
        exclude_patterns: Regexes matched against the full path; defaults
            to DEFAULT_EXCLUDE_PATTERNS.
    """
    path = Path(path)
    if path.is_file():
        return [path]

    ext_filter: Optional[FrozenSet[str]] = (
        frozenset(e.lower() for e in extensions) if extensions else None)
    cat_filter = frozenset(categories) if categories else None
    excludes = DEFAULT_EXCLUDE_PATTERNS if exclude_patterns is None else exclude_patterns

    files: List[Path] = []
    for root, dirnames, filenames in os.walk(path):
        dirnames.sort()
        if not recursive:
            dirnames.clear()
        dirnames[:] = [d for d in dirnames
                       if not any(p.search(os.path.join(root, d)) for p in excludes)]
        for fname in sorted(filenames):
            full = os.path.join(root, fname)
            if any(p.search(full) for p in excludes):
                continue
            if ext_filter is not None and Path(fname).suffix.lower() not in ext_filter:
                continue
            if cat_filter is not None and get_file_category(fname).type not in cat_filter:
                continue
            files.append(Path(full))
            if len(files) >= max_files:
                return files
    return files
