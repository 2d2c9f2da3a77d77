"""Duplicate file detection package.

Re-exports the public names so callers can ``from photosift.dedup import X``.
"""

# --- categories.py: extension classifier, directory collection ---
from photosift.dedup.categories import (  # noqa: F401
    DEFAULT_EXCLUDE_PATTERNS,
    FILE_TYPES,
    FileCategory,
    collect_files,
    get_file_category,
    is_image,
)

# --- hashing.py: full / partial / perceptual hashing ---
from photosift.dedup.hashing import (  # noqa: F401
    HashMethod,
    compute_hash,
    effective_method,
    full_hash,
    partial_hash,
    perceptual_hash,
)

# --- engine.py: two-phase grouping, comparison, report ---
from photosift.dedup.engine import (  # noqa: F401
    DuplicateDetector,
    compare_files,
    find_duplicates,
    format_bytes,
    generate_report,
    group_records,
)
