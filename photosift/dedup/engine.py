"""Duplicate grouping engine -- size pre-filter, then hash grouping.

Phase 1 stats every candidate and buckets by exact size; sizes seen only
once are dropped. Phase 2 hashes the survivors (optionally on a thread
pool) and buckets by hash. Files that cannot be stat'd or hashed are
left out of the result and counted in ``files_skipped``.
"""

import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from photosift.dedup.categories import collect_files, is_image
from photosift.dedup.hashing import (
    HashMethod,
    compute_hash,
    effective_method,
    full_hash,
    partial_hash,
    perceptual_hash,
)
from photosift.errors import IOFailure
from photosift.models import DuplicateGroup, DuplicateReport, FileComparison, FileHashRecord

logger = logging.getLogger(__name__)

SIZING_PROGRESS_EVERY = 100
HASHING_PROGRESS_EVERY = 50

REPORT_MAX_GROUPS = 20
REPORT_RULE_WIDTH = 60

# (path, size, mtime) gathered during the size pass
_Candidate = Tuple[Path, int, float]


class DuplicateDetector:
    """Find groups of identical files.

    Args:
        config: DetectorConfig; None uses the defaults.
        classifier: ``callable(path) -> bool`` telling whether a file is an
            image, used to pick the perceptual strategy. Defaults to the
            extension-based classifier.
    """

    def __init__(self, config=None, classifier: Optional[Callable] = None):
        if config is None:
            from photosift.config import DetectorConfig
            config = DetectorConfig.default()
        self.config = config
        self.classifier = classifier or is_image

    def scan(self, path, progress_callback: Optional[Callable] = None,
             cancel_event: Optional[threading.Event] = None, **collect_kwargs) -> DuplicateReport:
        """Collect files under ``path`` and find duplicates among them."""
        files = collect_files(
            path,
            recursive=self.config.recursive,
            max_files=self.config.max_files,
            exclude_patterns=self.config.exclude_patterns,
            **collect_kwargs,
        )
        return self.find_duplicates(files, progress_callback=progress_callback,
                                    cancel_event=cancel_event)

    def find_duplicates(
        self,
        files: Iterable,
        hash_method=None,
        min_size: Optional[int] = None,
        progress_callback: Optional[Callable] = None,
        workers: Optional[int] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> DuplicateReport:
        """Group ``files`` by content.

        Args:
            files: Paths to consider.
            hash_method: HashMethod or its name; None uses the config.
            min_size: Files smaller than this are ignored; None uses the config.
            progress_callback: Called with (phase, processed, total), phase
                being "sizing" or "hashing".
            workers: Hashing threads; 1 hashes sequentially.
            cancel_event: When set, no further files are sized or hashed and
                the report covers what was done so far.

        Returns:
            DuplicateReport with groups sorted by wasted space, largest first.
        """
        method = HashMethod.parse(hash_method if hash_method is not None
                                  else self.config.hash_method)
        if min_size is None:
            min_size = self.config.min_size
        if workers is None:
            workers = self.config.workers

        t0 = time.monotonic()
        files = [Path(f) for f in files]
        report = DuplicateReport(hash_method=method.value, scanned=len(files))

        candidates = self._size_filter(files, min_size, progress_callback,
                                       cancel_event, report)
        report.potential_duplicates = len(candidates)

        if candidates and not _cancelled(cancel_event):
            if workers > 1 and len(candidates) > 1:
                records = self._hash_parallel(candidates, method, workers,
                                              progress_callback, cancel_event)
            else:
                records = self._hash_sequential(candidates, method,
                                                progress_callback, cancel_event)
            report.files_skipped += sum(1 for r in records if r is None)
            report.groups = group_records(r for r in records if r is not None)

        report.cancelled = _cancelled(cancel_event)
        if report.cancelled:
            logger.debug('duplicate scan cancelled; reporting partial results')
        report.total_time_seconds = time.monotonic() - t0
        return report

    def _size_filter(self, files: List[Path], min_size: int,
                     progress_callback: Optional[Callable],
                     cancel_event: Optional[threading.Event],
                     report: DuplicateReport) -> List[_Candidate]:
        """Phase 1: keep only files whose size occurs more than once."""
        by_size: Dict[int, List[_Candidate]] = {}
        total = len(files)
        processed = 0

        for filepath in files:
            if _cancelled(cancel_event):
                break
            try:
                st = os.stat(filepath)
            except OSError as e:
                logger.debug('skipping %s: %s', filepath, e)
                report.files_skipped += 1
                continue
            processed += 1
            if st.st_size >= min_size:
                by_size.setdefault(st.st_size, []).append((filepath, st.st_size, st.st_mtime))
            if progress_callback and processed % SIZING_PROGRESS_EVERY == 0:
                progress_callback('sizing', processed, total)

        if progress_callback:
            progress_callback('sizing', processed, total)

        return [c for bucket in by_size.values() if len(bucket) > 1 for c in bucket]

    def _hash_one(self, candidate: _Candidate, method: HashMethod) -> Optional[FileHashRecord]:
        filepath, size, mtime = candidate
        applied = effective_method(method, self.classifier(filepath))
        try:
            digest = compute_hash(filepath, applied,
                                  is_image=applied is HashMethod.PERCEPTUAL,
                                  chunk_size=self.config.chunk_size,
                                  algorithm=self.config.algorithm)
        except OSError as e:
            logger.debug('cannot hash %s: %s', filepath, e)
            return None
        return FileHashRecord(path=filepath, hash=digest, algorithm=applied.value,
                              size=size, modified=mtime)

    def _hash_sequential(self, candidates: List[_Candidate], method: HashMethod,
                         progress_callback: Optional[Callable],
                         cancel_event: Optional[threading.Event]) -> List[Optional[FileHashRecord]]:
        """Phase 2, one file at a time."""
        records = []
        total = len(candidates)

        for i, candidate in enumerate(candidates):
            if _cancelled(cancel_event):
                break
            records.append(self._hash_one(candidate, method))
            if progress_callback and (i + 1) % HASHING_PROGRESS_EVERY == 0:
                progress_callback('hashing', i + 1, total)

        if progress_callback:
            progress_callback('hashing', len(records), total)
        return records

    def _hash_parallel(self, candidates: List[_Candidate], method: HashMethod, workers: int,
                       progress_callback: Optional[Callable],
                       cancel_event: Optional[threading.Event]) -> List[Optional[FileHashRecord]]:
        """Phase 2 on a thread pool.

        Files are hashed concurrently but records are collected in
        submission order so grouping is deterministic.
        """
        total = len(candidates)
        # Pre-allocate to keep submission order
        records: List[Optional[FileHashRecord]] = [None] * total
        done = [False] * total
        completed = 0

        def process_one(index, candidate):
            if _cancelled(cancel_event):
                return index, None, False
            return index, self._hash_one(candidate, method), True

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(process_one, i, c) for i, c in enumerate(candidates)]

            for future in as_completed(futures):
                if future.cancelled():
                    continue
                index, record, ran = future.result()
                if not ran:
                    continue
                records[index] = record
                done[index] = True
                completed += 1
                if progress_callback and completed % HASHING_PROGRESS_EVERY == 0:
                    progress_callback('hashing', completed, total)

                if _cancelled(cancel_event):
                    for pending in futures:
                        pending.cancel()

        if progress_callback:
            progress_callback('hashing', completed, total)
        # Files never hashed because of cancellation are not failures
        return [r for r, ran in zip(records, done) if ran]


def _cancelled(cancel_event: Optional[threading.Event]) -> bool:
    return cancel_event is not None and cancel_event.is_set()


def group_records(records: Iterable[FileHashRecord]) -> List[DuplicateGroup]:
    """Bucket hashed files by hash and build ranked duplicate groups.

    Members are ordered oldest first (stable, so equal mtimes keep their
    first-seen order); groups are ordered by wasted space, largest first.
    """
    by_hash: Dict[str, List[FileHashRecord]] = {}
    for record in records:
        by_hash.setdefault(record.hash, []).append(record)

    groups = [
        DuplicateGroup(hash=digest, files=sorted(members, key=lambda r: r.modified))
        for digest, members in by_hash.items()
        if len(members) > 1
    ]
    groups.sort(key=lambda g: g.wasted_space, reverse=True)
    return groups


def find_duplicates(
    files: Iterable,
    hash_method=HashMethod.PARTIAL,
    min_size: int = 1,
    progress_callback: Optional[Callable] = None,
    workers: int = 1,
    cancel_event: Optional[threading.Event] = None,
    classifier: Optional[Callable] = None,
) -> DuplicateReport:
    """Find duplicate files among ``files`` with default settings.

    See DuplicateDetector.find_duplicates for the arguments.
    """
    detector = DuplicateDetector(classifier=classifier)
    return detector.find_duplicates(files, hash_method=hash_method, min_size=min_size,
                                    progress_callback=progress_callback, workers=workers,
                                    cancel_event=cancel_event)


def compare_files(path_a, path_b, algorithm: str = 'md5',
                  classifier: Optional[Callable] = None) -> FileComparison:
    """Compare two files by size, partial hash, full hash and, for two
    images, perceptual hash.

    The full hash is only computed when the partial hashes match, and
    nothing is hashed for files of different sizes.

    Raises:
        IOFailure: either file cannot be read.
    """
    path_a, path_b = Path(path_a), Path(path_b)
    classifier = classifier or is_image

    size_a = _file_size(path_a)
    size_b = _file_size(path_b)
    result = FileComparison(path_a=path_a, path_b=path_b, size_a=size_a,
                            size_b=size_b, same_size=size_a == size_b)
    if not result.same_size:
        return result

    try:
        pair = (partial_hash(path_a, algorithm=algorithm),
                partial_hash(path_b, algorithm=algorithm))
        result.hashes['partial'] = pair
        result.partial_match = pair[0] == pair[1]

        if result.partial_match:
            pair = (full_hash(path_a, algorithm), full_hash(path_b, algorithm))
            result.hashes['full'] = pair
            result.exact_match = pair[0] == pair[1]

        if classifier(path_a) and classifier(path_b):
            pair = (perceptual_hash(path_a), perceptual_hash(path_b))
            result.hashes['perceptual'] = pair
            result.perceptual_match = pair[0] == pair[1]
    except OSError as e:
        raise IOFailure(e.filename or path_a, e.strerror or str(e)) from e

    return result


def _file_size(filepath: Path) -> int:
    try:
        return os.stat(filepath).st_size
    except OSError as e:
        raise IOFailure(filepath, e.strerror or str(e)) from e


def format_bytes(num_bytes: int) -> str:
    """Human-readable size with up to two decimals: ``0 B``, ``1.5 KB``."""
    if num_bytes <= 0:
        return '0 B'
    units = ['B', 'KB', 'MB', 'GB', 'TB']
    size = float(num_bytes)
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024
        i += 1
    value = f'{size:.2f}'.rstrip('0').rstrip('.')
    return f'{value} {units[i]}'


def generate_report(report: DuplicateReport, max_groups: int = REPORT_MAX_GROUPS) -> str:
    """Render a duplicate report as plain text."""
    rule = '=' * REPORT_RULE_WIDTH
    thin = '-' * REPORT_RULE_WIDTH
    lines = [
        rule,
        'DUPLICATE FILE REPORT',
        rule,
        '',
        f'Files scanned: {report.scanned}',
        f'Potential duplicates (same size): {report.potential_duplicates}',
        f'Duplicate groups found: {report.duplicate_groups}',
        f'Total duplicate files: {report.total_duplicates}',
        f'Wasted space: {format_bytes(report.total_wasted_space)}',
        f'Hash method: {report.hash_method}',
        '',
    ]

    if report.groups:
        lines += [thin, 'DUPLICATE GROUPS (sorted by wasted space)', thin, '']
        for group in report.groups[:max_groups]:
            lines.append(f'[{group.count} files, {format_bytes(group.wasted_space)} wasted]')
            lines.append(f'  Original: {group.original.path}')
            for dup in group.duplicates:
                lines.append(f'  Duplicate: {dup.path}')
            lines.append('')
        if len(report.groups) > max_groups:
            lines.append(f'... and {len(report.groups) - max_groups} more groups')
    else:
        lines.append('No duplicates found!')

    return '\n'.join(lines)
