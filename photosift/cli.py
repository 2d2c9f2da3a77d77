"""CLI interface for PhotoSift -- exif, dupes, compare, info subcommands."""

import json
import sys
from pathlib import Path

import click

import photosift
from photosift.config import DetectorConfig
from photosift.dedup import (
    DuplicateDetector,
    HashMethod,
    collect_files,
    compare_files,
    format_bytes,
    generate_report,
)
from photosift.errors import IOFailure
from photosift.exif import EXIF_EXTENSIONS, ExifExtractor, summarize, to_flat_metadata
from photosift.log import (
    cli_bold,
    cli_dim,
    cli_error,
    cli_header,
    cli_info,
    cli_separator,
    cli_success,
    cli_warning,
    enable_debug_logging,
    log_info,
    log_warn,
)
from photosift.metadata import extract_file_metadata


@click.group()
@click.version_option(version=photosift.__version__, prog_name='photosift')
def main():
    """PhotoSift -- EXIF metadata and duplicate file finder.

    Read camera, lens, exposure and GPS metadata from JPEG/TIFF photos
    and find duplicate files in a directory tree.
    """
    pass


@main.command()
@click.argument('path', type=click.Path(exists=True))
@click.option('--flat', is_flag=True, help='Print flattened key/value metadata.')
@click.option('--json-out', type=click.Path(), help='Write results as JSON to file.')
def exif(path, flat, json_out):
    """Show EXIF metadata for JPEG/TIFF files.

    PATH can be a single file or a directory to search recursively.
    """
    input_path = Path(path)
    files = collect_files(input_path, extensions=EXIF_EXTENSIONS)
    if not files:
        click.echo(f'No JPEG/TIFF files found in {input_path}')
        return

    extractor = ExifExtractor()
    results_json = []

    for filepath in files:
        result = extractor.extract(filepath)
        click.echo(cli_header(str(filepath)))

        if result.error:
            click.echo('  ' + cli_error(f'ERROR: {result.error}'))
        elif not result.has_exif:
            click.echo('  ' + cli_dim(result.reason or 'No EXIF data found'))
        elif flat:
            for key, value in to_flat_metadata(result).items():
                click.echo(f'  {key}: {value}')
        else:
            for line in summarize(result).splitlines():
                click.echo(f'  {line}')

        if result.skipped:
            click.echo('  ' + cli_warning(f'{len(result.skipped)} tag(s) skipped'))

        if json_out:
            results_json.append({
                'file': str(filepath),
                'supported': result.supported,
                'has_exif': result.has_exif,
                'exif': result.record.to_dict() if result.record else None,
                'reason': result.reason,
                'error': result.error,
                'skipped_tags': len(result.skipped),
            })

    if json_out:
        with open(json_out, 'w') as f:
            json.dump(results_json, f, indent=2)
        click.echo(f'\nResults written to {json_out}')


@main.command()
@click.argument('path', type=click.Path(exists=True))
@click.option('--method', type=click.Choice([m.value for m in HashMethod]),
              help='Hashing strategy (default: partial).')
@click.option('--min-size', type=int, help='Ignore files smaller than this many bytes.')
@click.option('--workers', '-w', type=int,
              help='Number of parallel hashing threads (default: 1).')
@click.option('--config', 'config_path', type=click.Path(exists=True),
              help='JSON settings file.')
@click.option('--json-out', type=click.Path(), help='Write the report as JSON to file.')
@click.option('--log', type=click.Path(), help='Write log to file.')
@click.option('--verbose', '-v', is_flag=True, help='Show progress and skipped files.')
def dupes(path, method, min_size, workers, config_path, json_out, log, verbose):
    """Find duplicate files.

    PATH can be a single file or a directory to scan recursively.
    Files are grouped by size first, then by hash.
    """
    try:
        config = DetectorConfig.from_json(config_path) if config_path else DetectorConfig.default()
    except (OSError, ValueError) as e:
        click.echo(cli_error(f'Error: invalid config {config_path}: {e}'), err=True)
        sys.exit(1)

    if method:
        config.hash_method = HashMethod.parse(method)
    if min_size is not None:
        config.min_size = min_size
    if workers is not None:
        config.workers = max(1, workers)

    if verbose:
        enable_debug_logging()

    log_file = open(log, 'w') if log else None

    def log_msg(msg, styled=None):
        click.echo(styled if styled is not None else msg)
        if log_file:
            log_file.write(log_info(msg) + '\n')
            log_file.flush()

    def progress(phase, processed, total):
        if verbose:
            click.echo(cli_dim(f'  {phase}: {processed}/{total}'))

    workers_str = f', {config.workers} workers' if config.workers > 1 else ''
    log_msg(f'PhotoSift v{photosift.__version__} — {config.hash_method.value} hashing{workers_str}')

    detector = DuplicateDetector(config)
    report = detector.scan(Path(path), progress_callback=progress)

    click.echo(cli_separator())
    for line in generate_report(report).splitlines():
        log_msg(line)
    click.echo(cli_separator())

    if report.groups:
        log_msg(f'{report.total_duplicates} duplicate(s), '
                f'{format_bytes(report.total_wasted_space)} reclaimable',
                cli_warning(f'{report.total_duplicates} duplicate(s), '
                            f'{format_bytes(report.total_wasted_space)} reclaimable'))
    else:
        log_msg('No duplicates found', cli_success('No duplicates found'))
    if report.files_skipped:
        click.echo(cli_dim(f'{report.files_skipped} file(s) could not be read'))
        if log_file:
            log_file.write(log_warn(f'{report.files_skipped} file(s) could not be read') + '\n')
    log_msg(f'Done in {report.total_time_seconds:.1f}s')

    if json_out:
        with open(json_out, 'w') as f:
            json.dump(report.to_dict(), f, indent=2)
        click.echo(f'Report written to {json_out}')

    if log_file:
        log_file.close()


@main.command()
@click.argument('file_a', type=click.Path(exists=True, dir_okay=False))
@click.argument('file_b', type=click.Path(exists=True, dir_okay=False))
def compare(file_a, file_b):
    """Compare two files by size and content hashes."""
    try:
        result = compare_files(file_a, file_b)
    except IOFailure as e:
        click.echo(cli_error(f'Error: {e}'), err=True)
        sys.exit(1)

    def yes_no(flag):
        return cli_success('yes') if flag else cli_dim('no')

    click.echo(f'A: {result.path_a} ({format_bytes(result.size_a)})')
    click.echo(f'B: {result.path_b} ({format_bytes(result.size_b)})')
    click.echo(f'Same size:        {yes_no(result.same_size)}')
    click.echo(f'Partial match:    {yes_no(result.partial_match)}')
    click.echo(f'Exact match:      {yes_no(result.exact_match)}')
    if 'perceptual' in result.hashes:
        click.echo(f'Perceptual match: {yes_no(result.perceptual_match)}')

    if result.exact_match:
        click.echo(cli_bold('\nFiles are identical.'))


@main.command()
@click.argument('path', type=click.Path(exists=True))
def info(path):
    """Show file metadata, including EXIF for JPEG/TIFF images."""
    filepath = Path(path)

    if filepath.is_dir():
        click.echo('Error: info command requires a single file, not a directory.', err=True)
        sys.exit(1)

    meta = extract_file_metadata(filepath, exif_extractor=ExifExtractor())
    click.echo(cli_header(f'File: {meta.pop("filename")}'))
    for key, value in meta.items():
        click.echo(f'{cli_info(key)}: {value}')


if __name__ == '__main__':
    main()
