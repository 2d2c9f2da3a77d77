"""Tests for photosift/log.py -- CLI color, timestamps, debug routing."""

import io
import logging
import re

import pytest

from photosift import log


@pytest.fixture(autouse=True)
def _reset_log_state():
    """Restore log module state after each test."""
    log.set_color_enabled(False)
    yield
    log.set_color_enabled(False)


_CLI_FUNCS = [
    log.cli_header,
    log.cli_success,
    log.cli_warning,
    log.cli_error,
    log.cli_info,
    log.cli_dim,
    log.cli_bold,
]


# ---------------------------------------------------------------------------
# CLI color
# ---------------------------------------------------------------------------

class TestCLIColorEnabled:
    """All CLI functions return ANSI escape codes when color is enabled."""

    @pytest.fixture(autouse=True)
    def _enable_color(self):
        log.set_color_enabled(True)
        yield

    @pytest.mark.parametrize('func', _CLI_FUNCS)
    def test_wraps_in_ansi(self, func):
        result = func('text')
        assert result.startswith('\033[')
        assert result.endswith('\033[0m')
        assert 'text' in result

    def test_cli_separator(self):
        result = log.cli_separator()
        assert '\033[' in result
        assert '─' * 60 in result

    def test_color_enabled_flag(self):
        assert log.color_enabled()


class TestCLIColorDisabled:
    """All CLI functions return plain text when color is disabled."""

    @pytest.mark.parametrize('func', _CLI_FUNCS)
    def test_plain(self, func):
        assert func('text') == 'text'

    def test_cli_separator_plain(self):
        assert log.cli_separator() == '─' * 60

    def test_empty_string(self):
        for func in _CLI_FUNCS:
            assert func('') == ''

    def test_unicode(self):
        assert log.cli_header('Größe 📷') == 'Größe 📷'


# ---------------------------------------------------------------------------
# Log timestamp format
# ---------------------------------------------------------------------------

class TestLogTimestamps:
    """log_info/warn/error match [YYYY-MM-DD HH:MM:SS] [LEVEL] format."""

    _TS_PATTERN = re.compile(
        r'^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] \[(INFO|WARN|ERROR)\]\s+.+$'
    )

    def test_log_info_format(self):
        result = log.log_info('test message')
        assert self._TS_PATTERN.match(result), f"Unexpected format: {result!r}"
        assert result.endswith('[INFO]  test message')

    def test_log_warn_format(self):
        result = log.log_warn('warning here')
        assert self._TS_PATTERN.match(result)
        assert result.endswith('[WARN]  warning here')

    def test_log_error_format(self):
        result = log.log_error('error here')
        assert self._TS_PATTERN.match(result)
        assert result.endswith('[ERROR] error here')

    def test_never_colored(self):
        log.set_color_enabled(True)
        assert '\033[' not in log.log_info('plain')

    def test_large_message(self):
        big = 'z' * 10_000
        assert big in log.log_info(big)


# ---------------------------------------------------------------------------
# Debug logging
# ---------------------------------------------------------------------------

class TestDebugLogging:
    def test_routes_library_records(self):
        stream = io.StringIO()
        handler = log.enable_debug_logging(stream)
        try:
            logging.getLogger('photosift.dedup.engine').debug('skipping %s', 'x.bin')
        finally:
            logging.getLogger('photosift').removeHandler(handler)
        assert 'DEBUG photosift.dedup.engine: skipping x.bin' in stream.getvalue()

    def test_other_loggers_untouched(self):
        stream = io.StringIO()
        handler = log.enable_debug_logging(stream)
        try:
            logging.getLogger('somebody.else').warning('not ours')
        finally:
            logging.getLogger('photosift').removeHandler(handler)
        assert stream.getvalue() == ''
