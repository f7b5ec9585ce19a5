#!/usr/bin/env python3
# NMEA0183 Logger - marine sentence logger and voyage analyzer
# Copyright (C) 2024 NMEA0183 Logger Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Query interface over a log directory.

Used by the HTTP adapter and the CLI. All file names coming from clients go
through resolve(), which strips any path component and requires the log file
naming pattern, so no path outside the log directory can be reached.
"""
import logging
import os
import re
from datetime import datetime, timezone

try:
    from .. import config
    from ..locales.strings import ERRORS
    from ..parsers.nmea_handler import format_timestamp
except ImportError:
    import config
    from locales.strings import ERRORS
    from parsers.nmea_handler import format_timestamp

from .analyzer import analyze
from .helpers import round_half_up
from .errors import InvalidLogNameError, LogNotFoundError

logger = logging.getLogger(__name__)

LOG_FILE_RE = re.compile(config.LOG_FILE_PATTERN)


def validate_filename(name):
    """
    Returns the bare file name if it is a valid log file name, else None.

    Any directory part ('../', absolute paths, Windows separators) is removed
    before matching.
    """
    if not name or not isinstance(name, str):
        return None
    base = os.path.basename(name.replace('\\', '/'))
    return base if LOG_FILE_RE.match(base) else None


def log_date(name):
    """Date part of a log file name: nmea0183_2024-05-01_part2.log -> 2024-05-01"""
    match = LOG_FILE_RE.match(name)
    return match.group(1) if match else None


class LogStore:
    """
    Args:
        log_dir: log directory
        writer: active RotatingLogWriter (optional); reads of the active file
            go through its snapshot so they never interleave with a rotation
        classifier: SentenceClassifier (optional), source of sentence statistics
        governor: ThrottleGovernor (optional), source of throttle counters
    """

    def __init__(self, log_dir, writer=None, classifier=None, governor=None):
        self.log_dir = os.fspath(log_dir)
        self.writer = writer
        self.classifier = classifier
        self.governor = governor

    def resolve(self, name):
        """
        Full path of a log file.

        Raises:
            InvalidLogNameError: name does not match the naming pattern
            LogNotFoundError: file does not exist
        """
        filename = validate_filename(name)
        if filename is None:
            raise InvalidLogNameError(ERRORS['invalid_filename'])
        path = os.path.join(self.log_dir, filename)
        if not os.path.isfile(path):
            raise LogNotFoundError(ERRORS['not_found'])
        return path

    def read_text(self, name):
        path = self.resolve(name)
        if self.writer is not None:
            return self.writer.read_snapshot(path)
        with open(path, 'r', encoding=config.LOG_FILE_ENCODING, errors='replace') as f:
            return f.read()

    def list_logs(self):
        """
        Known log files, newest name first.

        Returns:
            list of dicts: {name, size, modified, date}
        """
        if not os.path.isdir(self.log_dir):
            return []
        names = sorted((n for n in os.listdir(self.log_dir) if LOG_FILE_RE.match(n)), reverse=True)
        files = []
        for name in names:
            try:
                stat = os.stat(os.path.join(self.log_dir, name))
            except FileNotFoundError:
                continue
            files.append({
                'name': name,
                'size': stat.st_size,
                'modified': format_timestamp(datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)),
                'date': log_date(name),
            })
        return files

    def writer_stats(self):
        """Statistics of the running logger."""
        current_file = None
        size = 0
        if self.writer is not None:
            current_file = self.writer.current_filename
            size = self.writer.current_file()[2]
        governor = self.governor
        return {
            'log_directory': self.log_dir,
            'current_log_file': current_file,
            'current_file_size_mb': round_half_up(size / config.BYTES_PER_MB, 2),
            'throttled_sentences': governor.throttled_count if governor else 0,
            'dedup_sentences': governor.dedup_count if governor else 0,
            'tracked_mmsis': governor.tracked_vessels if governor else 0,
            'sentence_stats': dict(self.classifier.sentence_stats) if self.classifier else {},
        }

    def analyze(self, name):
        """NavigationSummary of one file as a dict, plus its file name."""
        summary = analyze(self.read_text(name)).to_dict()
        summary['filename'] = validate_filename(name)
        return summary

    def read_lines(self, name, filter_text=None, last=0):
        """
        Raw non-blank lines of a log file.

        Args:
            filter_text: case-insensitive substring filter
            last: keep only the last N matching lines (0 = all)
        """
        lines = [line for line in self.read_text(name).split('\n') if line.strip()]
        total = len(lines)
        if filter_text:
            needle = filter_text.upper()
            lines = [line for line in lines if needle in line.upper()]
        if last and last > 0:
            lines = lines[-last:]
        return {
            'filename': validate_filename(name),
            'total_lines': total,
            'returned_lines': len(lines),
            'filter': filter_text or None,
            'lines': lines,
        }

    def delete(self, name):
        """
        Deletes a log file. The active file is closed first so the writer
        starts a fresh file on the next append.
        """
        path = self.resolve(name)
        active = self.writer.current_path if self.writer is not None else None
        if active and os.path.abspath(active) == os.path.abspath(path):
            self.writer.close()
        os.remove(path)
        logger.info(f"Deleted log file {path}")
        return {'deleted': os.path.basename(path)}
