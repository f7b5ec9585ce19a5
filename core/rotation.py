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
Rotating log writer.

One file per UTC day, split into parts once the configured size is reached::

    nmea0183_2024-05-01.log
    nmea0183_2024-05-01_part1.log
    nmea0183_2024-05-01_part2.log

The rotation check runs before every append. Existing files are appended to
and their on-disk size is taken over, so the size limit survives restarts.
"""
import logging
import os
import threading
from datetime import datetime, timezone
from typing import Callable, Optional, Tuple

try:
    from .. import config
    from ..locales.strings import ERRORS
except ImportError:
    import config
    from locales.strings import ERRORS

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def log_filename(date_str: str, part: int = 0) -> str:
    """File name for a date (YYYY-MM-DD) and part index."""
    suffix = f"{config.LOG_PART_SEPARATOR}{part}" if part > 0 else ''
    return f"{config.LOG_FILE_PREFIX}{date_str}{suffix}{config.LOG_FILE_SUFFIX}"


def _read_text(path) -> str:
    with open(path, 'r', encoding=config.LOG_FILE_ENCODING, errors='replace') as f:
        return f.read()


class RotatingLogWriter:
    """
    Owns the single writable log file of a log directory.

    Args:
        log_dir: directory for log files (created on first open)
        max_bytes: size threshold for starting a new part, 0 = unlimited
        now: UTC clock returning an aware datetime
        on_error: called with a one-line message when opening or writing fails
    """

    def __init__(self, log_dir, max_bytes: int = 0,
                 now: Callable[[], datetime] = utc_now,
                 on_error: Optional[Callable[[str], None]] = None):
        self.log_dir = os.fspath(log_dir)
        self.max_bytes = max(int(max_bytes or 0), 0)
        self._now = now
        self._on_error = on_error
        self._lock = threading.RLock()

        self._handle = None
        self._path: Optional[str] = None
        self._date: Optional[str] = None
        self._part = 0
        self._size = 0

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    def current_file(self) -> Tuple[Optional[str], int, int]:
        """Returns (date, part index, tracked size in bytes)."""
        with self._lock:
            return self._date, self._part, self._size

    @property
    def current_filename(self) -> Optional[str]:
        with self._lock:
            if self._date is None:
                return None
            return log_filename(self._date, self._part)

    @property
    def current_path(self) -> Optional[str]:
        with self._lock:
            return self._path

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._handle is not None

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    def append(self, line: str) -> bool:
        """
        Appends one formatted line, rotating first if needed.

        Returns:
            bool: True if written. A failed write is reported and dropped.
        """
        with self._lock:
            handle = self._ensure_handle()
            if handle is None:
                return False
            try:
                handle.write(line)
            except (OSError, ValueError) as e:
                self._fail(ERRORS['write_failed'].format(path=self._path, error=e))
                return False
            self._size += len(line.encode(config.LOG_FILE_ENCODING))
            return True

    def _ensure_handle(self):
        today = self._now().astimezone(timezone.utc).date().isoformat()

        if self._date != today:
            self._open(today, 0)
        elif self.max_bytes > 0 and self._size >= self.max_bytes:
            self._open(today, self._part + 1)
        elif self._handle is None:
            self._open(today, self._part)

        return self._handle

    def _open(self, date_str: str, part: int):
        self._close_handle()
        try:
            os.makedirs(self.log_dir, exist_ok=True)
            path = os.path.join(self.log_dir, log_filename(date_str, part))
            size = os.path.getsize(path) if os.path.exists(path) else 0
            # Resumed parts that are already full are skipped
            while self.max_bytes > 0 and size >= self.max_bytes:
                part += 1
                path = os.path.join(self.log_dir, log_filename(date_str, part))
                size = os.path.getsize(path) if os.path.exists(path) else 0
            handle = open(path, 'a', encoding=config.LOG_FILE_ENCODING, newline='')
        except OSError as e:
            self._fail(ERRORS['open_failed'].format(path=self.log_dir, error=e))
            return

        self._handle = handle
        self._path = path
        self._date = date_str
        self._part = part
        self._size = size
        logger.info(f"Logging to {path} ({size} bytes)")

    def _fail(self, message: str):
        logger.error(message)
        self._close_handle()
        if self._on_error is not None:
            self._on_error(message)

    def _close_handle(self):
        handle, self._handle = self._handle, None
        if handle is None:
            return
        try:
            handle.close()
        except OSError as e:
            message = ERRORS['close_failed'].format(path=self._path, error=e)
            logger.error(message)
            if self._on_error is not None:
                self._on_error(message)

    def flush(self):
        with self._lock:
            if self._handle is None:
                return
            try:
                self._handle.flush()
            except OSError as e:
                self._fail(ERRORS['write_failed'].format(path=self._path, error=e))

    def close(self):
        """Flushes and closes the active file. The next append starts a new rotation cycle."""
        with self._lock:
            self._close_handle()
            self._date = None
            self._path = None
            self._part = 0
            self._size = 0

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def read_snapshot(self, path) -> str:
        """
        Reads a log file consistently with concurrent appends.

        When `path` is the active file, pending writes are flushed and the
        writer lock is held for the whole read, so no rotation or append can
        interleave with it. Other files are read without the lock.
        """
        path = os.path.abspath(os.fspath(path))
        if self._is_active(self._path, path):
            with self._lock:
                if self._handle is not None and self._is_active(self._path, path):
                    self.flush()
                    return _read_text(path)
        return _read_text(path)

    @staticmethod
    def _is_active(active_path, path) -> bool:
        return bool(active_path) and os.path.abspath(active_path) == path
