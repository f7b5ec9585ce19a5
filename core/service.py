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
Logger lifecycle.

LoggerService builds one governor, writer, classifier and store per run,
subscribes the per-sentence handler on the host bus and runs the two
periodic tasks (status refresh, throttle sweep). The host sees two narrow
interfaces only: the bus event carrying raw sentences and a status sink
taking one-line strings.
"""
import logging
import os
import time
from datetime import datetime
from typing import Callable, Optional

try:
    from .. import config
    from ..locales.strings import STATUS
except ImportError:
    import config
    from locales.strings import STATUS

from .classifier import SentenceClassifier
from .event_bus import EventBus
from .query import LogStore
from .rotation import RotatingLogWriter, utc_now
from .scheduler import PeriodicTask
from .throttle import ThrottleGovernor

logger = logging.getLogger(__name__)


def format_status(port, date, part, size_bytes, throttled, dedup, top_codes):
    """
    One-line status, e.g.::

        API :3033 | 2024-05-01 p1 12.3MB | thr:40 | dup:210 | GPRMC:120 AIVDM:80
    """
    if not top_codes:
        return STATUS['listening']
    part_str = f" p{part}" if part > 0 else ''
    size_mb = size_bytes / config.BYTES_PER_MB
    thr = f" | thr:{throttled}" if throttled > 0 else ''
    dup = f" | dup:{dedup}" if dedup > 0 else ''
    codes = ' '.join(f"{code}:{count}" for code, count in top_codes)
    return f"API :{port or '?'} | {date or '-'}{part_str} {size_mb:.1f}MB{thr}{dup} | {codes}"


class LoggerService:
    """
    Args:
        options: LoggerOptions
        bus: host sentence bus (a private EventBus if omitted)
        status_sink: receives status lines and operator error reports
        now: UTC wall clock for file dates and line timestamps
        clock: monotonic clock for throttling
    """

    def __init__(self, options, bus: Optional[EventBus] = None,
                 status_sink: Optional[Callable[[str], None]] = None,
                 now: Callable[[], datetime] = utc_now,
                 clock: Callable[[], float] = time.monotonic):
        self.options = options
        self.bus = bus if bus is not None else EventBus()
        self.status_sink = status_sink or (lambda message: logger.info(message))
        self.log_dir = options.resolved_log_directory
        self.api_port = None

        self.governor = ThrottleGovernor.from_options(options, clock=clock)
        self.writer = RotatingLogWriter(self.log_dir, options.max_bytes, now=now,
                                        on_error=self._report_error)
        self.classifier = SentenceClassifier(options, self.governor, self.writer, now=now)
        self.store = LogStore(self.log_dir, self.writer, self.classifier, self.governor)

        self._unsubscribe = None
        self._tasks = [
            PeriodicTask('status', config.STATUS_INTERVAL_SEC, self.update_status),
            PeriodicTask('throttle-sweep', config.CLEANUP_INTERVAL_SEC, self.governor.sweep),
        ]

    @property
    def running(self) -> bool:
        return self._unsubscribe is not None

    def start(self, loop=None):
        """Subscribes to the bus and starts the periodic tasks (needs an event loop)."""
        if self.running:
            return
        os.makedirs(self.log_dir, exist_ok=True)
        self._unsubscribe = self.bus.subscribe(config.SENTENCE_EVENT, self.handle_sentence)
        for task in self._tasks:
            task.start(loop)
        logger.info(f"NMEA0183 logger started, writing to {self.log_dir}")

    def handle_sentence(self, sentence):
        return self.classifier.handle(sentence)

    def status_line(self) -> str:
        date, part, size = self.writer.current_file()
        return format_status(
            self.api_port, date, part, size,
            self.governor.throttled_count, self.governor.dedup_count,
            self.classifier.top_codes(),
        )

    def update_status(self):
        self.status_sink(self.status_line())

    def _report_error(self, message):
        self.status_sink(message)

    def stop(self):
        """Unsubscribes, stops the tasks and flushes/closes the active file. Idempotent."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in self._tasks:
            task.stop()
        self.writer.close()
        self.classifier.reset()
        self.governor.reset()
        logger.info("NMEA0183 logger stopped")
