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
Per-sentence pipeline: tokenize, count, filter, throttle, write.
"""
import logging
from collections import Counter
from datetime import datetime
from enum import Enum
from typing import Callable

try:
    from .. import config
    from ..parsers.sentence import tokenize
    from ..parsers.nmea_handler import format_timestamp
except ImportError:
    import config
    from parsers.sentence import tokenize
    from parsers.nmea_handler import format_timestamp

from .rotation import utc_now

logger = logging.getLogger(__name__)


class Outcome(Enum):
    IGNORED = "ignored"        # not a string / empty
    FILTERED = "filtered"      # sentence type not enabled
    THROTTLED = "throttled"    # dropped by the governor
    WRITTEN = "written"
    FAILED = "failed"          # accepted but the write failed


class SentenceClassifier:
    """
    Applies the allow rules and the throttle governor to each sentence and
    hands accepted ones to the writer.

    Args:
        options: LoggerOptions
        governor: ThrottleGovernor for this run
        writer: RotatingLogWriter for this run
        now: UTC clock used for the line timestamp
    """

    def __init__(self, options, governor, writer, now: Callable[[], datetime] = utc_now):
        self.options = options
        self.governor = governor
        self.writer = writer
        self._now = now
        self.sentence_stats = Counter()

    def should_log(self, sentence_type: str) -> bool:
        if self.options.log_all:
            return True
        if self.options.is_type_enabled(sentence_type):
            return True
        if self.options.log_unknown and sentence_type not in config.SENTENCE_TYPES:
            return True
        return False

    def format_line(self, sentence: str) -> str:
        text = sentence.strip()
        if self.options.include_timestamp:
            return f"{format_timestamp(self._now())} {text}\n"
        return f"{text}\n"

    def handle(self, sentence) -> Outcome:
        """Processes one incoming sentence."""
        if not sentence or not isinstance(sentence, str):
            return Outcome.IGNORED

        header = tokenize(sentence)
        self.sentence_stats[header.full_code] += 1

        if not self.should_log(header.sentence_type):
            return Outcome.FILTERED
        if not self.governor.decide(header, header.sentence_type):
            return Outcome.THROTTLED

        if not self.writer.append(self.format_line(sentence)):
            return Outcome.FAILED
        return Outcome.WRITTEN

    def top_codes(self, count=config.STATUS_TOP_CODES):
        """Most frequent full codes, e.g. [('GPRMC', 120), ('AIVDM', 80)]."""
        return self.sentence_stats.most_common(count)

    def reset(self):
        self.sentence_stats.clear()
