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
Sentence tokenizer.

Splits a raw NMEA0183 line on the field delimiter and extracts the talker ID,
sentence type and full code from the header field::

    $GPRMC,123519,A,...   ->  talker 'GP', type 'RMC', full code 'GPRMC'
    !AIVDM,1,1,,A,...     ->  talker 'AI', type 'VDM', full code 'AIVDM'

Lines that cannot be classified produce a header whose type and code are
``config.UNKNOWN_SENTENCE`` rather than raising.
"""
import string
from dataclasses import dataclass
from itertools import takewhile
from typing import Optional, Tuple

try:
    from .. import config
except ImportError:
    import config

_HEADER_LETTERS = frozenset(string.ascii_uppercase)


@dataclass(frozen=True)
class SentenceHeader:
    talker_id: Optional[str]
    sentence_type: str
    full_code: str
    fields: Tuple[str, ...] = ()

    @property
    def recognized(self) -> bool:
        return self.sentence_type != config.UNKNOWN_SENTENCE

    def has_fields(self, count: int) -> bool:
        """True if the sentence carries at least `count` comma-separated fields."""
        return len(self.fields) >= count

    def field(self, index: int, default: str = '') -> str:
        if index < len(self.fields):
            return self.fields[index]
        return default


UNRECOGNIZED = SentenceHeader(None, config.UNKNOWN_SENTENCE, config.UNKNOWN_SENTENCE)


def tokenize(sentence) -> SentenceHeader:
    """
    Tokenizes a raw sentence.

    Args:
        sentence: raw NMEA0183 line (leading/trailing whitespace is ignored)

    Returns:
        SentenceHeader: type/code are UNKNOWN when the header is not
        '$' or '!' followed by at least 2 (code) / 4 (type) capital letters.
    """
    if not isinstance(sentence, str):
        return UNRECOGNIZED
    text = sentence.strip()
    if len(text) < config.MIN_SENTENCE_LENGTH:
        return UNRECOGNIZED

    fields = tuple(text.split(config.FIELD_DELIMITER))
    header = fields[0]
    if header[0] not in config.SENTENCE_START_CHARS:
        return SentenceHeader(None, config.UNKNOWN_SENTENCE, config.UNKNOWN_SENTENCE, fields)

    letters = ''.join(takewhile(lambda c: c in _HEADER_LETTERS, header[1:]))
    full_code = letters[:5] if len(letters) >= 2 else config.UNKNOWN_SENTENCE
    if len(letters) < 4:
        return SentenceHeader(None, config.UNKNOWN_SENTENCE, full_code, fields)

    return SentenceHeader(letters[:2], letters[2:6], full_code, fields)


def sentence_type_of(header_field: str) -> str:
    """Sentence type as read by the log analyzer: characters 3..5 of the header."""
    if len(header_field) >= 6:
        return header_field[3:6]
    return header_field[3:]
